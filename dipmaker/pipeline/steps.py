"""Plan-step recording for a packaging run.

Each stage of `build_package` appends a `PlanStep`; the whole plan is logged at
debug level once the package is written.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from dipmaker.core.logger import setup_logger

logger = setup_logger("dipmaker.pipeline")


@dataclass(frozen=True)
class PlanStep:
    name: str
    details: Dict[str, Any]


def record_step(steps: List[PlanStep], name: str, **details: Any) -> None:
    steps.append(PlanStep(name=name, details=details))


def describe_step(step: PlanStep) -> str:
    if not step.details:
        return step.name
    details = ", ".join(f"{key}={value}" for key, value in sorted(step.details.items()))
    return f"{step.name}({details})"


def log_plan_steps(package_id: str, steps: List[PlanStep]) -> None:
    if not steps:
        return
    summary = " -> ".join(step.name for step in steps)
    logger.debug("Packaging plan for %s: %s", package_id, summary)
    for step in steps:
        logger.debug("  %s", describe_step(step))
