"""Build one dissemination package from a submission directory.

Source layout::

    <source>/metadata/mets.xml      rendered structural template
    <source>/metadata/<base>.xml    finding aid referenced by the template
    <source>/data/...               files, laid out by container path

Output layout::

    <output>/data/...               derivative targets (written by workers)
    <output>/metadata/<base>.xml    finding aid with digital-object references
    <output>/metadata/mets.xml      structural metadata
    <output>/jobs/services/<stage>/ job queue
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Callable, Dict, List, Optional, Tuple

from tqdm import tqdm

from dipmaker.config.settings import PackageOptions
from dipmaker.core.errors import BaseIdentifierError, UnsupportedObjectTypeError
from dipmaker.core.logger import setup_logger
from dipmaker.core.models import ArchivalPath, Component, Job
from dipmaker.derivatives.planner import DerivativePlanner, PageCounter, new_job_id
from dipmaker.finding_aid import ContainerPathIndex, FindingAid, PathCollision, resolve_section_paths
from dipmaker.jobs.fs import replace_write
from dipmaker.jobs.writer import JobQueue
from dipmaker.metadata.mets import StructuralTemplate
from dipmaker.metadata.structure import Section, StructureBuilder

from .discovery import FileDiscovery, MimetypesDiscovery
from .steps import PlanStep, log_plan_steps, record_step

logger = setup_logger(__name__)

DATA_DIR = "data"
METADATA_DIR = "metadata"
TEMPLATE_NAME = "mets.xml"


@dataclass(frozen=True)
class PackageLayout:
    source: Path
    output: Path

    @property
    def source_data(self) -> Path:
        return self.source / DATA_DIR

    @property
    def template_path(self) -> Path:
        return self.source / METADATA_DIR / TEMPLATE_NAME

    @property
    def output_data(self) -> Path:
        return self.output / DATA_DIR

    @property
    def output_metadata(self) -> Path:
        return self.output / METADATA_DIR


@dataclass
class PackageResult:
    base_id: str
    output_id: str
    structural_metadata_path: Path
    finding_aid_path: Optional[Path] = None
    sections: List[Section] = field(default_factory=list)
    jobs: List[Job] = field(default_factory=list)
    collisions: List[PathCollision] = field(default_factory=list)
    steps: List[PlanStep] = field(default_factory=list)

    @property
    def job_count(self) -> int:
        return len(self.jobs)


def path_directory(root: Path, path: ArchivalPath) -> Path:
    return root.joinpath(path.base, *path.tokens)


def check_object_type(options: PackageOptions) -> None:
    if options.object_type not in options.supported_object_types:
        supported = ", ".join(options.supported_object_types)
        raise UnsupportedObjectTypeError(
            f"Unsupported object type {options.object_type!r} (supported: {supported})"
        )


def load_template(layout: PackageLayout, required: bool) -> Optional[StructuralTemplate]:
    path = layout.template_path
    if not path.is_file():
        if required:
            raise BaseIdentifierError(f"No structural template found at {path}")
        return None
    template = StructuralTemplate.load(path)
    template.require_marker()
    return template


def single_pdf_stem(discovery: FileDiscovery, data_root: Path) -> str:
    pdfs = [f for f in discovery.list_files(data_root) if f.mime_type == "application/pdf"]
    if len(pdfs) != 1:
        raise BaseIdentifierError(
            f"Cannot determine a base identifier: expected one PDF in {data_root}, found {len(pdfs)}"
        )
    return pdfs[0].path.stem


class PackageBuilder:
    """Runs the per-directory loop: discover, plan, enqueue, record."""

    def __init__(
        self,
        layout: PackageLayout,
        discovery: FileDiscovery,
        planner: DerivativePlanner,
        queue: JobQueue,
        structure: StructureBuilder,
    ):
        self.layout = layout
        self.discovery = discovery
        self.planner = planner
        self.queue = queue
        self.structure = structure
        self.jobs: List[Job] = []

    def package_directory(
        self,
        component: Optional[Component],
        path: ArchivalPath,
        directory: Path,
        legacy_directory: Optional[Path] = None,
    ) -> Optional[Section]:
        """Plan and enqueue one directory; None when it holds no eligible file."""
        located_at = None
        files = self.discovery.list_files(directory)
        if not files and legacy_directory is not None:
            files = self.discovery.list_files(legacy_directory)
            if files:
                logger.info("Reading %s from legacy directory %s", path, legacy_directory)
                located_at = legacy_directory
        if not files:
            logger.debug("No eligible files for %s", path)
            return None

        output_directory = self.layout.output_data / directory.relative_to(self.layout.source_data)
        existing = self.discovery.list_files(output_directory)
        jobs = self.planner.plan(
            files,
            existing_outputs=existing,
            located_at=located_at,
            logical_dir=PurePosixPath(path.base, *path.tokens) if located_at else None,
        )
        self.queue.enqueue_all(jobs)
        self.jobs.extend(jobs)
        return self.structure.add_section(component, path, jobs)


def build_package(
    source_dir: Path,
    output_dir: Path,
    options: Optional[PackageOptions] = None,
    discovery: Optional[FileDiscovery] = None,
    page_counter: Optional[PageCounter] = None,
    show_progress: bool = False,
    id_factory: Optional[Callable[[], str]] = None,
) -> PackageResult:
    """Turn the submission at `source_dir` into a dissemination package at `output_dir`.

    Every fatal check (object type, template, finding-aid reference, base
    identifier) runs before the first job is enqueued. Jobs already enqueued for
    earlier directories are not rolled back when a later queue write fails.
    """
    options = options or PackageOptions.from_env()
    layout = PackageLayout(Path(source_dir), Path(output_dir))
    discovery = discovery or MimetypesDiscovery(options.allowed_mime_types, options.subdirectory)
    steps: List[PlanStep] = []

    check_object_type(options)

    if options.object_type == "monograph":
        template = load_template(layout, required=False)
        base_id = (template.object_id() if template else None) or single_pdf_stem(discovery, layout.source_data)
        template = template or StructuralTemplate.blank(base_id)
        output_id = base_id
        finding_aid = None
        record_step(steps, "monograph", base=base_id)
    else:
        template = load_template(layout, required=True)
        finding_aid = FindingAid.load(template.finding_aid_path())
        base_id = finding_aid.base_name
        output_id = template.object_id() or base_id
        record_step(steps, "load_finding_aid", path=str(finding_aid.path), base=base_id)

    planner = DerivativePlanner(
        layout.source_data,
        layout.output_data,
        options,
        page_counter=page_counter,
        id_factory=id_factory or new_job_id,
    )
    queue = JobQueue.for_output(layout.output, options.queue_stages)
    structure = StructureBuilder(output_id, layout.output_data, options.display_format, options.image_item_label)
    packager = PackageBuilder(layout, discovery, planner, queue, structure)
    queue.ensure_layout()

    collisions: List[PathCollision] = []
    if finding_aid is None:
        packager.package_directory(None, ArchivalPath(base_id, ()), layout.source_data)
    else:
        collisions = _package_components(packager, finding_aid, base_id, show_progress)
        record_step(steps, "resolve_paths", collisions=len(collisions))
    record_step(steps, "enqueue", sections=len(structure.sections), jobs=len(packager.jobs))

    finding_aid_path = None
    if finding_aid is not None:
        finding_aid_path = replace_write(layout.output_metadata / f"{base_id}.xml", finding_aid.to_bytes())
        record_step(steps, "write_finding_aid", path=str(finding_aid_path))
    mets_path = replace_write(layout.output_metadata / TEMPLATE_NAME, template.render(structure))
    record_step(steps, "write_structural_metadata", path=str(mets_path))
    log_plan_steps(output_id, steps)

    logger.info(
        "Packaged %s: %d section(s), %d job(s) queued",
        output_id,
        len(structure.sections),
        len(packager.jobs),
    )
    return PackageResult(
        base_id=base_id,
        output_id=output_id,
        structural_metadata_path=mets_path,
        finding_aid_path=finding_aid_path,
        sections=list(structure.sections),
        jobs=list(packager.jobs),
        collisions=collisions,
        steps=steps,
    )


def _package_components(
    packager: PackageBuilder,
    finding_aid: FindingAid,
    base_id: str,
    show_progress: bool,
) -> List[PathCollision]:
    components = finding_aid.eligible_components()
    index = ContainerPathIndex()
    resolved: List[Tuple[Component, List[ArchivalPath]]] = []
    for component in components:
        pairs = resolve_section_paths(component, base_id)
        index.add([current for current, _ in pairs], [legacy for _, legacy in pairs])
        current_paths: List[ArchivalPath] = []
        for current, _ in pairs:
            if current not in current_paths:
                current_paths.append(current)
        resolved.append((component, current_paths))

    collisions = index.collisions()
    for collision in collisions:
        logger.warning(
            "Container naming collision (%s): %s -> %s",
            collision.kind,
            ", ".join(str(p) for p in collision.legacy),
            ", ".join(str(p) for p in collision.current),
        )

    data_root = packager.layout.source_data
    done: Dict[ArchivalPath, Optional[Section]] = {}
    for component, paths in tqdm(resolved, desc="Components", unit="component", disable=not show_progress):
        first: Optional[Section] = None
        for path in paths:
            if path not in done:
                legacy = index.legacy_source_for(path)
                done[path] = packager.package_directory(
                    component,
                    path,
                    path_directory(data_root, path),
                    path_directory(data_root, legacy) if legacy is not None else None,
                )
            if first is None and done[path] is not None:
                first = done[path]
        if first is not None:
            finding_aid.attach_reference(component, packager.structure.reference_for(first), title=component.title)
    return collisions
