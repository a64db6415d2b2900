"""Derivative job planning.

Given the files found in one resolved directory, emit the jobs external workers
need to run. Planning is idempotent: a derivative whose output type already sits
next to the source is not requested again, so a re-run after a partial run only
plans what is still missing.
"""

from __future__ import annotations

import re
import uuid
from pathlib import Path, PurePosixPath
from typing import Callable, Iterable, List, Optional, Set

from dipmaker.config.settings import PackageOptions
from dipmaker.core.logger import setup_logger
from dipmaker.core.models import Job, SourceFile

from .mime import SourceKind, normalize_mime
from .templates import Guard, JobTemplate, templates_for

logger = setup_logger(__name__)

PageCounter = Callable[[Path], Optional[int]]

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


def _without_extension(relative_path: PurePosixPath) -> PurePosixPath:
    return relative_path.with_name(relative_path.stem) if relative_path.suffix else relative_path


def item_key(relative_path: PurePosixPath) -> str:
    """Grouping key: relative path without extension, non-alphanumerics as `_`."""
    return _NON_ALNUM.sub("_", str(_without_extension(relative_path)))


def item_base(relative_path: PurePosixPath) -> str:
    """Short form of the item key: the file stem alone."""
    return _NON_ALNUM.sub("_", relative_path.stem)


def new_job_id() -> str:
    return uuid.uuid4().hex


class DerivativePlanner:
    """Plans jobs for files under `source_root`, targeting `output_root`."""

    def __init__(
        self,
        source_root: Path,
        output_root: Path,
        options: Optional[PackageOptions] = None,
        page_counter: Optional[PageCounter] = None,
        id_factory: Callable[[], str] = new_job_id,
    ):
        self.source_root = Path(source_root)
        self.output_root = Path(output_root)
        self.options = options or PackageOptions()
        self.page_counter = page_counter
        self.id_factory = id_factory

    def plan(
        self,
        files: Iterable[SourceFile],
        sibling_mime_types: Optional[Set[str]] = None,
        existing_outputs: Iterable[SourceFile] = (),
        located_at: Optional[Path] = None,
        logical_dir: Optional[PurePosixPath] = None,
    ) -> List[Job]:
        """Plan jobs for one directory listing.

        When the files were found somewhere other than their logical position
        (a directory laid out under the legacy naming scheme), pass the
        directory they were found in as `located_at` and their position under
        the source root as `logical_dir`; targets and item keys follow the
        logical position.

        Files already present in the output directory (`existing_outputs`)
        count as siblings, so outputs of completed jobs are not requested again.
        """
        listing = sorted(files, key=lambda f: str(f.path))
        existing = list(existing_outputs)
        if sibling_mime_types is None:
            sibling_mime_types = {normalize_mime(f.mime_type) for f in listing}
        sibling_mime_types = set(sibling_mime_types) | {normalize_mime(f.mime_type) for f in existing}
        text_stems = {f.path.stem for f in listing + existing if f.path.suffix.lower() == ".txt"}

        jobs: List[Job] = []
        for source in listing:
            kind = SourceKind.of(source.mime_type)
            if kind is None:
                logger.debug("No derivatives for %s (%s)", source.path, source.mime_type)
                continue
            relative = self._relative(source, located_at, logical_dir)
            jobs.extend(self._plan_file(source, relative, kind, sibling_mime_types, text_stems))

        logger.debug("Planned %d job(s) for %d file(s)", len(jobs), len(listing))
        return jobs

    def _plan_file(
        self,
        source: SourceFile,
        relative: PurePosixPath,
        kind: SourceKind,
        sibling_mime_types: Set[str],
        text_stems: Set[str],
    ) -> List[Job]:
        item = item_key(relative)
        base = item_base(relative)
        page_count = self._page_count(source) if kind is SourceKind.PDF else None

        jobs = []
        for template in templates_for(kind, pdf_master=self.options.pdf_master):
            if not self._wanted(template, source, sibling_mime_types, text_stems):
                continue
            ocr_required = True if template.marks_ocr and self.options.ocr_required else None
            jobs.append(
                Job(
                    id=self.id_factory(),
                    item=item,
                    item_base=base,
                    command=template.command,
                    source=str(source.path),
                    target=str(self.target_for(relative, template)),
                    mime_type=template.mime_type,
                    use=template.use,
                    page_count=page_count,
                    ocr_required=ocr_required,
                )
            )
        return jobs

    def _wanted(
        self,
        template: JobTemplate,
        source: SourceFile,
        sibling_mime_types: Set[str],
        text_stems: Set[str],
    ) -> bool:
        if template.requires_ocr and not self.options.ocr_required:
            return False
        if template.guard is Guard.NO_SIBLING_PDF and "application/pdf" in sibling_mime_types:
            logger.debug("Skipping %s for %s: a PDF is already present", template.use, source.path.name)
            return False
        if template.guard is Guard.NO_SIBLING_OUTPUT and template.mime_type in sibling_mime_types:
            logger.debug("Skipping %s for %s: %s already present", template.use, source.path.name, template.mime_type)
            return False
        if template.skip_if_text_sibling and source.path.stem in text_stems:
            logger.debug("Skipping %s for %s: OCR text already present", template.use, source.path.name)
            return False
        return True

    def target_for(self, relative: PurePosixPath, template: JobTemplate) -> Path:
        """Output path mirroring the source's position under the output root."""
        if template.suffix is None:
            return self.output_root.joinpath(*relative.parts)
        stripped = _without_extension(relative)
        return self.output_root.joinpath(*stripped.parent.parts, stripped.name + template.suffix)

    def _page_count(self, source: SourceFile) -> Optional[int]:
        if self.page_counter is None:
            return None
        return self.page_counter(source.path)

    def _relative(
        self,
        source: SourceFile,
        located_at: Optional[Path],
        logical_dir: Optional[PurePosixPath],
    ) -> PurePosixPath:
        if located_at is not None and logical_dir is not None:
            return logical_dir / PurePosixPath(source.path.relative_to(located_at).as_posix())
        return PurePosixPath(source.path.relative_to(self.source_root).as_posix())
