"""Tests for derivative job planning."""

from pathlib import Path, PurePosixPath

import pytest

from dipmaker.config.settings import PackageOptions
from dipmaker.core.models import SourceFile
from dipmaker.derivatives.mime import SourceKind, normalize_mime
from dipmaker.derivatives.planner import DerivativePlanner, item_base, item_key
from dipmaker.derivatives.templates import templates_for

SOURCE = Path("/aip/data")
OUTPUT = Path("/dip/data")
FOLDER = SOURCE / "mss001" / "Box_1" / "Folder_2"


def _file(name, mime_type, directory=FOLDER):
    return SourceFile(path=directory / name, mime_type=mime_type)


def _planner(**options):
    counter = iter(range(1, 1000))
    return DerivativePlanner(
        SOURCE,
        OUTPUT,
        PackageOptions(**options),
        id_factory=lambda: f"job{next(counter)}",
    )


def _uses(jobs):
    return [job.use for job in jobs]


class TestTiffPlanning:
    """A lone TIFF, with and without already-derived siblings."""

    def test_lone_tiff_without_ocr(self):
        jobs = _planner().plan([_file("0001.tif", "image/tiff")])

        assert [job.command for job in jobs] == ["scale;thumbnail", "scale;front", "tiff2jpeg", "tiff2pdf"]
        assert _uses(jobs) == ["thumbnail", "front thumbnail", "reference image", "print image"]
        assert all(job.ocr_required is None for job in jobs)

    def test_sibling_pdf_suppresses_print_image(self):
        files = [_file("0001.tif", "image/tiff"), _file("0001.pdf", "application/pdf")]

        jobs = [job for job in _planner().plan(files) if job.source.endswith(".tif")]

        assert _uses(jobs) == ["thumbnail", "front thumbnail", "reference image"]
        assert not any(job.command == "tiff2pdf" for job in jobs)

    def test_existing_output_pdf_suppresses_print_image(self):
        existing = [SourceFile(OUTPUT / "mss001" / "Box_1" / "Folder_2" / "0001.pdf", "application/pdf")]

        jobs = _planner().plan([_file("0001.tif", "image/tiff")], existing_outputs=existing)

        assert "tiff2pdf" not in [job.command for job in jobs]

    def test_ocr_flag_adds_text_job_and_marks_print_image(self):
        jobs = _planner(ocr_required=True).plan([_file("0001.tif", "image/tiff")])

        assert [job.command for job in jobs][-2:] == ["tiff2pdf", "tiff2txt"]
        print_image = next(job for job in jobs if job.command == "tiff2pdf")
        assert print_image.ocr_required is True

    def test_ocr_skipped_when_sibling_pdf(self):
        files = [_file("0001.tif", "image/tiff"), _file("other.pdf", "application/pdf")]

        jobs = _planner(ocr_required=True).plan(files)

        assert "tiff2txt" not in [job.command for job in jobs]

    def test_ocr_skipped_when_matching_text_exists(self):
        files = [_file("0001.tif", "image/tiff"), _file("0001.txt", "text/plain")]

        jobs = _planner(ocr_required=True).plan(files)

        assert "tiff2txt" not in [job.command for job in jobs]
        assert "tiff2pdf" in [job.command for job in jobs]

    def test_targets_mirror_source_position(self):
        jobs = _planner().plan([_file("0001.tif", "image/tiff")])

        targets = [job.target for job in jobs]
        base = "/dip/data/mss001/Box_1/Folder_2/0001"
        assert targets == [f"{base}.thumbnail.jpg", f"{base}.front.jpg", f"{base}.jpg", f"{base}.pdf"]
        assert all(job.source == str(FOLDER / "0001.tif") for job in jobs)


class TestPdfPlanning:
    @pytest.mark.parametrize("pdf_master,expected_use", [(True, "master"), (False, "print image")])
    def test_copy_use_follows_master_flag(self, pdf_master, expected_use):
        jobs = _planner(pdf_master=pdf_master).plan([_file("report.pdf", "application/pdf")])

        assert len(jobs) == 1
        assert jobs[0].command == "copy"
        assert jobs[0].use == expected_use
        assert jobs[0].target == "/dip/data/mss001/Box_1/Folder_2/report.pdf"

    def test_ocr_jobs_for_pdf(self):
        jobs = _planner(ocr_required=True).plan([_file("report.pdf", "application/pdf")])

        assert [(job.command, job.mime_type) for job in jobs] == [
            ("copy", "application/pdf"),
            ("pdf2xml", "application/xml"),
            ("pdf2txt", "text/plain"),
        ]

    def test_each_ocr_job_guarded_by_its_output_type(self):
        files = [_file("report.pdf", "application/pdf"), _file("report.xml", "application/xml")]

        jobs = _planner(ocr_required=True).plan(files)

        commands = [job.command for job in jobs]
        assert "pdf2xml" not in commands
        assert "pdf2txt" in commands

    def test_page_count_from_counter(self):
        planner = DerivativePlanner(SOURCE, OUTPUT, PackageOptions(ocr_required=True), page_counter=lambda path: 12)

        jobs = planner.plan([_file("report.pdf", "application/pdf")])

        assert {job.page_count for job in jobs} == {12}
        assert "page_count" in jobs[0].to_wire()


class TestCopyPlanning:
    @pytest.mark.parametrize(
        "name,mime_type,use",
        [
            ("coords.xml", "application/xml", "coordinates"),
            ("page.txt", "text/plain", "ocr"),
            ("side_a.mp3", "audio/mpeg", "reference audio"),
            ("side_b.mp3", "audio/mp3", "reference audio"),
            ("side_a.ogg", "audio/ogg", "secondary reference audio"),
            ("reel.mp4", "video/mp4", "reference video"),
        ],
    )
    def test_single_copy_job(self, name, mime_type, use):
        jobs = _planner().plan([_file(name, mime_type)])

        assert [(job.command, job.use) for job in jobs] == [("copy", use)]
        assert jobs[0].mime_type == normalize_mime(mime_type)
        assert jobs[0].target.endswith("/" + name)

    def test_unsupported_type_plans_nothing(self):
        assert _planner().plan([_file("notes.docx", "application/msword")]) == []


class TestGrouping:
    def test_files_processed_in_path_order(self):
        files = [_file("0002.tif", "image/tiff"), _file("0001.tif", "image/tiff")]

        jobs = _planner().plan(files)

        assert jobs[0].item.endswith("0001")
        assert jobs[-1].item.endswith("0002")

    def test_job_ids_unique(self):
        files = [_file(f"{n:04d}.tif", "image/tiff") for n in range(1, 6)]
        planner = DerivativePlanner(SOURCE, OUTPUT, PackageOptions(ocr_required=True))

        jobs = planner.plan(files)

        assert len({job.id for job in jobs}) == len(jobs) == 25

    def test_tiff_and_text_share_item(self):
        files = [_file("0001.tif", "image/tiff"), _file("0001.txt", "text/plain")]

        jobs = _planner().plan(files)

        assert {job.item for job in jobs} == {"mss001_Box_1_Folder_2_0001"}

    def test_item_key_and_base(self):
        relative = PurePosixPath("mss001/Box_1/Folder 2/page-01.tif")
        assert item_key(relative) == "mss001_Box_1_Folder_2_page_01"
        assert item_base(relative) == "page_01"

    def test_legacy_location_maps_to_logical_directory(self):
        legacy_dir = SOURCE / "mss001" / "mss001_1" / "mss001_1_2"
        files = [_file("0001.pdf", "application/pdf", directory=legacy_dir)]

        jobs = _planner().plan(
            files,
            located_at=legacy_dir,
            logical_dir=PurePosixPath("mss001/Box_1/Folder_2"),
        )

        assert jobs[0].source == str(legacy_dir / "0001.pdf")
        assert jobs[0].target == "/dip/data/mss001/Box_1/Folder_2/0001.pdf"
        assert jobs[0].item == "mss001_Box_1_Folder_2_0001"


def test_source_kind_aliases():
    assert SourceKind.of("image/tif") is SourceKind.TIFF
    assert SourceKind.of("audio/mp3") is SourceKind.MP3
    assert SourceKind.of("application/pdf; charset=binary") is SourceKind.PDF
    assert SourceKind.of("image/jpeg") is None
    assert SourceKind.of(None) is None


def test_pdf_master_template_replaces_print_image():
    assert templates_for(SourceKind.PDF, pdf_master=True)[0].use == "master"
    assert templates_for(SourceKind.PDF)[0].use == "print image"
