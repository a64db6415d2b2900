"""Structural metadata (METS) template handling and rendering."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Set

from lxml import etree

from dipmaker.core.errors import MissingFindingAidReferenceError, TemplateCompatibilityError
from dipmaker.core.logger import setup_logger

from .structure import StructureBuilder

logger = setup_logger(__name__)

METS_NS = "http://www.loc.gov/METS/"
XLINK_NS = "http://www.w3.org/1999/xlink"
NSMAP = {"mets": METS_NS, "xlink": XLINK_NS}

STRUCT_MAP_TYPE = "logical"


def _mets(tag: str) -> str:
    return f"{{{METS_NS}}}{tag}"


def _xlink(attr: str) -> str:
    return f"{{{XLINK_NS}}}{attr}"


class StructuralTemplate:
    """A rendered METS template for one package."""

    def __init__(self, tree: etree._ElementTree, path: Optional[Path] = None):
        self.tree = tree
        self.path = path

    @classmethod
    def load(cls, path: Path) -> "StructuralTemplate":
        tree = etree.parse(str(path), etree.XMLParser(remove_blank_text=True, resolve_entities=False))
        return cls(tree, Path(path))

    @classmethod
    def from_string(cls, data: bytes) -> "StructuralTemplate":
        return cls(etree.ElementTree(etree.fromstring(data)))

    @classmethod
    def blank(cls, object_id: str) -> "StructuralTemplate":
        """Minimal document for packages that ship without a template."""
        root = etree.Element(_mets("mets"), nsmap=NSMAP, OBJID=object_id)
        etree.SubElement(root, _mets("fileSec"))
        return cls(etree.ElementTree(root))

    @property
    def root(self):
        return self.tree.getroot()

    def object_id(self) -> Optional[str]:
        value = (self.root.get("OBJID") or "").strip()
        return value or None

    def finding_aid_href(self) -> str:
        found = self.root.xpath(
            "//mets:dmdSec/mets:mdRef[@MDTYPE='EAD']/@xlink:href",
            namespaces=NSMAP,
        )
        if not found or not found[0].strip():
            raise MissingFindingAidReferenceError(
                f"Structural metadata {self.path or ''} does not reference a finding aid "
                "(expected dmdSec/mdRef[@MDTYPE='EAD'])"
            )
        return found[0].strip()

    def finding_aid_path(self) -> Path:
        href = self.finding_aid_href()
        if href.startswith("file://"):
            href = href[len("file://"):]
        candidate = Path(href)
        if not candidate.is_absolute() and self.path is not None:
            candidate = self.path.parent / candidate
        if not candidate.is_file():
            raise MissingFindingAidReferenceError(f"Referenced finding aid not found: {candidate}")
        return candidate

    def require_marker(self) -> None:
        """Old-style templates have no fileSec placeholder to fill in."""
        if self.root.find(_mets("fileSec")) is None:
            raise TemplateCompatibilityError(
                f"Structural template {self.path or ''} has no mets:fileSec placeholder; "
                "it was rendered from an old-style template"
            )

    def render(self, builder: StructureBuilder) -> bytes:
        self.require_marker()
        self._fill_file_section(builder)
        self._replace_struct_map(builder)
        return etree.tostring(self.tree, xml_declaration=True, encoding="UTF-8", pretty_print=True)

    def _fill_file_section(self, builder: StructureBuilder) -> None:
        file_sec = self.root.find(_mets("fileSec"))
        for child in list(file_sec):
            file_sec.remove(child)

        groups: Dict[str, etree._Element] = {}
        seen: Set[str] = set()
        for entry in builder.entries:
            if entry.file_id in seen:
                continue
            seen.add(entry.file_id)
            group = groups.get(entry.use)
            if group is None:
                group = etree.SubElement(file_sec, _mets("fileGrp"), USE=entry.use)
                groups[entry.use] = group
            file_el = etree.SubElement(group, _mets("file"), ID=entry.file_id, MIMETYPE=entry.mime_type)
            flocat = etree.SubElement(file_el, _mets("FLocat"), LOCTYPE="OTHER", OTHERLOCTYPE="file")
            flocat.set(_xlink("href"), entry.relative_target)
        logger.debug("fileSec: %d file(s) in %d group(s)", len(seen), len(groups))

    def _replace_struct_map(self, builder: StructureBuilder) -> None:
        for existing in self.root.findall(_mets("structMap")):
            if existing.get("TYPE") == STRUCT_MAP_TYPE:
                self.root.remove(existing)

        struct_map = etree.Element(_mets("structMap"), TYPE=STRUCT_MAP_TYPE)
        anchors = self.root.findall(_mets("structMap")) or [self.root.find(_mets("fileSec"))]
        anchors[-1].addnext(struct_map)

        top = etree.SubElement(struct_map, _mets("div"), TYPE="package", LABEL=builder.output_id)
        for section in builder.sections:
            section_div = etree.SubElement(
                top,
                _mets("div"),
                TYPE="section",
                ORDER=str(section.number),
                LABEL=section.label,
            )
            for item in section.items:
                item_div = etree.SubElement(
                    section_div,
                    _mets("div"),
                    TYPE=item.type,
                    ORDER=str(item.order),
                    LABEL=item.label,
                    ID=f"{builder.output_id}_{section.number}_{item.order}",
                )
                for entry in item.files:
                    etree.SubElement(item_div, _mets("fptr"), FILEID=entry.file_id)
