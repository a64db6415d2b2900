"""Finding-aid (EAD) access: component selection and back-reference injection."""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional

from lxml import etree

from dipmaker.core.logger import setup_logger
from dipmaker.core.models import Component, Container

logger = setup_logger(__name__)

XLINK_NS = "http://www.w3.org/1999/xlink"

# Numbered component levels c01..c12, then unnumbered <c> for anything else.
MAX_NUMBERED_DEPTH = 12


def _clean_text(element) -> Optional[str]:
    if element is None:
        return None
    text = re.sub(r"\s+", " ", "".join(element.itertext())).strip()
    return text or None


class FindingAid:
    """A parsed finding aid whose components can receive digital-object links."""

    def __init__(self, tree: etree._ElementTree, path: Optional[Path] = None):
        self.tree = tree
        self.path = path
        self.namespace = etree.QName(tree.getroot()).namespace
        self._nsmap = {"ead": self.namespace} if self.namespace else {}

    @classmethod
    def load(cls, path: Path) -> "FindingAid":
        parser = etree.XMLParser(remove_blank_text=False, resolve_entities=False)
        tree = etree.parse(str(path), parser)
        logger.debug("Loaded finding aid %s", path)
        return cls(tree, Path(path))

    @classmethod
    def from_string(cls, data: bytes) -> "FindingAid":
        return cls(etree.ElementTree(etree.fromstring(data)))

    def _q(self, name: str) -> str:
        return f"ead:{name}" if self.namespace else name

    def _xpath(self, node, expression: str):
        return node.xpath(expression, namespaces=self._nsmap)

    @property
    def base_name(self) -> Optional[str]:
        return self.path.stem if self.path else None

    @property
    def eadid(self) -> Optional[str]:
        found = self._xpath(self.tree.getroot(), f"//{self._q('eadid')}")
        return _clean_text(found[0]) if found else None

    def component_xpath(self) -> str:
        """XPath selecting the deepest container-bearing component of each branch."""
        did, container = self._q("did"), self._q("container")
        tags = [self._q(f"c{number:02d}") for number in range(1, MAX_NUMBERED_DEPTH + 1)] + [self._q("c")]
        # Any descendant component at any depth, numbered or not
        is_component = " or ".join(f"self::{tag}" for tag in tags)
        return " | ".join(
            f"//{self._q('dsc')}//{tag}[{did}//{container} and not(.//*[{is_component}][{did}//{container}])]"
            for tag in tags
        )

    def eligible_components(self) -> List[Component]:
        return [self._component(element) for element in self._xpath(self.tree.getroot(), self.component_xpath())]

    def _component(self, element) -> Component:
        did = self._q("did")
        containers = [
            Container(
                label="".join(node.itertext()).strip(),
                container_type=node.get("type", ""),
                type_label=node.get("label", ""),
                id=node.get("id"),
                parent=node.get("parent"),
            )
            for node in self._xpath(element, f"{did}/{self._q('container')}")
        ]
        title = self._xpath(element, f"{did}/{self._q('unittitle')}")
        date = self._xpath(element, f"{did}/{self._q('unitdate')}")
        return Component(
            id=element.get("id"),
            containers=containers,
            title=_clean_text(title[0]) if title else None,
            date=_clean_text(date[0]) if date else None,
            level=element.get("level"),
            element=element,
        )

    def attach_reference(self, component: Component, href: str, title: Optional[str] = None) -> bool:
        """Add a digital-object reference to the component; False if already present."""
        did = self._xpath(component.element, self._q("did"))[0]
        href_attr = f"{{{XLINK_NS}}}href"
        for dao in self._xpath(did, self._q("dao")):
            if dao.get(href_attr) == href:
                return False

        tag = f"{{{self.namespace}}}dao" if self.namespace else "dao"
        dao = etree.SubElement(did, tag, nsmap={"xlink": XLINK_NS})
        dao.set(f"{{{XLINK_NS}}}type", "simple")
        dao.set(href_attr, href)
        if title:
            dao.set(f"{{{XLINK_NS}}}title", title)
        logger.debug("Attached reference %s to component %s", href, component.id)
        return True

    def to_bytes(self) -> bytes:
        return etree.tostring(self.tree, xml_declaration=True, encoding="UTF-8")
