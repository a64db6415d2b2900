"""Tests for container rendering and path resolution."""

import pytest

from dipmaker.core.models import ArchivalPath, Component, Container
from dipmaker.finding_aid.containers import (
    CURRENT,
    LEGACY,
    ContainerGraph,
    build_sections,
    is_simple,
    normalize,
    render_container,
    resolve_component,
    resolve_section_paths,
)


def _component(*containers):
    return Component(id="c1", containers=list(containers))


class TestRenderContainer:
    """Tests for the `Type_label` token."""

    def test_box_and_folder(self):
        assert render_container(Container(label="1", container_type="box")) == "Box_1"
        assert render_container(Container(label="2", container_type="Folder")) == "Folder_2"

    def test_missing_type_defaults_to_container(self):
        assert render_container(Container(label="7")) == "Container_7"

    def test_othertype_uses_explicit_label(self):
        container = Container(label="3", container_type="othertype", type_label="Map Case")
        assert render_container(container) == "Map_case_3"

    def test_othertype_without_label_falls_back_to_container(self):
        container = Container(label="3", container_type="othertype")
        assert render_container(container) == "Container_3"

    def test_non_alphanumeric_runs_collapse(self):
        container = Container(label="  12 - 14a ", container_type="Oversize  Box")
        assert render_container(container) == "Oversize_box_12_14a"

    @pytest.mark.parametrize("label", ["1", "A", "1/2", "..."])
    def test_rendering_is_pure_and_never_empty(self, label):
        container = Container(label=label, container_type="box")
        first = render_container(container)
        assert first == render_container(Container(label=label, container_type="box"))
        assert first != ""

    def test_normalize_handles_none(self):
        assert normalize(None) == ""


class TestModeDecision:
    def test_simple_when_no_parent(self):
        containers = [Container("1", "box", id="a"), Container("2", "folder", id="b")]
        assert is_simple(containers)
        assert build_sections(containers) == [containers]

    def test_sectioned_when_any_parent(self):
        containers = [Container("1", "box", id="a"), Container("2", "folder", id="b", parent="a")]
        assert not is_simple(containers)

    def test_no_containers(self):
        assert build_sections([]) == []


class TestContainerGraph:
    """Tests for parent-linked container sections."""

    def test_parent_and_independent_root(self):
        box = Container("1", "box", id="a")
        folder = Container("2", "folder", id="b", parent="a")
        other = Container("3", "box", id="c")

        sections = ContainerGraph([box, folder, other]).sections()

        assert sections == [[box, folder], [other]]

    def test_parent_lookup_is_by_id_not_document_order(self):
        folder = Container("2", "folder", id="b", parent="a")
        other = Container("3", "box", id="c")
        box = Container("1", "box", id="a")

        sections = ContainerGraph([folder, other, box]).sections()

        assert sections == [[other], [box, folder]]

    def test_grandchild_joins_root_section(self):
        box = Container("1", "box", id="a")
        folder = Container("2", "folder", id="b", parent="a")
        item = Container("3", "item", id="c", parent="b")

        assert ContainerGraph([box, folder, item]).sections() == [[box, folder, item]]

    def test_dangling_parent_starts_own_section(self):
        box = Container("1", "box", id="a")
        orphan = Container("9", "folder", id="z", parent="missing")

        assert ContainerGraph([box, orphan]).sections() == [[box], [orphan]]

    def test_cycle_does_not_loop(self):
        first = Container("1", "box", id="a", parent="b")
        second = Container("2", "folder", id="b", parent="a")

        sections = ContainerGraph([first, second]).sections()

        assert sorted(len(s) for s in sections) == [1, 1]


class TestResolveComponent:
    def test_simple_box_folder(self):
        component = _component(Container("1", "box"), Container("2", "folder"))

        paths = resolve_component(component, "mss001")

        assert paths == [ArchivalPath("mss001", ("Box_1", "Folder_2"))]
        assert paths[0].relative == "Box_1/Folder_2"
        assert str(paths[0]) == "mss001/Box_1/Folder_2"

    def test_two_sections_give_two_paths(self):
        component = _component(
            Container("1", "box", id="a"),
            Container("2", "folder", id="b", parent="a"),
            Container("3", "box", id="c"),
        )

        paths = resolve_component(component, "mss001")

        assert [p.relative for p in paths] == ["Box_1/Folder_2", "Box_3"]

    def test_identical_sections_are_deduplicated(self):
        component = _component(
            Container("1", "box", id="a"),
            Container("1", "box", id="b"),
            Container("2", "folder", id="c", parent="a"),
            Container("2", "folder", id="d", parent="b"),
        )

        paths = resolve_component(component, "mss001")

        assert [p.relative for p in paths] == ["Box_1/Folder_2"]

    def test_legacy_renderer_accumulates_prefix(self):
        component = _component(Container("1", "box"), Container("2", "folder"))

        paths = resolve_component(component, "mss001", LEGACY)

        assert paths == [ArchivalPath("mss001", ("mss001_1", "mss001_1_2"))]

    def test_renderers_are_interchangeable(self):
        containers = [Container("1", "box"), Container("2", "folder")]
        for renderer in (CURRENT, LEGACY):
            assert len(renderer.render_section("base", containers)) == 2


def test_section_paths_pair_current_with_legacy():
    component = _component(
        Container("1", "box", id="a"),
        Container("2", "folder", id="b", parent="a"),
        Container("3", "box", id="c"),
    )

    pairs = resolve_section_paths(component, "mss001")

    assert [(current.relative, legacy.relative) for current, legacy in pairs] == [
        ("Box_1/Folder_2", "mss001_1/mss001_1_2"),
        ("Box_3", "mss001_3"),
    ]
