"""Parse .vcxproj files (XML with MSBuild schema)."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from collections.abc import Iterator, Mapping

from vcxsln.config import (
    CppStandard,
    ItemDefinitionGroup,
    Platform,
    Project,
    ProjectConfiguration,
    ProjectReference,
)
from vcxsln.errors import ProjectParseError

logger = logging.getLogger(__name__)


def _strip_ns(tag: str) -> str:
    """Remove the XML namespace from a tag name."""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def _child_elements(element: ET.Element) -> Iterator[tuple[str, ET.Element]]:
    """Yield (local tag, element) for each child element, skipping comments and PIs."""
    for child in element:
        if isinstance(child.tag, str):
            yield _strip_ns(child.tag), child


def _unbraced(value: str) -> str:
    value = value.strip()
    if value.startswith("{") and value.endswith("}"):
        return value[1:-1]
    return value


def _parse_project_configuration(element: ET.Element) -> ProjectConfiguration:
    config = ProjectConfiguration(name=element.get("Include", ""))

    for tag, child in _child_elements(element):
        # Empty elements carry nothing to read
        if not child.text:
            continue

        if tag == "Configuration":
            config.configuration = child.text
        elif tag == "Platform":
            config.platform_str = child.text
            config.platform = Platform.from_text(child.text)

    return config


def _parse_item_definition_group(element: ET.Element) -> ItemDefinitionGroup:
    group = ItemDefinitionGroup(condition=element.get("Condition", ""))

    for tag, clcompile in _child_elements(element):
        if tag != "ClCompile":
            continue

        for name, child in _child_elements(clcompile):
            if not child.text:
                continue

            if name == "PreprocessorDefinitions":
                group.preprocessor_definitions = child.text
            elif name == "AdditionalIncludeDirectories":
                group.additional_include_directories += child.text
            elif name == "LanguageStandard":
                group.cppstd = CppStandard.from_text(child.text, group.cppstd)

    return group


class ProjectParser:
    """Walks the top-level elements of a project document into a Project.

    Recognised tags are dispatched through ``handlers``; anything else goes
    to :meth:`ignore`. Missing attributes and empty elements are skipped
    rather than reported.
    """

    def __init__(self, project: Project, variables: Mapping[str, str]) -> None:
        self.project = project
        # Settings are stored raw; see vcxsln.msbuild.evaluator for expansion
        self.variables = variables
        self.handlers = {
            "ItemGroup": self.parse_item_group,
            "ItemDefinitionGroup": self.parse_item_definition_group,
            "PropertyGroup": self.parse_property_group,
        }

    def parse(self, root: ET.Element) -> None:
        for tag, node in _child_elements(root):
            self.handlers.get(tag, self.ignore)(tag, node)

    def ignore(self, tag: str, node: ET.Element) -> None:
        logger.debug(f"Ignoring <{tag}> in project {self.project.name}")

    def parse_item_group(self, tag: str, node: ET.Element) -> None:
        if node.get("Label") == "ProjectConfigurations":
            for name, child in _child_elements(node):
                if name != "ProjectConfiguration":
                    continue
                config = _parse_project_configuration(child)
                if config.platform is Platform.UNKNOWN:
                    logger.debug(
                        f"Dropping configuration {config.name!r} with platform {config.platform_str!r}"
                    )
                    continue
                self.project.project_configurations.append(config)
            return

        for name, child in _child_elements(node):
            include = child.get("Include")
            if include is None:
                continue

            if name == "ClCompile":
                self.project.compile_list.append(include)
            elif name == "ClInclude":
                self.project.include_list.append(include)
            elif name == "ProjectReference":
                self.project.project_references.append(
                    ProjectReference(include=include, project_id=_reference_id(child))
                )

    def parse_item_definition_group(self, tag: str, node: ET.Element) -> None:
        self.project.item_definition_groups.append(_parse_item_definition_group(node))

    def parse_property_group(self, tag: str, node: ET.Element) -> None:
        if node.get("Label") != "Globals":
            return
        for name, child in _child_elements(node):
            if child.text:
                self.project.globals[name] = child.text.strip()


def _reference_id(element: ET.Element) -> str:
    for tag, child in _child_elements(element):
        if tag == "Project" and child.text:
            return _unbraced(child.text)
    return ""


def parse_project_element(
    root: ET.Element, project: Project, variables: Mapping[str, str]
) -> None:
    """Fill ``project`` from an already parsed project document root."""
    ProjectParser(project, variables).parse(root)


def load_project(project: Project, path: str, variables: Mapping[str, str]) -> None:
    """Parse the project file at ``path`` into ``project``.

    Raises ProjectParseError if the file cannot be read or is not
    well-formed; ``project`` is left untouched in that case.
    """
    try:
        tree = ET.parse(path)
    except OSError as e:
        raise ProjectParseError(path, e.strerror or str(e)) from e
    except ET.ParseError as e:
        raise ProjectParseError(path, f"invalid XML: {e}") from e

    root = tree.getroot()
    if root is None:
        raise ProjectParseError(path, "document has no root element")

    parse_project_element(root, project, variables)
