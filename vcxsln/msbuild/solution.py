"""Parse .sln files (custom text format, not XML).

A solution is a sequence of nested blocks::

    Project("{TYPE-GUID}") = "Name", "Path\\To\\Name.vcxproj", "{PROJECT-GUID}"
        ProjectSection(ProjectDependencies) = postProject
            {DEP-GUID} = {DEP-GUID}
        EndProjectSection
    EndProject
    Global
        GlobalSection(SolutionConfigurationPlatforms) = preSolution
            Debug|x64 = Debug|x64
        EndGlobalSection
    EndGlobal

The parser keeps an explicit stack of open blocks and dispatches every line
on the state at the top of the stack.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from vcxsln.config import Project, ProjectConfigurationMapping, Solution
from vcxsln.errors import MalformedLineError

logger = logging.getLogger(__name__)

_VERSION_PREFIX = "Microsoft Visual Studio Solution File, Format Version"


class BlockState(str, Enum):
    TOP_LEVEL = "TopLevel"
    IN_PROJECT = "Project"
    IN_PROJECT_SECTION = "ProjectSection"
    IN_GLOBAL = "Global"
    IN_GLOBAL_SECTION = "GlobalSection"


@dataclass
class _Block:
    state: BlockState
    section: str = ""
    project: Project | None = None


def _simplified(line: str) -> str:
    """Collapse whitespace runs to single spaces and trim both ends."""
    return " ".join(line.split())


def _unquoted(value: str) -> str:
    if value.endswith('"'):
        return value[1:-1]
    return value


def _unbraced(value: str) -> str:
    if value.endswith("}"):
        return value[1:-1]
    return value


def _section_name(line: str) -> str:
    """Return the name between the parentheses of a section header."""
    start = line.find("(")
    end = line.find(")", start + 1)
    if start == -1 or end == -1:
        return ""
    return line[start + 1:end]


class SolutionParser:
    """Line-driven parser filling a Solution from .sln text."""

    def __init__(self, solution: Solution | None = None, filename: str = "<string>") -> None:
        self.solution = solution if solution is not None else Solution()
        self.filename = filename
        self.line_number = 0
        self.stack = [_Block(BlockState.TOP_LEVEL)]
        self._dispatch = {
            BlockState.TOP_LEVEL: self._top_level,
            BlockState.IN_PROJECT: self._in_project,
            BlockState.IN_PROJECT_SECTION: self._in_project_section,
            BlockState.IN_GLOBAL: self._in_global,
            BlockState.IN_GLOBAL_SECTION: self._in_global_section,
        }

    @property
    def state(self) -> BlockState:
        return self.stack[-1].state

    def parse(self, lines: Iterable[str]) -> Solution:
        for raw in lines:
            self.line_number += 1
            # The first line is a header (often blank after the BOM)
            if self.line_number == 1:
                continue
            line = _simplified(raw)
            block = self.stack[-1]
            self._dispatch[block.state](line, block)

        self._finish()
        return self.solution

    def _finish(self) -> None:
        open_blocks = [block.state.value for block in self.stack[1:]]
        if open_blocks:
            logger.warning(
                f"{self.filename}: input ended inside {' > '.join(open_blocks)}"
            )
        self.solution.unterminated_blocks = open_blocks

    def _malformed(self, message: str, line: str) -> MalformedLineError:
        return MalformedLineError(message, self.filename, self.line_number, line)

    def _split_pair(self, line: str, what: str) -> tuple[str, str]:
        index = line.find("=")
        if index == -1:
            raise self._malformed(f"expected '=' in {what}", line)
        return line[:index].strip(), line[index + 1:].strip()

    # --- States ---

    def _top_level(self, line: str, block: _Block) -> None:
        if line.startswith(_VERSION_PREFIX):
            self.solution.version = line[len(_VERSION_PREFIX):].strip()
        elif line.startswith("Project("):
            self._open_project(line)
        elif line.startswith("Global"):
            self.stack.append(_Block(BlockState.IN_GLOBAL))
        elif "=" in line and not line.startswith("#"):
            # e.g. VisualStudioVersion = 17.0.31903.59
            key, value = self._split_pair(line, "solution property")
            self.solution.properties[key] = value

    def _open_project(self, line: str) -> None:
        index = line.find("=")
        if index == -1:
            raise self._malformed("expected '=' in project declaration", line)

        items = [item for item in _simplified(line[index + 1:]).split(",") if item]
        if len(items) < 3:
            raise self._malformed("expected name, path and id in project declaration", line)

        project = Project(
            id=_unbraced(_unquoted(items[2].strip())),
            name=_unquoted(items[0].strip()),
            filepath=_unquoted(items[1].strip()),
            type_id=_unbraced(_unquoted(_section_name(line[:index]))),
        )
        logger.debug(f"Solution project: {project.name} -> {project.filepath}")
        self.solution.projects.append(project)
        self.stack.append(_Block(BlockState.IN_PROJECT, project=project))

    def _in_project(self, line: str, block: _Block) -> None:
        if line == "EndProject":
            self.stack.pop()
        elif line.startswith("ProjectSection"):
            self.stack.append(_Block(
                BlockState.IN_PROJECT_SECTION,
                section=_section_name(line) if line.startswith("ProjectSection(") else "",
                project=block.project,
            ))

    def _in_project_section(self, line: str, block: _Block) -> None:
        if line == "EndProjectSection":
            self.stack.pop()
            return
        if block.section != "ProjectDependencies" or not line:
            return

        # e.g. {17A02C77-346E-3F08-A2A3-5AF377AC0452} = {17A02C77-346E-3F08-A2A3-5AF377AC0452}
        dependency, _ = self._split_pair(line, "project dependency")
        block.project.dependencies.append(_unbraced(dependency))

    def _in_global(self, line: str, block: _Block) -> None:
        if line == "EndGlobal":
            self.stack.pop()
        elif line.startswith("GlobalSection("):
            self.stack.append(_Block(BlockState.IN_GLOBAL_SECTION, section=_section_name(line)))

    def _in_global_section(self, line: str, block: _Block) -> None:
        if line == "EndGlobalSection":
            self.stack.pop()
            return
        if not line:
            return

        if block.section == "SolutionConfigurationPlatforms":
            # e.g. Debug|x64 = Debug|x64
            configuration, _ = self._split_pair(line, "solution configuration")
            self.solution.configurations.append(configuration)
        elif block.section == "ProjectConfigurationPlatforms":
            key, value = self._split_pair(line, "project configuration mapping")
            self.solution.project_configuration_map.append(self._parse_mapping(key, value, line))
        elif block.section == "NestedProjects":
            child, parent = self._split_pair(line, "nested project")
            self.solution.nested_projects[_unbraced(child)] = _unbraced(parent)

    def _parse_mapping(self, key: str, value: str, line: str) -> ProjectConfigurationMapping:
        close = key.find("}.")
        if not key.startswith("{") or close == -1:
            raise self._malformed("expected '{id}.' in project configuration mapping", line)

        project_id = key[1:close]
        rest = key[close + 2:]
        # {id}.Debug|x64.Build.0: the kind starts at the first '.' after the platform
        bar = rest.find("|")
        dot = rest.find(".", bar + 1)
        if dot == -1:
            raise self._malformed("expected '<configuration>.<kind>' in project configuration mapping", line)
        configuration = rest[:dot]
        kind = rest[dot + 1:]

        return ProjectConfigurationMapping(
            project_id=project_id,
            solution_configuration=configuration,
            kind=kind,
            value=value,
        )


def parse_solution_lines(
    lines: Iterable[str], solution: Solution | None = None, filename: str = "<string>"
) -> Solution:
    """Parse .sln lines into ``solution`` (or a new Solution) and return it."""
    return SolutionParser(solution, filename).parse(lines)


def parse_solution_text(text: str, filename: str = "<string>") -> Solution:
    return parse_solution_lines(text.splitlines(), filename=filename)
