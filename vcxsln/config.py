"""Core data types and configuration for solution loading."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

# Project type GUID used by Visual Studio for solution folders
SOLUTION_FOLDER_TYPE_ID = "2150E333-8FDC-42A3-9474-1A3956D46DE8"


class Platform(str, Enum):
    WIN32 = "Win32"
    X64 = "x64"
    UNKNOWN = "Unknown"

    @classmethod
    def from_text(cls, text: str) -> Platform:
        if text == cls.WIN32.value:
            return cls.WIN32
        if text == cls.X64.value:
            return cls.X64
        return cls.UNKNOWN


class CppStandard(str, Enum):
    CPP14 = "stdcpp14"
    CPP17 = "stdcpp17"
    CPP20 = "stdcpp20"
    CPP_LATEST = "stdcpplatest"

    @classmethod
    def from_text(cls, text: str, default: CppStandard) -> CppStandard:
        """Map a <LanguageStandard> value, keeping ``default`` for anything else."""
        for member in cls:
            if member.value == text:
                return member
        return default


@dataclass
class ProjectConfiguration:
    name: str = ""
    configuration: str = ""
    platform_str: str = ""
    platform: Platform = Platform.UNKNOWN


@dataclass
class ItemDefinitionGroup:
    condition: str = ""
    preprocessor_definitions: str = ""
    additional_include_directories: str = ""
    cppstd: CppStandard = CppStandard.CPP_LATEST


@dataclass
class ProjectReference:
    """A <ProjectReference> item from a .vcxproj file."""
    include: str
    project_id: str = ""


@dataclass
class Project:
    """A project entry, filled from the .sln first and the .vcxproj second."""
    id: str
    name: str
    filepath: str
    type_id: str = ""
    dependencies: list[str] = field(default_factory=list)
    project_configurations: list[ProjectConfiguration] = field(default_factory=list)
    compile_list: list[str] = field(default_factory=list)
    include_list: list[str] = field(default_factory=list)
    item_definition_groups: list[ItemDefinitionGroup] = field(default_factory=list)
    project_references: list[ProjectReference] = field(default_factory=list)
    globals: dict[str, str] = field(default_factory=dict)

    @property
    def is_folder(self) -> bool:
        return self.type_id.upper() == SOLUTION_FOLDER_TYPE_ID


@dataclass
class ProjectConfigurationMapping:
    """One line of the ProjectConfigurationPlatforms global section."""
    project_id: str
    solution_configuration: str
    kind: str
    value: str


@dataclass
class ProjectLoadFailure:
    project_id: str
    path: str
    reason: str


@dataclass
class Solution:
    name: str = ""
    filepath: str = ""
    version: str = ""
    configurations: list[str] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)
    properties: dict[str, str] = field(default_factory=dict)
    project_configuration_map: list[ProjectConfigurationMapping] = field(default_factory=list)
    nested_projects: dict[str, str] = field(default_factory=dict)
    failures: list[ProjectLoadFailure] = field(default_factory=list)
    unterminated_blocks: list[str] = field(default_factory=list)

    def find_project(self, project_id: str) -> Project | None:
        for project in self.projects:
            if project.id == project_id:
                return project
        return None


@dataclass
class LoadConfig:
    read_env: bool = True
    evaluate_variables: bool = False
    variables: dict[str, str] = field(default_factory=dict)
    strict: bool = False
    skip_folders: bool = True
