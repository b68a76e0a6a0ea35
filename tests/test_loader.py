"""Tests for loading a solution together with its projects."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from vcxsln.config import CppStandard, LoadConfig, Platform
from vcxsln.errors import MalformedLineError, ProjectParseError, SolutionIOError
from vcxsln.loader import load_solution, resolve_project_path

FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "fixtures")
SOLUTION_DIR = os.path.join(FIXTURES_DIR, "cpp_solution")
GAME_SLN = os.path.join(SOLUTION_DIR, "Game.sln")

ENGINE_ID = "AAAAAAAA-0000-0000-0000-000000000001"
GAME_ID = "AAAAAAAA-0000-0000-0000-000000000002"
TOOLS_ID = "AAAAAAAA-0000-0000-0000-000000000003"


class TestLoadSolution:
    @pytest.fixture(autouse=True)
    def setup(self):
        self.solution = load_solution(GAME_SLN)

    def test_name_and_path(self):
        assert self.solution.name == "Game"
        assert self.solution.filepath == GAME_SLN
        assert self.solution.version == "12.00"

    def test_projects_in_order(self):
        assert [p.name for p in self.solution.projects] == ["Engine", "Game", "Tools", "External"]

    def test_engine_is_populated(self):
        engine = self.solution.find_project(ENGINE_ID)
        assert engine.compile_list == ["src\\engine.cpp", "src\\render.cpp"]
        assert [c.platform for c in engine.project_configurations] == [
            Platform.WIN32, Platform.X64, Platform.X64,
        ]
        assert engine.item_definition_groups[0].cppstd is CppStandard.CPP17

    def test_dependencies(self):
        game = self.solution.find_project(GAME_ID)
        assert game.dependencies == [ENGINE_ID, TOOLS_ID]

    def test_settings_stay_raw_by_default(self):
        engine = self.solution.find_project(ENGINE_ID)
        assert engine.item_definition_groups[0].additional_include_directories.startswith("$(SolutionDir)")

    def test_missing_project_is_recorded(self):
        assert len(self.solution.failures) == 1
        failure = self.solution.failures[0]
        assert failure.project_id == TOOLS_ID
        assert failure.path.endswith("Tools.vcxproj")

    def test_missing_project_keeps_stub_fields(self):
        tools = self.solution.find_project(TOOLS_ID)
        assert tools.name == "Tools"
        assert tools.filepath == "Tools\\Tools.vcxproj"
        assert tools.dependencies == [ENGINE_ID]
        assert tools.compile_list == []
        assert tools.project_configurations == []

    def test_folders_are_not_loaded(self):
        folder = self.solution.projects[3]
        assert folder.is_folder
        assert all(f.project_id != folder.id for f in self.solution.failures)

    def test_idempotent(self):
        assert load_solution(GAME_SLN) == self.solution


class TestLoadConfig:
    def test_folders_loaded_when_not_skipped(self):
        solution = load_solution(GAME_SLN, LoadConfig(skip_folders=False))
        assert len(solution.failures) == 2

    def test_strict_raises(self):
        with pytest.raises(ProjectParseError):
            load_solution(GAME_SLN, LoadConfig(strict=True))

    def test_evaluate_variables(self, monkeypatch):
        monkeypatch.delenv("VCXSLN_TEST_UNDEFINED_DIR", raising=False)
        solution = load_solution(GAME_SLN, LoadConfig(evaluate_variables=True))
        game = solution.find_project(GAME_ID)
        group = game.item_definition_groups[0]
        assert group.additional_include_directories == f"{SOLUTION_DIR}Engine\\include"
        # Unresolvable values are kept as written
        assert game.compile_list[1] == "$(VCXSLN_TEST_UNDEFINED_DIR)\\generated.cpp"

    def test_evaluate_with_extra_variables(self):
        config = LoadConfig(
            evaluate_variables=True,
            read_env=False,
            variables={"VCXSLN_TEST_UNDEFINED_DIR": "gen"},
        )
        solution = load_solution(GAME_SLN, config)
        game = solution.find_project(GAME_ID)
        assert game.compile_list == ["main.cpp", "gen\\generated.cpp"]

    def test_solution_dir_cannot_be_overridden(self):
        config = LoadConfig(
            evaluate_variables=True,
            read_env=False,
            variables={"SolutionDir": "/elsewhere/"},
        )
        solution = load_solution(GAME_SLN, config)
        group = solution.find_project(GAME_ID).item_definition_groups[0]
        assert group.additional_include_directories == f"{SOLUTION_DIR}Engine\\include"
        assert "/elsewhere/" not in group.additional_include_directories

    def test_evaluate_from_environment(self, monkeypatch):
        monkeypatch.setenv("VCXSLN_TEST_UNDEFINED_DIR", "out")
        solution = load_solution(GAME_SLN, LoadConfig(evaluate_variables=True))
        game = solution.find_project(GAME_ID)
        assert game.compile_list[1] == "out\\generated.cpp"


class TestLoadErrors:
    def test_missing_solution(self):
        with pytest.raises(SolutionIOError) as exc_info:
            load_solution(os.path.join(FIXTURES_DIR, "missing.sln"))
        assert exc_info.value.path.endswith("missing.sln")

    def test_solution_io_error_is_oserror(self):
        with pytest.raises(OSError):
            load_solution(os.path.join(FIXTURES_DIR, "missing.sln"))

    def test_malformed_solution(self, tmp_path):
        path = tmp_path / "Bad.sln"
        path.write_text(
            "\nGlobal\n\tGlobalSection(SolutionConfigurationPlatforms) = preSolution\n"
            "\t\tDebug|x64\n\tEndGlobalSection\nEndGlobal\n"
        )
        with pytest.raises(MalformedLineError) as exc_info:
            load_solution(path)
        assert exc_info.value.filename == str(path)

    def test_broken_project_xml(self, tmp_path):
        (tmp_path / "App").mkdir()
        (tmp_path / "App" / "App.vcxproj").write_text("<Project><ItemGroup></Project>")
        (tmp_path / "App.sln").write_text(
            '\nProject("{8BC9CEB8-8B4A-11D0-8D11-00A0C91BC942}") = "App", "App\\App.vcxproj", '
            '"{11111111-1111-1111-1111-111111111111}"\nEndProject\n'
        )
        solution = load_solution(tmp_path / "App.sln")
        assert len(solution.projects) == 1
        assert solution.failures[0].reason.startswith("invalid XML")


class TestResolveProjectPath:
    def test_backslashes_become_separators(self):
        resolved = resolve_project_path(Path("/work/sln"), "App\\Sub\\App.vcxproj")
        assert resolved == Path("/work/sln/App/Sub/App.vcxproj")

    def test_forward_slashes(self):
        resolved = resolve_project_path(Path("/work/sln"), "App/App.vcxproj")
        assert resolved == Path("/work/sln/App/App.vcxproj")
