"""Load a solution and every project it references."""

from __future__ import annotations

import logging
import os
from pathlib import Path, PureWindowsPath

from vcxsln.config import LoadConfig, Project, ProjectLoadFailure, Solution
from vcxsln.errors import ProjectParseError, SolutionIOError
from vcxsln.msbuild.evaluator import evaluate
from vcxsln.msbuild.project import load_project
from vcxsln.msbuild.solution import SolutionParser

logger = logging.getLogger(__name__)


def resolve_project_path(solution_dir: Path, relative_path: str) -> Path:
    """Join a project path as written in the .sln onto the solution directory.

    Solution files always use backslashes, so the relative path is split as
    a Windows path and rejoined with the host separator.
    """
    return solution_dir.joinpath(*PureWindowsPath(relative_path).parts)


def _evaluated(value: str, variables: dict[str, str], read_env: bool) -> str:
    result = evaluate(value, variables, read_env=read_env)
    if not result.ok:
        logger.debug(f"Keeping {value!r} unexpanded: $({result.unresolved}) is not defined")
        return value
    return result.value


def _evaluate_project(project: Project, variables: dict[str, str], read_env: bool) -> None:
    """Expand $(Name) references in the parsed file lists and compiler settings."""
    project.compile_list = [_evaluated(p, variables, read_env) for p in project.compile_list]
    project.include_list = [_evaluated(p, variables, read_env) for p in project.include_list]
    for group in project.item_definition_groups:
        group.preprocessor_definitions = _evaluated(
            group.preprocessor_definitions, variables, read_env
        )
        group.additional_include_directories = _evaluated(
            group.additional_include_directories, variables, read_env
        )


def load_solution(filepath: str | os.PathLike, config: LoadConfig | None = None) -> Solution:
    """Parse a .sln file, then each .vcxproj it lists.

    Raises SolutionIOError if the solution cannot be read and
    MalformedLineError on a grammar violation in it. A project file that
    cannot be parsed leaves its Project with the fields from the solution
    only and is recorded in ``Solution.failures``, unless ``config.strict``
    is set, in which case the ProjectParseError propagates.
    """
    if config is None:
        config = LoadConfig()

    path = Path(filepath)
    solution = Solution(name=path.stem, filepath=str(path))

    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            SolutionParser(solution, filename=str(path)).parse(f)
    except OSError as e:
        raise SolutionIOError(str(path), e.strerror or str(e)) from e
    except UnicodeDecodeError as e:
        raise SolutionIOError(str(path), f"not valid UTF-8 ({e.reason})") from e

    solution_dir = path.parent
    for project in solution.projects:
        if config.skip_folders and project.is_folder:
            logger.debug(f"Skipping solution folder {project.name}")
            continue

        project_path = resolve_project_path(solution_dir, project.filepath)
        variables = {**config.variables, "SolutionDir": str(solution_dir)}

        logger.debug(f"Loading project {project.name} from {project_path}")
        try:
            load_project(project, str(project_path), variables)
        except ProjectParseError as e:
            if config.strict:
                raise
            logger.warning(str(e))
            solution.failures.append(ProjectLoadFailure(
                project_id=project.id,
                path=str(project_path),
                reason=e.reason,
            ))
            continue

        if config.evaluate_variables:
            _evaluate_project(project, variables, config.read_env)

    return solution
