"""JSON serialisation of a loaded solution."""

from __future__ import annotations

import json
from dataclasses import asdict
from enum import Enum
from typing import Any

from vcxsln.config import Solution


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def solution_to_dict(solution: Solution) -> dict[str, Any]:
    """Convert the solution tree to JSON-compatible dicts and lists."""
    data = _plain(asdict(solution))
    for project, project_data in zip(solution.projects, data["projects"]):
        project_data["is_folder"] = project.is_folder
    return data


def dumps(solution: Solution, indent: int | None = 2) -> str:
    return json.dumps(solution_to_dict(solution), indent=indent)
