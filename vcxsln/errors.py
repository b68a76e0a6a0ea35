"""Exception types raised while loading solutions and projects."""

from __future__ import annotations


class VcxslnError(Exception):
    """Base class for all errors raised by vcxsln."""


class SolutionIOError(VcxslnError, OSError):
    """The solution file could not be opened or read."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Could not open solution {path}: {reason}")
        self.path = path
        self.reason = reason


class MalformedLineError(VcxslnError, ValueError):
    """A solution line is missing a mandatory separator or field."""

    def __init__(self, message: str, filename: str, line_number: int, line: str) -> None:
        super().__init__(f"{filename}:{line_number}: {message} ({line!r})")
        self.filename = filename
        self.line_number = line_number
        self.line = line


class ProjectParseError(VcxslnError):
    """A project file is missing, unreadable or not well-formed XML."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Failed to parse project {path}: {reason}")
        self.path = path
        self.reason = reason


class UnresolvedVariableError(VcxslnError, KeyError):
    def __init__(self, name: str, value: str) -> None:
        super().__init__(name)
        self.name = name
        self.value = value

    def __str__(self) -> str:
        return f"Unresolved variable $({self.name}) in {self.value!r}"


class DependencyCycleError(VcxslnError):
    def __init__(self, cycle: list[str]) -> None:
        super().__init__("Dependency cycle: " + " -> ".join(cycle))
        self.cycle = cycle
