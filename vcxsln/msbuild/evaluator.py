"""Expansion of MSBuild $(Name) variable references."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from vcxsln.errors import UnresolvedVariableError

# Upper bound on substitutions for a single string; a table whose values
# refer back to themselves would otherwise never terminate.
MAX_SUBSTITUTIONS = 1000


@dataclass(frozen=True)
class Evaluation:
    """Result of expanding a string.

    ``value`` is always the string as far as expansion got. When a reference
    could not be resolved, ``unresolved`` names it and ``value`` keeps that
    reference (and everything after it) verbatim.
    """
    value: str
    unresolved: str | None = None

    @property
    def ok(self) -> bool:
        return self.unresolved is None

    def __bool__(self) -> bool:
        return self.ok


def evaluate(
    s: str,
    variables: Mapping[str, str],
    read_env: bool = True,
    environ: Mapping[str, str] | None = None,
) -> Evaluation:
    """Replace every ``$(Name)`` in ``s``.

    Names are looked up in ``variables`` first, then in the process
    environment (or ``environ``) when ``read_env`` is set. Scanning resumes
    at the start of each substituted value, so values may themselves contain
    references.
    """
    if environ is None:
        environ = os.environ

    value = s
    substitutions = 0

    start = value.find("$(")
    while start != -1:
        end = value.find(")", start)
        if end == -1:
            # Unterminated reference: report the dangling tail
            return Evaluation(value, value[start + 2:])

        name = value[start + 2:end]
        if name in variables:
            replacement = variables[name]
        elif read_env and name in environ:
            replacement = environ[name]
        else:
            return Evaluation(value, name)

        substitutions += 1
        if substitutions > MAX_SUBSTITUTIONS:
            return Evaluation(value, name)

        value = value[:start] + replacement + value[end + 1:]
        start = value.find("$(", start)

    return Evaluation(value)


def evaluate_or_raise(
    s: str,
    variables: Mapping[str, str],
    read_env: bool = True,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Like :func:`evaluate` but raise :class:`UnresolvedVariableError` on failure."""
    result = evaluate(s, variables, read_env=read_env, environ=environ)
    if not result.ok:
        raise UnresolvedVariableError(result.unresolved, result.value)
    return result.value
