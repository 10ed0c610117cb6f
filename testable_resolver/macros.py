"""Expansion of build setting macro references such as ``$(NAME)``."""

import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import overload

log = logging.getLogger(__name__)

MACRO_PATTERN = re.compile(
    r"\$\(([A-Za-z_][A-Za-z0-9_]*)\)"  # $(NAME)
    r"|\$\{([A-Za-z_][A-Za-z0-9_]*)\}"  # ${NAME}
)

MAX_EXPANSION_DEPTH = 32
# Substitutions allowed per top-level reference, nested ones included
MAX_SUBSTITUTIONS = 1024


@dataclass
class _Budget:
    remaining: int


def expand_string(
    value: str,
    settings: Mapping[str, str],
    *,
    max_depth: int = MAX_EXPANSION_DEPTH,
    max_substitutions: int = MAX_SUBSTITUTIONS,
) -> str:
    """Expand every macro reference in ``value`` using ``settings``.

    Substituted values are expanded again, so a setting may refer to another
    setting. References to names missing from ``settings`` are left as-is:
    the test process may still resolve them from its own environment.

    A reference is also left as-is when substituting it would recurse past
    ``max_depth`` or when its name is already being expanded further up the
    chain, which is what stops ``A = $(B)``, ``B = $(A)`` from looping.

    Each top-level reference may trigger at most ``max_substitutions``
    substitutions. Settings such as ``S0 = $(S1)$(S1)``, ``S1 = $(S2)$(S2)``
    contain no cycle but double at every level; once the budget is spent the
    remaining references are left as-is.
    """

    def substitute_top_level(match: re.Match[str]) -> str:
        budget = _Budget(remaining=max_substitutions)
        return _substitute(match, settings, max_depth, (), budget)

    return MACRO_PATTERN.sub(substitute_top_level, value)


def _substitute(
    match: re.Match[str],
    settings: Mapping[str, str],
    max_depth: int,
    chain: tuple[str, ...],
    budget: _Budget,
) -> str:
    name = match.group(1) or match.group(2)
    if name not in settings:
        return match.group(0)
    if name in chain or len(chain) >= max_depth:
        log.debug(
            "Macro expansion exceeded: reference=%s chain=%s",
            match.group(0),
            " -> ".join(chain),
        )
        return match.group(0)
    if budget.remaining <= 0:
        log.debug(
            "Macro substitution budget spent: reference=%s chain=%s",
            match.group(0),
            " -> ".join(chain),
        )
        return match.group(0)

    budget.remaining -= 1
    inner_chain = (*chain, name)
    return MACRO_PATTERN.sub(
        lambda inner: _substitute(inner, settings, max_depth, inner_chain, budget),
        settings[name],
    )


def expand_arguments(
    arguments: Sequence[str], settings: Mapping[str, str] | None
) -> Sequence[str]:
    """Expand each argument; returns the input unchanged without settings."""
    if settings is None:
        return arguments
    return [expand_string(argument, settings) for argument in arguments]


def expand_environment(
    environment: Mapping[str, str], settings: Mapping[str, str] | None
) -> Mapping[str, str]:
    """Expand environment values, never the names."""
    if settings is None:
        return environment
    return {name: expand_string(value, settings) for name, value in environment.items()}


@overload
def expand(value: str, settings: Mapping[str, str] | None) -> str: ...
@overload
def expand(
    value: Mapping[str, str], settings: Mapping[str, str] | None
) -> Mapping[str, str]: ...
@overload
def expand(
    value: Sequence[str], settings: Mapping[str, str] | None
) -> Sequence[str]: ...
def expand(
    value: str | Sequence[str] | Mapping[str, str],
    settings: Mapping[str, str] | None,
) -> str | Sequence[str] | Mapping[str, str]:
    """Expand a string, an argument list or an environment mapping."""
    if isinstance(value, str):
        return value if settings is None else expand_string(value, settings)
    if isinstance(value, Mapping):
        return expand_environment(value, settings)
    return expand_arguments(value, settings)
