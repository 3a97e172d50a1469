"""
Transform chain interpreter.

Evaluates an annotation such as "trim,lower,truncate=64" against a string:
directives run left to right, each receiving the previous output.

A truncate=<N> directive that actually cuts the value ends the chain
immediately, so directives after it never run.
When the value is already shorter than N the chain continues.
"""
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple

from fieldnorm.core.errors import TransformError
from fieldnorm.registry.extensions import TransformRegistry, default_registry
from fieldnorm.transform.normalizers import BUILTIN_TRANSFORMS, TRUNCATE_PATTERN, truncate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Directive:
    """One comma-separated element of an annotation."""

    name: str
    truncate_at: Optional[int] = None  # set for truncate=<N>

    @property
    def is_builtin(self) -> bool:
        return self.truncate_at is not None or self.name in BUILTIN_TRANSFORMS


@lru_cache(maxsize=1024)
def parse_directives(directives: str) -> Tuple[Directive, ...]:
    """
    Split an annotation into directives.

    No trimming or escaping is done: "trim, lower" yields the directives
    "trim" and " lower", and the second one matches nothing.

    Args:
        directives: Comma-separated directive list

    Returns:
        Tuple of parsed directives (empty for an empty annotation)
    """
    if not directives:
        return ()

    parsed = []
    for part in directives.split(","):
        match = TRUNCATE_PATTERN.match(part)
        if match:
            parsed.append(Directive(name=part, truncate_at=int(match.group(1))))
        else:
            parsed.append(Directive(name=part))
    return tuple(parsed)


def transform_chain(
    value: str,
    directives: str,
    registry: Optional[TransformRegistry] = None,
) -> str:
    """
    Apply an annotation's directives to a string.

    Unknown directives with no registered extension are skipped; later
    directives still apply.

    Args:
        value: Input string
        directives: Comma-separated directive list ("trim,lower")
        registry: Extension registry; defaults to the process-wide one

    Returns:
        Transformed string

    Raises:
        TransformError: If an extension transform raises
    """
    if not directives:
        return value

    extensions = registry if registry is not None else default_registry

    for directive in parse_directives(directives):
        if directive.truncate_at is not None:
            if len(value) >= directive.truncate_at:
                return truncate(value, directive.truncate_at)
            continue

        if directive.is_builtin:
            value = BUILTIN_TRANSFORMS[directive.name](value)
            continue

        extension = extensions.get(directive.name)
        if extension is None:
            logger.debug("No transform registered for directive '%s', skipping", directive.name)
            continue

        try:
            value = extension(value)
        except Exception as e:
            raise TransformError(directive.name, str(e)) from e

    return value
