"""
Extension transform registry.

Holds caller-supplied transforms looked up by name whenever a directive is
not one of the built-ins. The table is copy-on-write: register() copies it
under a lock and swaps the reference, so lookups never lock and never see a
half-updated table.
"""
import logging
import threading
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional

from fieldnorm.core.errors import RegistrationError
from fieldnorm.transform.normalizers import BUILTIN_TRANSFORMS, TRUNCATE_PATTERN, Transform

logger = logging.getLogger(__name__)


class TransformRegistry:
    """
    Name -> transform table consulted by the chain interpreter.

    Entries are only ever added or replaced, never removed.
    """

    def __init__(self, transforms: Optional[Dict[str, Transform]] = None):
        self._lock = threading.Lock()
        self._transforms: Mapping[str, Transform] = MappingProxyType({})
        for name, fn in (transforms or {}).items():
            self.register(name, fn)

    def register(self, name: str, fn: Transform) -> None:
        """
        Register (or replace) an extension transform.

        Args:
            name: Directive name used in annotations
            fn: Function taking and returning a string

        Raises:
            RegistrationError: If the name is empty, contains a comma,
                collides with a built-in directive, or fn is not callable
        """
        self._validate(name, fn)

        with self._lock:
            replaced = name in self._transforms
            updated = dict(self._transforms)
            updated[name] = fn
            self._transforms = MappingProxyType(updated)

        if replaced:
            logger.warning("Replaced extension transform '%s'", name)
        else:
            logger.info("Registered extension transform '%s'", name)

    def get(self, name: str) -> Optional[Transform]:
        """Return the transform registered under name, or None."""
        return self._transforms.get(name)

    def names(self) -> List[str]:
        """Registered names, sorted."""
        return sorted(self._transforms)

    def __contains__(self, name: object) -> bool:
        return name in self._transforms

    def __len__(self) -> int:
        return len(self._transforms)

    def __repr__(self) -> str:
        return f"<TransformRegistry: {len(self)} transforms>"

    @staticmethod
    def _validate(name: str, fn: Transform) -> None:
        if not isinstance(name, str) or not name.strip():
            raise RegistrationError("Transform name must be a non-empty string")
        if name != name.strip():
            raise RegistrationError(f"Transform name '{name}' has surrounding whitespace")
        if "," in name:
            raise RegistrationError(f"Transform name '{name}' must not contain ','")
        if name in BUILTIN_TRANSFORMS or TRUNCATE_PATTERN.match(name):
            raise RegistrationError(f"Transform name '{name}' is a built-in directive")
        if not callable(fn):
            raise RegistrationError(f"Transform '{name}' is not callable: {fn!r}")


# Process-wide registry used when no explicit registry is passed
default_registry = TransformRegistry()


def register_transform(name: str, fn: Optional[Transform] = None):
    """
    Register an extension transform in the process-wide registry.

    Works as a plain call or as a decorator:

        register_transform("nospaces", lambda s: s.replace(" ", ""))

        @register_transform("reverse")
        def reverse(value: str) -> str:
            return value[::-1]

    Registering a name twice replaces the earlier function.
    """
    if fn is not None:
        default_registry.register(name, fn)
        return fn

    def decorator(func: Callable[[str], str]) -> Callable[[str], str]:
        default_registry.register(name, func)
        return func

    return decorator
