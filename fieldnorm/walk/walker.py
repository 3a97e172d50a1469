"""
Record walker - rewrites annotated string fields in place.

Entry point is apply(record). The walker asks the schema reflector for the
record's field table and dispatches on each field's kind:

- STRING / OPTIONAL_STRING: run the field's directives (None stays None)
- RECORD: recurse; an annotated wrapped scalar has its single string
  field rewritten with the outer annotation instead
- SEQUENCE: rewrite every string element with the field's directives, or
  recurse into every record element
- MAPPING: recurse into a copy of every record value and store the copy
  back under the same key (keys are never touched)
- anything else: ignored

There is no rollback. The only structural error (NotAPointerError) is
raised before any field is touched; an extension transform that raises
mid-walk leaves the fields visited before it already rewritten.
"""
import copy
import logging
import numbers
from collections.abc import MutableMapping
from typing import Any, Optional

from fieldnorm.core.errors import NotAPointerError
from fieldnorm.registry.extensions import TransformRegistry
from fieldnorm.schemas.reflector import FieldKind, FieldSpec, describe, is_record
from fieldnorm.transform.chain import transform_chain

logger = logging.getLogger(__name__)

# Values that can never be rewritten in place
_IMMUTABLE_TYPES = (str, bytes, numbers.Number, tuple, frozenset, range, type(None))


class RecordWalker:
    """
    Walks a record graph and rewrites annotated strings.

    Holds the registry used for extension directives and counts rewritten
    values so callers can log or assert on the work done.
    """

    def __init__(self, registry: Optional[TransformRegistry] = None):
        """
        Initialize the walker.

        Args:
            registry: Extension registry. If None, the process-wide one is used.
        """
        self.registry = registry
        self.values_rewritten = 0

    def walk(self, record: Any) -> None:
        """
        Rewrite every annotated string reachable from record.

        Args:
            record: Dataclass or pydantic model instance (mutated in place)

        Raises:
            NotAPointerError: If record is an immutable value
        """
        if isinstance(record, type):
            raise NotAPointerError(f"Expected a record instance, got the class {record.__qualname__}")
        if isinstance(record, _IMMUTABLE_TYPES):
            raise NotAPointerError(
                f"Expected a mutable record, got immutable {type(record).__name__}"
            )
        if is_record(record) and describe(type(record)).frozen:
            raise NotAPointerError(
                f"Expected a mutable record, got frozen {type(record).__qualname__}"
            )

        self._walk_record(record)

    # ==================== Traversal ====================

    def _walk_record(self, record: Any) -> None:
        if not is_record(record):
            return

        schema = describe(type(record))
        if schema.frozen:
            logger.debug("Skipping frozen record %s", type(record).__qualname__)
            return

        for spec in schema.fields:
            if spec.kind in (FieldKind.STRING, FieldKind.OPTIONAL_STRING):
                self._rewrite_field(record, spec, spec.directives)
            elif spec.kind == FieldKind.RECORD:
                self._walk_nested(record, spec)
            elif spec.kind == FieldKind.SEQUENCE:
                self._walk_sequence(record, spec)
            elif spec.kind == FieldKind.MAPPING:
                self._walk_mapping(record, spec)

    def _walk_nested(self, record: Any, spec: FieldSpec) -> None:
        nested = getattr(record, spec.name)
        if nested is None or not is_record(nested):
            return

        if spec.annotated and spec.record_type is not None:
            inner = describe(spec.record_type).wrapped_string
            if inner is not None and not describe(type(nested)).frozen:
                # Declared type is a wrapped scalar: the outer annotation applies to its string
                self._rewrite_field(nested, inner, spec.directives)
                return

        self._walk_record(nested)

    def _walk_sequence(self, record: Any, spec: FieldSpec) -> None:
        items = getattr(record, spec.name)
        if items is None:
            return

        if spec.element_kind == FieldKind.RECORD:
            for item in items:
                self._walk_record(item)
            return

        if spec.element_kind not in (FieldKind.STRING, FieldKind.OPTIONAL_STRING) or not spec.annotated:
            return

        if isinstance(items, list):
            for i, item in enumerate(items):
                items[i] = self._transform(item, spec)
        elif isinstance(items, tuple):
            setattr(record, spec.name, tuple(self._transform(item, spec) for item in items))
        else:
            logger.debug(
                "Field '%s' holds an unsupported sequence type %s, skipping",
                spec.name,
                type(items).__name__,
            )

    def _walk_mapping(self, record: Any, spec: FieldSpec) -> None:
        mapping = getattr(record, spec.name)
        if spec.element_kind != FieldKind.RECORD or not isinstance(mapping, MutableMapping):
            return

        for key in list(mapping.keys()):
            value = mapping[key]
            if value is None:
                continue
            value_copy = copy.copy(value)
            self._walk_record(value_copy)
            mapping[key] = value_copy

    # ==================== Rewriting ====================

    def _transform(self, value: Optional[str], spec: FieldSpec) -> Optional[str]:
        """Run spec's directives over one string; None passes through."""
        if value is None:
            return None
        result = transform_chain(value, spec.directives, self.registry)
        if spec.string_type is not None:
            result = spec.string_type(result)
        if result != value:
            self.values_rewritten += 1
        return result

    def _rewrite_field(self, record: Any, spec: FieldSpec, directives: str) -> None:
        if not directives:
            return

        value = getattr(record, spec.name)
        if value is None:
            return

        result = transform_chain(value, directives, self.registry)
        if spec.string_type is not None:
            result = spec.string_type(result)
        if result == value:
            return

        setattr(record, spec.name, result)
        self.values_rewritten += 1
        logger.debug(
            "Rewrote %s.%s with '%s'",
            type(record).__qualname__,
            spec.name,
            directives,
        )


def apply(record: Any, registry: Optional[TransformRegistry] = None) -> None:
    """
    Normalize a record's annotated string fields in place.

    Args:
        record: Dataclass or pydantic model instance. Any other mutable
            object is accepted and left alone.
        registry: Extension registry; defaults to the process-wide one

    Raises:
        NotAPointerError: If record is immutable (str, number, tuple, None,
            frozen dataclass or frozen pydantic model) or a class
        TransformError: If an extension transform raises
    """
    RecordWalker(registry).walk(record)
