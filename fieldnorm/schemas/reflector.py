"""
Schema reflector - turns a record class into an ordered field table.

A record is a dataclass instance or a pydantic model instance. For each
record class the reflector builds a RecordSchema once (cached) listing
every public field with:
- its kind (string, optional string, nested record, sequence, mapping)
- the directives attached to it, if any

Directives come from, in priority order:
1. overrides installed with register_overrides() (see registry/loader.py)
2. a Normalize("...") marker inside typing.Annotated[...]
3. dataclass field(metadata={TAG_KEY: "..."}) or
   pydantic Field(json_schema_extra={TAG_KEY: "..."})

Fields whose name starts with "_" are private and left out of the table.
"""
import collections.abc
import dataclasses
import logging
import sys
import threading
import types
import typing
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Any, Annotated, Dict, Iterator, List, Optional, Tuple, Union, get_args, get_origin

from pydantic import BaseModel

from fieldnorm.core.config import settings

logger = logging.getLogger(__name__)

_NONE_TYPE = type(None)
_SEQUENCE_ORIGINS = (list, tuple, collections.abc.Sequence, collections.abc.MutableSequence)
_MAPPING_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)

_overrides: Dict[type, Dict[str, str]] = {}
_overrides_lock = threading.Lock()


class FieldKind(str, Enum):
    """Closed set of field shapes the walker knows how to handle."""

    STRING = "string"
    OPTIONAL_STRING = "optional_string"
    RECORD = "record"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    OTHER = "other"


@dataclass(frozen=True)
class Normalize:
    """
    Annotation marker carrying a directive list.

        @dataclass
        class Signup:
            email: Annotated[str, Normalize("trim,email")]
    """

    directives: str


@dataclass(frozen=True)
class FieldSpec:
    """Descriptor for a single record field."""

    name: str
    kind: FieldKind
    directives: str = ""
    element_kind: Optional[FieldKind] = None  # SEQUENCE elements / MAPPING values
    record_type: Optional[type] = None  # RECORD, or record elements / values
    string_type: Optional[type] = None  # str subclass to rebuild written values

    @property
    def annotated(self) -> bool:
        return bool(self.directives)


@dataclass(frozen=True)
class RecordSchema:
    """Ordered field table for one record class."""

    record_type: type
    fields: Tuple[FieldSpec, ...] = field(default_factory=tuple)
    frozen: bool = False

    @property
    def wrapped_string(self) -> Optional[FieldSpec]:
        """
        The single string field of a wrapped-scalar record, or None.

        A wrapped scalar holds exactly one string (or optional string) field
        and nothing else that carries strings, e.g. a nullable string:

            @dataclass
            class NullString:
                string: str = ""
                valid: bool = False
        """
        strings = [f for f in self.fields if f.kind in (FieldKind.STRING, FieldKind.OPTIONAL_STRING)]
        nested = [
            f for f in self.fields
            if f.kind in (FieldKind.RECORD, FieldKind.SEQUENCE, FieldKind.MAPPING)
        ]
        if len(strings) == 1 and not nested:
            return strings[0]
        return None


# ==================== Record detection ====================

def is_record_type(tp: Any) -> bool:
    """True for dataclass classes and pydantic model classes."""
    if not isinstance(tp, type):
        return False
    return dataclasses.is_dataclass(tp) or issubclass(tp, BaseModel)


def is_record(value: Any) -> bool:
    """True for dataclass instances and pydantic model instances."""
    return not isinstance(value, type) and is_record_type(type(value))


# ==================== Overrides ====================

def register_overrides(record_type: type, directives: Dict[str, str]) -> None:
    """
    Attach directives to fields of a record class without touching its source.

    Later calls for the same class merge into (and win over) earlier ones.
    """
    if not is_record_type(record_type):
        raise TypeError(f"{record_type!r} is not a dataclass or pydantic model")

    with _overrides_lock:
        merged = dict(_overrides.get(record_type, {}))
        merged.update(directives)
        _overrides[record_type] = merged
        _describe.cache_clear()

    logger.info(
        "Installed %s directive override(s) for %s",
        len(directives),
        record_type.__qualname__,
    )


def clear_overrides() -> None:
    """Drop every installed override."""
    with _overrides_lock:
        _overrides.clear()
        _describe.cache_clear()


# ==================== Type classification ====================

def _strip_annotated(tp: Any) -> Tuple[Any, str]:
    """Remove an Annotated wrapper, returning the base type and any Normalize directives."""
    directives = ""
    if get_origin(tp) is Annotated:
        base, *extras = get_args(tp)
        for extra in extras:
            if isinstance(extra, Normalize):
                directives = extra.directives
        return base, directives
    return tp, directives


def _strip_optional(tp: Any) -> Tuple[Any, bool]:
    """Reduce Optional[X] / X | None to X. Other unions are left untouched."""
    if get_origin(tp) in (Union, types.UnionType):
        args = [a for a in get_args(tp) if a is not _NONE_TYPE]
        if len(args) == 1 and len(args) != len(get_args(tp)):
            return args[0], True
    return tp, False


def _string_type(tp: Any) -> Tuple[bool, Optional[type]]:
    """
    Check whether tp carries a string.

    Returns (is_string, constructor) where constructor is the str subclass
    written values must be rebuilt with (None for plain str and NewType).
    """
    # typing.NewType("Email", str)
    while hasattr(tp, "__supertype__"):
        tp = tp.__supertype__
    if tp is str:
        return True, None
    if isinstance(tp, type) and issubclass(tp, str) and not issubclass(tp, Enum):
        return True, tp
    return False, None


def _classify_element(tp: Any) -> Tuple[FieldKind, Optional[type], Optional[type]]:
    """Classify a container element: (kind, record_type, string_type)."""
    tp, _ = _strip_annotated(tp)
    tp, optional = _strip_optional(tp)
    tp, _ = _strip_annotated(tp)

    is_string, string_type = _string_type(tp)
    if is_string:
        kind = FieldKind.OPTIONAL_STRING if optional else FieldKind.STRING
        return kind, None, string_type
    if is_record_type(tp):
        return FieldKind.RECORD, tp, None
    return FieldKind.OTHER, None, None


def _classify(name: str, tp: Any, directives: str) -> FieldSpec:
    """Build the FieldSpec for one field from its type hint."""
    tp, marker = _strip_annotated(tp)
    tp, optional = _strip_optional(tp)
    tp, inner_marker = _strip_annotated(tp)
    directives = inner_marker or marker or directives

    is_string, string_type = _string_type(tp)
    if is_string:
        kind = FieldKind.OPTIONAL_STRING if optional else FieldKind.STRING
        return FieldSpec(name=name, kind=kind, directives=directives, string_type=string_type)

    if is_record_type(tp):
        return FieldSpec(name=name, kind=FieldKind.RECORD, directives=directives, record_type=tp)

    origin = get_origin(tp)
    args = get_args(tp)

    if origin in _SEQUENCE_ORIGINS:
        if origin is tuple and not (len(args) == 2 and args[1] is Ellipsis):
            # Only homogeneous Tuple[X, ...] is walked
            return FieldSpec(name=name, kind=FieldKind.OTHER, directives=directives)
        element_kind, record_type, string_type = (
            _classify_element(args[0]) if args else (FieldKind.OTHER, None, None)
        )
        return FieldSpec(
            name=name,
            kind=FieldKind.SEQUENCE,
            directives=directives,
            element_kind=element_kind,
            record_type=record_type,
            string_type=string_type,
        )

    if origin in _MAPPING_ORIGINS:
        element_kind, record_type, _ = (
            _classify_element(args[1]) if len(args) == 2 else (FieldKind.OTHER, None, None)
        )
        return FieldSpec(
            name=name,
            kind=FieldKind.MAPPING,
            directives=directives,
            element_kind=element_kind,
            record_type=record_type,
        )

    return FieldSpec(name=name, kind=FieldKind.OTHER, directives=directives)


# ==================== Field enumeration ====================

def _declaring_class(record_type: type, field_name: str) -> type:
    for klass in record_type.__mro__:
        if field_name in klass.__dict__.get("__annotations__", {}):
            return klass
    return record_type


def _resolve_hint(record_type: type, f: dataclasses.Field) -> Any:
    """
    Evaluate one string annotation in the namespace of the class declaring it.

    Used when typing.get_type_hints() fails for the class as a whole (e.g. a
    forward reference to a locally defined class under postponed
    annotations), so one unresolvable field does not hide the others.
    Returns the raw string when the annotation cannot be evaluated; the
    field then classifies as OTHER.
    """
    if not isinstance(f.type, str):
        return f.type

    owner = _declaring_class(record_type, f.name)
    module = sys.modules.get(owner.__module__)
    globalns = dict(vars(module)) if module is not None else {}
    try:
        return eval(f.type, globalns, dict(vars(owner)))
    except (NameError, AttributeError, SyntaxError, TypeError) as e:
        logger.warning(
            "Could not resolve type hint %r for %s.%s (%s); field is ignored",
            f.type,
            record_type.__qualname__,
            f.name,
            e,
        )
        return f.type


def _dataclass_fields(record_type: type, tag_key: str) -> Iterator[Tuple[str, Any, str]]:
    """Yield (name, type hint, metadata directives) for a dataclass."""
    try:
        hints = typing.get_type_hints(record_type, include_extras=True)
    except (NameError, TypeError) as e:
        logger.debug(
            "get_type_hints failed for %s (%s); resolving fields one by one",
            record_type.__qualname__,
            e,
        )
        hints = {f.name: _resolve_hint(record_type, f) for f in dataclasses.fields(record_type)}

    for f in dataclasses.fields(record_type):
        yield f.name, hints.get(f.name, f.type), f.metadata.get(tag_key, "")


def _pydantic_fields(record_type: type, tag_key: str) -> Iterator[Tuple[str, Any, str]]:
    """Yield (name, type hint, json_schema_extra directives) for a pydantic model."""
    for name, info in record_type.model_fields.items():
        hint = info.annotation
        if info.metadata:
            hint = Annotated[(hint, *info.metadata)]

        extra = info.json_schema_extra
        directives = extra.get(tag_key, "") if isinstance(extra, dict) else ""
        yield name, hint, directives


def _is_frozen(record_type: type) -> bool:
    if dataclasses.is_dataclass(record_type):
        return record_type.__dataclass_params__.frozen
    return bool(record_type.model_config.get("frozen", False))


@lru_cache(maxsize=None)
def _describe(record_type: type, tag_key: str) -> RecordSchema:
    if not is_record_type(record_type):
        raise TypeError(f"{record_type!r} is not a dataclass or pydantic model")

    if dataclasses.is_dataclass(record_type):
        raw_fields = _dataclass_fields(record_type, tag_key)
    else:
        raw_fields = _pydantic_fields(record_type, tag_key)

    overrides = _overrides.get(record_type, {})
    specs: List[FieldSpec] = []
    for name, hint, directives in raw_fields:
        if name.startswith("_"):
            continue
        spec = _classify(name, hint, directives if isinstance(directives, str) else "")
        if name in overrides:
            spec = dataclasses.replace(spec, directives=overrides[name])
        specs.append(spec)

    schema = RecordSchema(record_type=record_type, fields=tuple(specs), frozen=_is_frozen(record_type))
    logger.debug(
        "Described %s: %s fields, %s annotated",
        record_type.__qualname__,
        len(schema.fields),
        sum(1 for f in schema.fields if f.annotated),
    )
    return schema


def describe(record_type: type) -> RecordSchema:
    """
    Return the cached field table for a record class.

    Args:
        record_type: Dataclass or pydantic model class

    Returns:
        RecordSchema with fields in declaration order

    Raises:
        TypeError: If record_type is not a record class
    """
    return _describe(record_type, settings.TAG_KEY)


