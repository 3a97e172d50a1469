from fieldnorm.schemas.reflector import (
    FieldKind,
    FieldSpec,
    RecordSchema,
    Normalize,
    describe,
    is_record,
    is_record_type,
    register_overrides,
    clear_overrides,
)

__all__ = [
    "FieldKind",
    "FieldSpec",
    "RecordSchema",
    "Normalize",
    "describe",
    "is_record",
    "is_record_type",
    "register_overrides",
    "clear_overrides",
]
