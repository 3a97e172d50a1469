"""
Core settings, logging and errors shared by every fieldnorm module.
"""
from fieldnorm.core.errors import (
    FieldnormError,
    NotAPointerError,
    TransformError,
    RegistrationError,
    AnnotationConfigError,
)

__all__ = [
    "FieldnormError",
    "NotAPointerError",
    "TransformError",
    "RegistrationError",
    "AnnotationConfigError",
]
