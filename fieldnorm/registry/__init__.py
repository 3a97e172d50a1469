"""
Registry module: extension transforms and annotation overrides.
"""
from fieldnorm.registry.extensions import TransformRegistry, default_registry, register_transform
from fieldnorm.registry.loader import (
    AnnotationLoader,
    AnnotationOverrides,
    RecordOverrides,
    install_from_settings,
)

__all__ = [
    "TransformRegistry",
    "default_registry",
    "register_transform",
    "AnnotationLoader",
    "AnnotationOverrides",
    "RecordOverrides",
    "install_from_settings",
]
