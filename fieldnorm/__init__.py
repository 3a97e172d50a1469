"""
fieldnorm - declarative, in-place normalization of annotated string fields.

    from dataclasses import dataclass, field
    from typing import Annotated
    import fieldnorm

    @dataclass
    class Signup:
        email: Annotated[str, fieldnorm.Normalize("trim,email")]
        name: str = field(default="", metadata={"normalize": "trim,name"})

    form = Signup(email="  Jane.Doe@EXAMPLE.com ", name="  jANE   doe ")
    fieldnorm.apply(form)
    # Signup(email='Jane.Doe@example.com', name='Jane Doe')
"""
from fieldnorm.core.errors import (
    FieldnormError,
    NotAPointerError,
    TransformError,
    RegistrationError,
    AnnotationConfigError,
)
from fieldnorm.registry.extensions import TransformRegistry, default_registry, register_transform
from fieldnorm.registry.loader import AnnotationLoader
from fieldnorm.schemas.reflector import Normalize
from fieldnorm.transform.chain import transform_chain, parse_directives
from fieldnorm.walk.walker import RecordWalker, apply

__version__ = "0.1.0"

__all__ = [
    "apply",
    "transform_chain",
    "parse_directives",
    "register_transform",
    "TransformRegistry",
    "default_registry",
    "RecordWalker",
    "Normalize",
    "AnnotationLoader",
    "FieldnormError",
    "NotAPointerError",
    "TransformError",
    "RegistrationError",
    "AnnotationConfigError",
]
