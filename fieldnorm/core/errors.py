"""
Exception hierarchy for fieldnorm.

Only apply() has a structural failure mode (NotAPointerError). Everything
else that can go wrong is a configuration problem surfaced at registration
or load time, or an extension transform that raised.
"""


class FieldnormError(Exception):
    """Base class for all fieldnorm errors."""

    pass


class NotAPointerError(FieldnormError, TypeError):
    """Raised when apply() is given a value that cannot be mutated in place."""

    pass


class TransformError(FieldnormError):
    """Raised when an extension transform fails while a chain is evaluated."""

    def __init__(self, directive: str, message: str):
        self.directive = directive
        super().__init__(f"Transform '{directive}' failed: {message}")


class RegistrationError(FieldnormError, ValueError):
    """Raised when an extension transform cannot be registered."""

    pass


class AnnotationConfigError(FieldnormError):
    """Raised when an annotation overrides file is invalid."""

    pass
