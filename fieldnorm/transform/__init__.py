"""
Transform module: built-in string transforms and casing-style conversion.

The chain interpreter lives in fieldnorm.transform.chain.
"""
from fieldnorm.transform.normalizers import (
    BUILTIN_TRANSFORMS,
    TRUNCATE_PATTERN,
    trim,
    ltrim,
    rtrim,
    lower,
    upper,
    title,
    ucfirst,
    name,
    email,
    only_numbers,
    strip_numbers,
    only_alpha,
    strip_alpha,
    escape_html,
    escape_js,
    truncate,
)
from fieldnorm.transform.casing import INITIALISMS, split_words, camel, snake, slug

__all__ = [
    "BUILTIN_TRANSFORMS",
    "TRUNCATE_PATTERN",
    "INITIALISMS",
    "trim",
    "ltrim",
    "rtrim",
    "lower",
    "upper",
    "title",
    "ucfirst",
    "name",
    "email",
    "only_numbers",
    "strip_numbers",
    "only_alpha",
    "strip_alpha",
    "escape_html",
    "escape_js",
    "truncate",
    "split_words",
    "camel",
    "snake",
    "slug",
]
