"""
Built-in string transforms.

Every transform is a pure str -> str function that never raises. All of
them except truncation and the two escapers are idempotent:
transform(transform(x)) == transform(x).

The directive name each function is registered under lives in
BUILTIN_TRANSFORMS at the bottom of this module.
"""
import re
from typing import Callable, Dict

from markupsafe import escape

from fieldnorm.transform.casing import camel, snake, slug

Transform = Callable[[str], str]

# truncate=<N> is the only parameterized directive
TRUNCATE_PATTERN = re.compile(r"^truncate=([0-9]+)$")

_WORD_START = re.compile(r"(?<!\S)\S")
_NON_DIGITS = re.compile(r"[^0-9]")
_DIGITS = re.compile(r"[0-9]")

# name() helpers, applied in this order after lowercasing
_NAME_COLLAPSE = [
    (re.compile(r"\s{2,}"), " "),  # more than one whitespace -> one space
    (re.compile(r"-{2,}"), "-"),  # more than one hyphen -> one
    (re.compile(r"'{2,}"), "'"),  # more than one apostrophe -> one
    (re.compile(r"( )*-( )*"), "-"),  # no spaces around a hyphen
]
_LETTER = r"[^\W\d_]"
_NAME_TOKEN = re.compile(rf"{_LETTER}(?:(?:{_LETTER}|[\s'\-])*{_LETTER})?")
_NAME_PART_START = re.compile(rf"(?<!{_LETTER}){_LETTER}")

_JS_ESCAPES = {
    "\\": "\\\\",
    "'": "\\'",
    '"': '\\"',
    "<": "\\u003C",
    ">": "\\u003E",
    "&": "\\u0026",
    "=": "\\u003D",
}


# ==================== Whitespace ====================

def trim(value: str) -> str:
    """Strip leading and trailing whitespace."""
    return value.strip()


def ltrim(value: str) -> str:
    """Strip leading spaces (' ' only)."""
    return value.lstrip(" ")


def rtrim(value: str) -> str:
    """Strip trailing spaces (' ' only)."""
    return value.rstrip(" ")


# ==================== Case ====================

def lower(value: str) -> str:
    return value.lower()


def upper(value: str) -> str:
    return value.upper()


def title(value: str) -> str:
    """
    Uppercase the first character of every whitespace-delimited word.

    The rest of each word is left alone: "mcDonald  o'neil" becomes
    "McDonald  O'neil".
    """
    return _WORD_START.sub(lambda m: m.group(0).upper(), value)


def ucfirst(value: str) -> str:
    """Uppercase the first character if it is lowercase; otherwise unchanged."""
    if not value or not value[0].islower():
        return value
    return value[0].upper() + value[1:]


# ==================== Domain formatting ====================

def name(value: str) -> str:
    """
    Format a human name.

    Rules:
    - Lowercase everything
    - Drop anything that is not a letter, hyphen, whitespace or apostrophe
    - Collapse whitespace, hyphen and apostrophe runs to a single character
    - Remove spaces around hyphens
    - Keep the first longest name-shaped token (starts and ends with a letter)
    - Title-case every letter that starts a name part

    Idempotent: name("O'Neil-Smith") == "O'Neil-Smith", name("a - - b") == "A-B"

    Args:
        value: Raw name ("  JOHN  o''neil -- smith 3rd ")

    Returns:
        Formatted name ("John O'Neil-Smith Rd"), or "" when the input holds
        no letters at all
    """
    cleaned = "".join(
        c for c in value.lower() if c.isalpha() or c.isspace() or c in "-'"
    )
    # Repeat until stable: dropping spaces around hyphens can create new runs ("a - - b")
    previous = None
    while cleaned != previous:
        previous = cleaned
        for pattern, replacement in _NAME_COLLAPSE:
            cleaned = pattern.sub(replacement, cleaned)

    match = _NAME_TOKEN.search(cleaned)
    if match is None:
        return ""
    return _NAME_PART_START.sub(lambda m: m.group(0).title(), match.group(0))


def email(value: str) -> str:
    """
    Lowercase the domain part of an e-mail address.

    The local part is case sensitive (RFC 5321) and is kept as typed. The
    last "@" separates local part and domain; a value without "@" is
    returned unchanged.

    Surrounding whitespace is not trimmed, so " a@B.com " keeps its spaces.
    Chain "trim,email" to strip it first.
    """
    local, sep, domain = value.rpartition("@")
    if not sep:
        return value
    return f"{local}@{domain.lower()}"


# ==================== Character classes ====================

def only_numbers(value: str) -> str:
    """Keep ASCII digits only."""
    return _NON_DIGITS.sub("", value)


def strip_numbers(value: str) -> str:
    """Remove ASCII digits."""
    return _DIGITS.sub("", value)


def only_alpha(value: str) -> str:
    """Keep Unicode letters only."""
    return "".join(c for c in value if c.isalpha())


def strip_alpha(value: str) -> str:
    """Remove Unicode letters."""
    return "".join(c for c in value if not c.isalpha())


# ==================== Escaping ====================

def escape_html(value: str) -> str:
    """
    Escape for embedding in HTML text or attribute values.

    & < > " ' become &amp; &lt; &gt; &#34; &#39;. NUL becomes U+FFFD.
    """
    return str(escape(value)).replace("\x00", "\ufffd")


def escape_js(value: str) -> str:
    """
    Escape for embedding inside a JavaScript string literal.

    Backslash and quotes are backslash-escaped; < > & = and control
    characters become \\uXXXX; non-printable non-ASCII characters become
    \\uXXXX as well.
    """
    out = []
    for c in value:
        if c in _JS_ESCAPES:
            out.append(_JS_ESCAPES[c])
        elif c < " " or (c >= "\x80" and not c.isprintable()):
            out.append(f"\\u{ord(c):04X}")
        else:
            out.append(c)
    return "".join(out)


# ==================== Truncation ====================

def truncate(value: str, length: int) -> str:
    """Return the first `length` code points when value is at least that long."""
    if len(value) >= length:
        return value[:length]
    return value


BUILTIN_TRANSFORMS: Dict[str, Transform] = {
    "trim": trim,
    "ltrim": ltrim,
    "rtrim": rtrim,
    "lower": lower,
    "upper": upper,
    "title": title,
    "ucfirst": ucfirst,
    "camel": camel,
    "snake": snake,
    "slug": slug,
    "name": name,
    "email": email,
    "num": only_numbers,
    "!num": strip_numbers,
    "alpha": only_alpha,
    "!alpha": strip_alpha,
    "!html": escape_html,
    "!js": escape_js,
}
