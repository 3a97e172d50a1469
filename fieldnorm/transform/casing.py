"""
Casing-style conversion: word segmentation plus camel/snake/slug joins.

All three styles share split_words(), so for any input they produce the
same words and differ only in separator and letter case:

    split_words("user HTTPServer id")  -> ["user", "HTTP", "Server", "Id"]
    camel(...)                         -> "userHttpServerId"
    snake(...)                         -> "user_http_server_id"
    slug(...)                          -> "user-http-server-id"
"""
import unicodedata
from itertools import groupby
from typing import List

# Shortest and longest entries of INITIALISMS
_MIN_INITIALISM = 2
_MAX_INITIALISM = 5

# Common initialisms, kept whole during segmentation
INITIALISMS = frozenset({
    "API",
    "ASCII",
    "CPU",
    "CSS",
    "DNS",
    "EOF",
    "GUID",
    "HTML",
    "HTTP",
    "HTTPS",
    "ID",
    "IP",
    "JSON",
    "LHS",
    "QPS",
    "RAM",
    "RHS",
    "RPC",
    "SLA",
    "SMTP",
    "SSH",
    "TLS",
    "TTL",
    "UI",
    "UID",
    "UUID",
    "URI",
    "URL",
    "UTF8",
    "VM",
    "XML",
})


def _is_word_char(c: str) -> bool:
    # Combining marks belong to the letter they follow ("e" + U+0301)
    return c.isalnum() or unicodedata.category(c).startswith("M")


def alnum_runs(value: str) -> List[str]:
    """Split value into runs of letters, digits and combining marks."""
    return ["".join(chars) for is_word, chars in groupby(value, key=_is_word_char) if is_word]


def camel_join(value: str) -> str:
    """
    Collapse separators by joining alphanumeric runs camel-style.

    The first run is kept as-is; every later run gets its first character
    uppercased. "john smith", "john-smith" and "john_smith" all become
    "johnSmith".
    """
    runs = alnum_runs(value)
    return "".join(
        run if i == 0 else run[0].upper() + run[1:]
        for i, run in enumerate(runs)
    )


def match_initialism(value: str, pos: int) -> str:
    """
    Return the longest initialism starting at value[pos], or "".

    A candidate directly followed by a lowercase letter is rejected, since
    its last capital starts the next word ("HTTPServer" is HTTP + Server,
    not HTTPS + erver).
    """
    for length in range(_MAX_INITIALISM, _MIN_INITIALISM - 1, -1):
        end = pos + length
        if end > len(value):
            continue
        candidate = value[pos:end]
        if candidate not in INITIALISMS:
            continue
        if end < len(value) and value[end].islower():
            continue
        return candidate
    return ""


def split_words(value: str) -> List[str]:
    """
    Segment a string into words.

    Separators are collapsed with camel_join(), then the result is scanned
    left to right: each uppercase character starts a new word, except that
    a recognized initialism is consumed as a single word.

    Args:
        value: Any string ("userID", "first name", "HTTP-server")

    Returns:
        Words in order, original case preserved
    """
    joined = camel_join(value)
    words: List[str] = []
    start = 0
    i = 0

    while i < len(joined):
        if not joined[i].isupper():
            i += 1
            continue

        initialism = match_initialism(joined, i)
        if start < i:
            words.append(joined[start:i])
        if initialism:
            words.append(initialism)
            i += len(initialism)
        else:
            i += 1
        start = i if initialism else i - 1

    if start < len(joined):
        words.append(joined[start:])

    return words


def camel(value: str) -> str:
    """Join words as wordWordWord; first word lowercase, the rest capitalized."""
    words = split_words(value)
    if not words:
        return ""
    return words[0].lower() + "".join(word[0].upper() + word[1:].lower() for word in words[1:])


def snake(value: str) -> str:
    """Join lowercase words with underscores."""
    return "_".join(word.lower() for word in split_words(value))


def slug(value: str) -> str:
    """Join lowercase words with hyphens."""
    return "-".join(word.lower() for word in split_words(value))
