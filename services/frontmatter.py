"""Front-matter parsing and derived text statistics (excerpt, read time).

Accepted grammar is deliberately small:

    ---
    title: Some: Title        scalar, split on the first colon only
    tags: [blog, 'notes']     inline list
    aliases:                  empty value, pending list items
      - one
      - "two"
    ---

Anything else inside the block is ignored.
"""

import math
import re
from collections.abc import MutableMapping
from dataclasses import dataclass, field

_DELIMITER = "---"
_QUOTES_RE = re.compile(r"['\"]")

_HEADING_RE = re.compile(r"#{1,6}\s")
_STRONG_RE = re.compile(r"\*\*|__")
_EMPHASIS_RE = re.compile(r"\*|_")
_LINK_RE = re.compile(r"\[([^\]]+)\]\([^)]+\)")

WORDS_PER_MINUTE = 200
DEFAULT_EXCERPT_LENGTH = 150


@dataclass(frozen=True)
class Scalar:
    value: str


@dataclass
class ListValue:
    items: list[str] = field(default_factory=list)


class _Pending:
    """Key seen with an empty value; may become a list on the next `- item` line."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "Pending"


Pending = _Pending()

FieldValue = Scalar | ListValue | _Pending


class FrontMatter(MutableMapping):
    """Ordered mapping of front-matter keys to tagged values."""

    def __init__(self, fields: dict[str, FieldValue] | None = None):
        self._fields: dict[str, FieldValue] = dict(fields or {})

    def __getitem__(self, key: str) -> FieldValue:
        return self._fields[key]

    def __setitem__(self, key: str, value: FieldValue) -> None:
        self._fields[key] = value

    def __delitem__(self, key: str) -> None:
        del self._fields[key]

    def __iter__(self):
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"FrontMatter({self._fields!r})"

    def get_str(self, key: str) -> str | None:
        value = self._fields.get(key)
        return value.value if isinstance(value, Scalar) else None

    def get_list(self, key: str) -> list[str] | None:
        value = self._fields.get(key)
        return list(value.items) if isinstance(value, ListValue) else None

    def to_dict(self) -> dict:
        """Plain-Python view: str, list[str] or None per key."""
        out: dict = {}
        for key, value in self._fields.items():
            if isinstance(value, Scalar):
                out[key] = value.value
            elif isinstance(value, ListValue):
                out[key] = list(value.items)
            else:
                out[key] = None
        return out


def _unquote(token: str) -> str:
    return _QUOTES_RE.sub("", token)


def _is_delimiter(line: str) -> bool:
    return line.rstrip("\r") == _DELIMITER


def _locate_block(text: str) -> tuple[list[str], int] | None:
    """Return (lines, closing_index) or None when there is no front-matter block."""
    lines = text.split("\n")
    if not lines or not _is_delimiter(lines[0]):
        return None
    for i, line in enumerate(lines[1:], 1):
        if _is_delimiter(line):
            return lines, i
    return None


def _parse_block(block: list[str]) -> FrontMatter:
    fm = FrontMatter()
    current_key = None

    for raw_line in block:
        line = raw_line.rstrip("\r")
        stripped = line.strip()
        if not stripped:
            continue

        if stripped.startswith("-") and current_key is not None:
            item = _unquote(stripped[1:].strip())
            existing = fm.get(current_key)
            if not isinstance(existing, ListValue):
                existing = ListValue()
                fm[current_key] = existing
            existing.items.append(item)
            continue

        key, sep, value = line.partition(":")
        if not sep:
            continue
        key = key.strip()
        value = value.strip()
        current_key = key

        if not value:
            fm[key] = Pending
        elif value.startswith("[") and value.endswith("]"):
            fm[key] = ListValue([_unquote(v.strip()) for v in value[1:-1].split(",")])
        else:
            fm[key] = Scalar(_unquote(value))

    return fm


def parse_front_matter(text: str) -> FrontMatter | None:
    """Parse the leading front-matter block. None when the document has none."""
    located = _locate_block(text)
    if located is None:
        return None
    lines, end_idx = located
    return _parse_block(lines[1:end_idx])


def split_front_matter(text: str) -> tuple[FrontMatter | None, str]:
    """Return (front_matter, body). Body is the whole text when there is no block."""
    located = _locate_block(text)
    if located is None:
        return None, text
    lines, end_idx = located
    return _parse_block(lines[1:end_idx]), "\n".join(lines[end_idx + 1 :])


def strip_front_matter(text: str) -> str:
    return split_front_matter(text)[1]


def generate_excerpt(text: str, max_length: int = DEFAULT_EXCERPT_LENGTH) -> str:
    """Plain-text summary of a document, ellipsized past max_length characters."""
    plain = strip_front_matter(text)
    plain = _HEADING_RE.sub("", plain)
    plain = _STRONG_RE.sub("", plain)
    plain = _EMPHASIS_RE.sub("", plain)
    plain = _LINK_RE.sub(r"\1", plain)
    plain = plain.strip()

    if len(plain) > max_length:
        return plain[:max_length] + "..."
    return plain


def calculate_read_time(text: str) -> str:
    minutes = math.ceil(len(text) / WORDS_PER_MINUTE)
    return f"{minutes} min read"
