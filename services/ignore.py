"""Storage-key exclusion rules (CACHE_IGNORE).

Patterns are separated by semicolons and matched against the whole key:

    "diary/2024.md"            exact key
    "diary/*;drafts/*"         `*` matches any run of characters, slashes included
"""

import re


def _compile(pattern: str) -> re.Pattern:
    body = ".*".join(re.escape(part) for part in pattern.split("*"))
    return re.compile(body, re.DOTALL)


class IgnoreFilter:
    def __init__(self, patterns: list[str] | None = None):
        self._patterns = [p for p in (patterns or []) if p]
        self._compiled = [_compile(p) for p in self._patterns]

    @classmethod
    def parse(cls, patterns: str | None) -> "IgnoreFilter":
        """Build a filter from a semicolon-separated pattern string."""
        if not patterns:
            return cls()
        return cls([p.strip() for p in patterns.split(";") if p.strip()])

    @property
    def patterns(self) -> list[str]:
        return list(self._patterns)

    def __bool__(self) -> bool:
        return bool(self._compiled)

    def is_ignored(self, key: str) -> bool:
        return any(regex.fullmatch(key) for regex in self._compiled)
