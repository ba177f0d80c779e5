"""Stable short post identifiers.

An id is the first 12 hex characters of SHA-256 over the logical path
(storage key minus extension). 48 bits is enough for a personal blog;
collisions are not detected.
"""

import hashlib
import posixpath

ID_LENGTH = 12

DOCUMENT_SUFFIX = ".md"


def logical_path(key: str, suffix: str = DOCUMENT_SUFFIX) -> str:
    """Storage key without its document suffix: 'notes/a.md' -> 'notes/a'."""
    if suffix and key.endswith(suffix):
        return key[: -len(suffix)]
    return posixpath.splitext(key)[0]


def generate_post_id(path: str) -> str:
    return hashlib.sha256(path.encode("utf-8")).hexdigest()[:ID_LENGTH]
