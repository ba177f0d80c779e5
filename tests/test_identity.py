"""Unit tests for post identifiers."""

import hashlib

from services.identity import generate_post_id, logical_path


def test_id_is_twelve_lowercase_hex():
    post_id = generate_post_id("posts/hello")
    assert len(post_id) == 12
    assert all(c in "0123456789abcdef" for c in post_id)


def test_id_is_sha256_prefix():
    expected = hashlib.sha256("日记/第一篇".encode()).hexdigest()[:12]
    assert generate_post_id("日记/第一篇") == expected


def test_id_stable_across_calls():
    assert generate_post_id("a/b") == generate_post_id("a/b")


def test_id_differs_by_path():
    assert generate_post_id("a/b") != generate_post_id("a/c")


def test_logical_path_strips_extension():
    assert logical_path("posts/hello.md") == "posts/hello"
    assert logical_path("v1.2/notes.md") == "v1.2/notes"
    assert logical_path("README") == "README"


def test_logical_path_strips_only_document_suffix():
    assert logical_path("notes/.md") == "notes/"
    assert logical_path(".md") == ""
    assert logical_path("notes/draft.txt") == "notes/draft"
    assert logical_path("archive.md.md") == "archive.md"
