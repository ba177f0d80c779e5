"""Unit tests for front-matter parsing, excerpts and read time."""

from collections.abc import MutableMapping

from services.frontmatter import (
    FrontMatter,
    ListValue,
    Pending,
    Scalar,
    calculate_read_time,
    generate_excerpt,
    parse_front_matter,
    split_front_matter,
    strip_front_matter,
)

# ---------------------------------------------------------------------------
# parse_front_matter
# ---------------------------------------------------------------------------


def test_parse_block_list_tags():
    content = (
        "---\ntitle: Test Post\ndate: 2024-01-01\ntags: \n  - blog\n  - test\n  - example\n"
        "---\n# Content here"
    )
    fm = parse_front_matter(content)
    assert fm is not None
    assert fm.get_str("title") == "Test Post"
    assert fm.get_str("date") == "2024-01-01"
    assert fm.get_list("tags") == ["blog", "test", "example"]


def test_parse_quoted_block_list_items():
    content = "---\ntags:\n  - \"javascript\"\n  - 'blog'\n---\nContent"
    fm = parse_front_matter(content)
    assert fm.get_list("tags") == ["javascript", "blog"]


def test_parse_single_quoted_values_and_inline_list():
    content = (
        "---\ntitle: 'Post with Quotes'\nauthor: 'John Doe'\ntags: ['blog', 'coding']\n"
        "---\nContent"
    )
    fm = parse_front_matter(content)
    assert fm.get_str("title") == "Post with Quotes"
    assert fm.get_str("author") == "John Doe"
    assert fm.get_list("tags") == ["blog", "coding"]


def test_parse_splits_on_first_colon_only():
    content = "---\ntitle: Test: A Guide\nurl: https://example.com\n---\nContent"
    fm = parse_front_matter(content)
    assert fm.get_str("title") == "Test: A Guide"
    assert fm.get_str("url") == "https://example.com"


def test_parse_quotes_removed_inside_token():
    fm = parse_front_matter('---\ntitle: It\'s a "quoted" word\n---\n')
    assert fm.get_str("title") == "Its a quoted word"


def test_parse_empty_value_is_pending():
    fm = parse_front_matter("---\nsummary:\ntitle: X\n---\n")
    assert fm["summary"] is Pending
    assert fm.get_str("summary") is None
    assert fm.get_list("summary") is None


def test_parse_continuation_replaces_scalar():
    fm = parse_front_matter("---\ntags: draft\n  - blog\n---\n")
    assert fm["tags"] == ListValue(["blog"])


def test_parse_tagged_variants():
    fm = parse_front_matter("---\na: x\nb: [1, 2]\nc:\n---\n")
    assert fm["a"] == Scalar("x")
    assert fm["b"] == ListValue(["1", "2"])
    assert fm["c"] is Pending
    assert fm.to_dict() == {"a": "x", "b": ["1", "2"], "c": None}


def test_parse_no_front_matter():
    assert parse_front_matter("# Just a heading\nNo metadata here") is None


def test_parse_empty_content():
    assert parse_front_matter("") is None


def test_parse_unclosed_block():
    assert parse_front_matter("---\ntitle: Oops\nNo closing delimiter\n") is None


def test_parse_empty_block_is_empty_metadata():
    fm = parse_front_matter("---\n---\nBody")
    assert fm == FrontMatter()
    assert len(fm) == 0


def test_parse_delimiter_must_be_exact_line():
    assert parse_front_matter("--- \ntitle: X\n---\n") is None


def test_parse_crlf_delimiters():
    fm = parse_front_matter("---\r\ntitle: Windows\r\n---\r\nBody")
    assert fm.get_str("title") == "Windows"


# ---------------------------------------------------------------------------
# split / strip
# ---------------------------------------------------------------------------


def test_split_returns_body_after_block():
    fm, body = split_front_matter("---\ntags: [blog, x]\n---\nHello")
    assert fm.get_list("tags") == ["blog", "x"]
    assert body == "Hello"


def test_split_without_front_matter_keeps_text():
    fm, body = split_front_matter("Plain text\n")
    assert fm is None
    assert body == "Plain text\n"


def test_strip_front_matter():
    assert strip_front_matter("---\ntitle: T\n---\nLine 1\nLine 2") == "Line 1\nLine 2"


# ---------------------------------------------------------------------------
# calculate_read_time
# ---------------------------------------------------------------------------


def test_read_time_exact_minutes():
    assert calculate_read_time("a" * 200) == "1 min read"
    assert calculate_read_time("a" * 1000) == "5 min read"
    assert calculate_read_time("a" * 2200) == "11 min read"


def test_read_time_empty():
    assert calculate_read_time("") == "0 min read"


def test_read_time_rounds_up():
    assert calculate_read_time("a" * 250) == "2 min read"


# ---------------------------------------------------------------------------
# generate_excerpt
# ---------------------------------------------------------------------------


def test_excerpt_truncates():
    content = "---\ntitle: Test\n---\nThis is a simple paragraph that should be used as an excerpt."
    assert generate_excerpt(content, 30) == "This is a simple paragraph tha..."


def test_excerpt_removes_headers():
    content = "---\ntitle: Test\n---\n# Main Heading\n## Subheading\nThis is the content."
    excerpt = generate_excerpt(content, 50)
    assert "Main Heading" in excerpt
    assert "Subheading" in excerpt
    assert "#" not in excerpt


def test_excerpt_removes_bold_and_italic():
    content = "---\ntitle: Test\n---\nThis is **bold** and *italic* text."
    excerpt = generate_excerpt(content, 100)
    assert excerpt == "This is bold and italic text."
    assert "*" not in excerpt


def test_excerpt_keeps_link_text():
    content = "---\ntitle: Test\n---\nCheck out [this link](https://example.com) for more info."
    excerpt = generate_excerpt(content, 100)
    assert "this link" in excerpt
    assert "](" not in excerpt
    assert "https://" not in excerpt


def test_excerpt_default_length():
    content = "---\ntitle: Test\n---\n" + "This is a very long sentence. " * 20
    excerpt = generate_excerpt(content)
    assert len(excerpt) == 153
    assert excerpt.endswith("...")


def test_excerpt_short_content_not_ellipsized():
    excerpt = generate_excerpt("---\ntitle: Test\n---\nShort content.", 100)
    assert excerpt == "Short content."


def test_excerpt_exactly_at_limit_not_ellipsized():
    assert generate_excerpt("abcde", 5) == "abcde"


def test_excerpt_skips_metadata():
    content = "---\ntitle: Test Post\nauthor: John Doe\ntags: [blog, test]\n---\nActual content."
    excerpt = generate_excerpt(content, 100)
    assert excerpt == "Actual content."
    assert "title:" not in excerpt
    assert "---" not in excerpt


def test_front_matter_is_a_mutable_mapping():
    fm = parse_front_matter("---\ntitle: X\ntags: [blog]\n---\n")
    assert isinstance(fm, MutableMapping)
    assert list(fm) == ["title", "tags"]
    assert fm.get("missing") is None
    assert dict(fm) == {"title": Scalar("X"), "tags": ListValue(["blog"])}

    del fm["title"]
    assert "title" not in fm
    assert fm == FrontMatter({"tags": ListValue(["blog"])})
