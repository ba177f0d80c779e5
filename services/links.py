"""Wikilink rewriting: Obsidian-style [[links]] and ![[embeds]] to plain Markdown."""

import re
from dataclasses import dataclass
from urllib.parse import quote

from services.identity import generate_post_id
from services.store import object_url

WIKILINK_RE = re.compile(r"(!?)\[\[([^\]]+)\]\]")

_PASSTHROUGH_PREFIXES = ("http://", "https://", "//", "data:", "/")


@dataclass(frozen=True)
class WikiLink:
    start: int
    end: int
    embed: bool
    path: str
    alias: str | None = None
    anchor: str | None = None

    @property
    def label(self) -> str:
        return self.alias or self.path.rstrip("/").rsplit("/", 1)[-1]


def _normalize(path: str) -> str:
    """Drop a trailing .md so [[notes/a.md]] and [[notes/a]] resolve alike."""
    return path[:-3] if path.endswith(".md") else path


def parse_target(raw: str, embed: bool = False) -> tuple[str, str | None, str | None]:
    """Split 'path#anchor|alias' into (path, alias, anchor). Embeds carry no anchor."""
    target, _, alias = raw.partition("|")
    anchor = None
    if not embed:
        target, sep, anchor = target.partition("#")
        anchor = anchor.strip() if sep else None
    return target.strip(), alias.strip() or None, anchor or None


def find_links(text: str) -> list[WikiLink]:
    """All wikilinks in text, left to right, with their offsets."""
    links = []
    for m in WIKILINK_RE.finditer(text):
        embed = m.group(1) == "!"
        path, alias, anchor = parse_target(m.group(2), embed=embed)
        links.append(WikiLink(m.start(), m.end(), embed, path, alias, anchor))
    return links


class LinkRewriter:
    def __init__(self, asset_base_url: str = "", post_url_prefix: str = "/posts/"):
        self.asset_base_url = asset_base_url
        self.post_url_prefix = post_url_prefix

    def image_url(self, path: str) -> str:
        if path.startswith(_PASSTHROUGH_PREFIXES):
            return path
        return object_url(self.asset_base_url, path)

    def post_url(self, path: str, anchor: str | None = None) -> str:
        url = self.post_url_prefix + generate_post_id(_normalize(path))
        if anchor:
            url += "#" + quote(anchor, safe="")
        return url

    def resolve(self, link: WikiLink) -> str | None:
        """Markdown replacement for one link, or None to leave the source text alone."""
        if not link.path:
            return None
        if link.embed:
            return f"![{link.label}]({self.image_url(link.path)})"
        label = link.alias or _normalize(link.label)
        return f"[{label}]({self.post_url(link.path, link.anchor)})"

    def rewrite(self, text: str) -> str:
        links = find_links(text)
        if not links:
            return text

        replacements = [self.resolve(link) for link in links]

        parts = []
        cursor = 0
        for link, replacement in zip(links, replacements):
            if replacement is None:
                continue
            parts.append(text[cursor : link.start])
            parts.append(replacement)
            cursor = link.end
        parts.append(text[cursor:])
        return "".join(parts)
