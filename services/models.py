"""Post and published-view records served by the blog API."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Post:
    id: str
    post_path: str
    title: str
    excerpt: str
    content: str
    date: str
    tags: tuple[str, ...] = ()
    read_time: str = "0 min read"

    def has_tag(self, tag: str) -> bool:
        wanted = tag.lower()
        return any(t.lower() == wanted for t in self.tags)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "postPath": self.post_path,
            "title": self.title,
            "excerpt": self.excerpt,
            "content": self.content,
            "date": self.date,
            "tags": list(self.tags),
            "readTime": self.read_time,
        }


@dataclass(frozen=True)
class PublishedView:
    """Immutable snapshot of published posts, newest first, plus their tag universe."""

    posts: tuple[Post, ...] = ()
    available_tags: tuple[str, ...] = ()
    created_at: float = 0.0
    _by_id: dict[str, Post] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_by_id", {p.id: p for p in self.posts})

    @classmethod
    def empty(cls) -> "PublishedView":
        return cls()

    def find_post(self, post_id: str) -> Post | None:
        return self._by_id.get(post_id)

    def posts_tagged(self, tag: str) -> list[Post]:
        return [p for p in self.posts if p.has_tag(tag)]

    def to_dict(self) -> dict:
        return {
            "posts": [p.to_dict() for p in self.posts],
            "availableTags": list(self.available_tags),
        }
