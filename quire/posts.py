"""Post loading, ordering, tag indexing and creation."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional

from .content import TOP_MARKER, find_top, format_post, parse_header, parse_post_date, split_front_matter
from .utils import rfc822_date


@dataclass
class Post:
    name: str
    title: str
    date: dt.date
    tags: list[str] = field(default_factory=list)
    # Raw Markdown until the build renders it, HTML afterwards.
    content: str = ""
    top: Optional[int] = None
    # HTML of the text above the top marker; filled in by the build.
    summary: str = ""

    @classmethod
    def read(cls, path: Path) -> Post:
        """Parse a post file, raising an error that names ``path`` on failure."""
        text = path.read_text(encoding="utf-8")
        header, body = split_front_matter(text, path)
        meta = parse_header(header, path)
        return cls(
            name=path.stem,
            title=meta["title"],
            date=parse_post_date(meta["date"], path),
            tags=list(meta["tags"]),
            content=body,
            top=find_top(body),
        )

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    @property
    def rss_date(self) -> str:
        return rfc822_date(self.date)

    def top_text(self) -> str:
        """Content above the top marker, or an empty string without one.

        Only meaningful while ``content`` is still the raw Markdown that
        ``top`` indexes into.
        """
        if self.top is None:
            return ""
        return self.content[: self.top].strip()


def sort_posts(posts: list[Post]) -> list[Post]:
    # Ascending by (date, title) then reversed: newest first. The name keeps
    # equal keys in a fixed order whatever the directory listing order was.
    ordered = sorted(posts, key=lambda post: (post.date, post.title, post.name))
    ordered.reverse()
    return ordered


def collect_tags(posts: list[Post]) -> list[str]:
    return sorted({tag for post in posts for tag in post.tags})


class PostRepository:
    """All posts of one directory, newest first, plus their tag index.

    The tag index is computed when the repository is built and is not
    refreshed by :meth:`create_post`.
    """

    def __init__(self, root: Path, posts: list[Post]) -> None:
        self.root = root
        self._posts = sort_posts(posts)
        self._tags = collect_tags(self._posts)
        self._next_name = len(self._posts)

    @classmethod
    def load(cls, root: Path) -> PostRepository:
        entries = sorted(root.iterdir(), key=lambda p: p.name)
        posts = [Post.read(path) for path in entries if not path.is_dir()]
        return cls(root, posts)

    def __len__(self) -> int:
        return len(self._posts)

    def __iter__(self) -> Iterator[Post]:
        return iter(self._posts)

    def __getitem__(self, index: int) -> Post:
        return self._posts[index]

    def tags(self) -> list[str]:
        return list(self._tags)

    def posts_with_tag(self, tag: str) -> list[Post]:
        return [post for post in self._posts if post.has_tag(tag)]

    def create_post(self) -> Post:
        """Write a blank post to ``<root>/<name>.md`` and append it."""
        post = Post(
            name=str(self._next_name),
            title="",
            date=dt.datetime.now(dt.timezone.utc).date(),
            tags=[],
            content="",
            top=None,
        )
        path = self.path_for(post)
        # "x" refuses to overwrite a post left behind under the same name.
        with path.open("x", encoding="utf-8") as handle:
            handle.write(format_post(post.title, post.date, post.tags, TOP_MARKER))
        self._next_name += 1
        self._posts.append(post)
        return post

    def path_for(self, post: Post) -> Path:
        return self.root / f"{post.name}.md"
