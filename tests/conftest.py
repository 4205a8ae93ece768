"""Shared fixtures: sample posts and a small site on disk."""

from __future__ import annotations

import json
import textwrap
from pathlib import Path

import pytest

from quire.engine import MarkdownEngine
from quire.highlight import load_theme


def write_post(
    root: Path,
    name: str,
    title: str = "A post",
    date: str = "2024-01-01",
    tags: tuple[str, ...] = (),
    body: str = "Some text.",
) -> Path:
    """Write a post file in the on-disk header+body format."""
    path = root / f"{name}.md"
    path.write_text(
        f"---\ntitle = {json.dumps(title)}\ndate = {date}\ntags = {json.dumps(list(tags))}\n---\n\n{body}",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def posts_dir(tmp_path: Path) -> Path:
    path = tmp_path / "posts"
    path.mkdir()
    return path


@pytest.fixture(scope="session")
def engine(tmp_path_factory: pytest.TempPathFactory) -> MarkdownEngine:
    return MarkdownEngine(load_theme(None, tmp_path_factory.mktemp("theme")))


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """A complete site source tree; returns the path of its config file."""
    config = tmp_path / "config.toml"
    config.write_text(
        textwrap.dedent(
            """\
            url = "https://example.com/"
            title = "Example"
            content = "content"
            posts = "posts"
            build_root = "build"
            posts_root = "posts"
            posts_src_scripts = ["https://cdn.example.com/notes.js"]
            posts_noscript = "Enable JavaScript for margin notes."
            """
        ),
        encoding="utf-8",
    )

    content = tmp_path / "content"
    content.mkdir()
    (content / "index.md").write_text("# Welcome\n\nHello there.", encoding="utf-8")
    (content / "404.md").write_text("Nothing lives here.", encoding="utf-8")
    (content / "posts.md").write_text("All the posts.", encoding="utf-8")
    (content / "about.md").write_text("About *me*.", encoding="utf-8")
    (content / "drafts").mkdir()

    posts = tmp_path / "posts"
    posts.mkdir()
    write_post(
        posts,
        "one",
        title="First",
        date="2024-01-01",
        tags=("python", "notes"),
        body="Intro paragraph.\n\n<!-- top -->\n\nHello *world*.",
    )
    write_post(
        posts,
        "two",
        title="Second",
        date="2024-02-01",
        tags=("notes",),
        body="Later[^s1].\n\n[^s1]: An aside.",
    )

    static = tmp_path / "static"
    static.mkdir()
    (static / "style.css").write_text("body { margin: 0; }", encoding="utf-8")
    return config
