from __future__ import annotations

import datetime as dt
import html
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Union
from urllib.parse import quote

from .config import SiteConfig
from .posts import Post
from .render import render_template, write_text
from .utils import join_url, path_depth, relative_root

DATE_FMT = "%B %d, %Y"
# Content file stems that have their own pages.
RESERVED_CONTENT_NAMES = ("index", "posts", "404")


@dataclass(frozen=True)
class EmbedScript:
    """A script whose source is written inline into the page."""

    contents: str


@dataclass(frozen=True)
class SrcScript:
    """An external script, loaded with ``async``."""

    src: str


Script = Union[EmbedScript, SrcScript]


def collect_post_scripts(config: SiteConfig) -> list[Script]:
    scripts: list[Script] = []
    if config.posts_embed_scripts is not None:
        for path in sorted(config.posts_embed_scripts.iterdir(), key=lambda p: p.name):
            if not path.is_dir():
                scripts.append(EmbedScript(path.read_text(encoding="utf-8")))
    scripts.extend(SrcScript(src) for src in config.posts_src_scripts)
    return scripts


def render_scripts(scripts: Iterable[Script], noscript: Optional[str] = None) -> str:
    parts = []
    for script in scripts:
        if isinstance(script, EmbedScript):
            parts.append(f"<script>{script.contents}</script>")
        else:
            parts.append(f'<script async src="{html.escape(script.src)}"></script>')
    if noscript:
        parts.append(f"<noscript>{noscript}</noscript>")
    return "\n".join(parts)


def tag_href(tag: str) -> str:
    return f"{quote(tag)}.html"


def render_page(
    base_template: str,
    config: SiteConfig,
    title: str,
    root: str,
    content: str,
    scripts: str = "",
    extra_head: str = "",
) -> str:
    return render_template(
        base_template,
        title=html.escape(title),
        site_name=html.escape(config.title),
        root=root,
        posts_root=config.posts_root,
        extra_head=extra_head,
        year=str(dt.datetime.now().year),
        content=content,
        scripts=scripts,
    )


def build_post_list(posts: Iterable[Post], root: str, posts_root: str) -> str:
    items = []
    for post in posts:
        url = join_url(root, posts_root, f"{post.name}.html")
        summary = f'<div class="post-summary">{post.summary}</div>' if post.summary else ""
        items.append(
            '<li class="post-item">'
            f'<time datetime="{post.date.isoformat()}">{post.date.strftime(DATE_FMT)}</time>'
            f'<a class="post-link" href="{url}">{html.escape(post.title or post.name)}</a>'
            f"{summary}"
            "</li>"
        )
    if not items:
        return '<p class="post-list-empty">No posts yet.</p>'
    return f'<ul class="post-list">{"".join(items)}</ul>'


def build_tag_links(tags: Iterable[str], root: str, posts_root: str) -> str:
    return " ".join(
        f'<a class="tag" href="{join_url(root, posts_root, "tags", tag_href(tag))}">{html.escape(tag)}</a>'
        for tag in tags
    )


def build_index(base_template: str, config: SiteConfig, content_html: str) -> Path:
    html_doc = render_page(
        base_template,
        config,
        title=config.title,
        root=".",
        content=f'<div class="page-body">{content_html}</div>',
    )
    dest = config.build_root / "index.html"
    write_text(dest, html_doc)
    return dest


def build_404(base_template: str, config: SiteConfig, message_html: str) -> Path:
    content = (
        '<div class="section-head"><h1>404</h1></div>'
        f'<div class="not-found">{message_html}</div>'
        '<a class="back-home" href="./index.html">Back to home</a>'
    )
    html_doc = render_page(base_template, config, title=f"404 | {config.title}", root=".", content=content)
    dest = config.build_root / "404.html"
    write_text(dest, html_doc)
    return dest


def build_content_page(base_template: str, config: SiteConfig, name: str, content_html: str) -> Path:
    html_doc = render_page(
        base_template,
        config,
        title=f"{name} | {config.title}",
        root=".",
        content=f'<article class="page"><div class="page-body">{content_html}</div></article>',
    )
    dest = config.build_root / f"{name}.html"
    write_text(dest, html_doc)
    return dest


def build_posts_index(
    base_template: str, config: SiteConfig, posts: Iterable[Post], description_html: str
) -> Path:
    root = relative_root(path_depth(config.posts_root))
    content = (
        '<div class="section-head">'
        "<h1>Posts</h1>"
        f'<div class="section-description">{description_html}</div>'
        "</div>"
        f"{build_post_list(posts, root, config.posts_root)}"
    )
    html_doc = render_page(base_template, config, title=f"Posts | {config.title}", root=root, content=content)
    dest = config.posts_dir / "index.html"
    write_text(dest, html_doc)
    return dest


def build_post(base_template: str, config: SiteConfig, post: Post, scripts_html: str) -> Path:
    """Write one post page. ``post.content`` must already be HTML."""
    root = relative_root(path_depth(config.posts_root))
    tags_html = build_tag_links(post.tags, root, config.posts_root)
    content = (
        '<article class="post">'
        '<header class="post-header">'
        f'<h1 class="post-title">{html.escape(post.title)}</h1>'
        '<div class="post-meta">'
        f'<time datetime="{post.date.isoformat()}">{post.date.strftime(DATE_FMT)}</time>'
        f'<span class="post-tags">{tags_html}</span>'
        "</div>"
        "</header>"
        f'<div class="post-body">{post.content}</div>'
        "</article>"
    )
    html_doc = render_page(
        base_template,
        config,
        title=f"{post.title} | {config.title}",
        root=root,
        content=content,
        scripts=scripts_html,
    )
    dest = config.posts_dir / f"{post.name}.html"
    write_text(dest, html_doc)
    return dest


def build_rss(config: SiteConfig, posts: list[Post]) -> Path:
    items = []
    for post in posts:
        url = join_url(config.posts_url, f"{post.name}.html")
        items.append(
            "\n".join(
                [
                    "<item>",
                    f"<title>{html.escape(post.title)}</title>",
                    f"<link>{url}</link>",
                    f"<guid>{url}</guid>",
                    f"<pubDate>{post.rss_date}</pubDate>",
                    f"<description>{html.escape(post.content)}</description>",
                    "</item>",
                ]
            )
        )
    channel = [
        f"<title>{html.escape(config.title)}</title>",
        f"<link>{config.posts_url}/</link>",
        f"<description>{html.escape(config.title)} posts</description>",
    ]
    if posts:
        channel.append(f"<lastBuildDate>{posts[0].rss_date}</lastBuildDate>")
    rss = "\n".join(
        [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<rss version="2.0">',
            "<channel>",
            *channel,
            *items,
            "</channel>",
            "</rss>",
        ]
    )
    dest = config.posts_dir / "rss.xml"
    write_text(dest, rss)
    return dest


def build_tags_index(base_template: str, config: SiteConfig, tags: list[str], posts: list[Post]) -> Path:
    root = relative_root(path_depth(config.posts_root) + 1)
    rows = []
    for tag in tags:
        count = sum(1 for post in posts if post.has_tag(tag))
        rows.append(
            f'<li><a href="{tag_href(tag)}">{html.escape(tag)}</a>'
            f'<span class="count">{count}</span></li>'
        )
    tag_list = f'<ul class="tag-list">{"".join(rows)}</ul>' if rows else '<p class="tag-list-empty">No tags yet.</p>'
    content = f'<div class="section-head"><h1>Tags</h1></div>{tag_list}'
    html_doc = render_page(base_template, config, title=f"Tags | {config.title}", root=root, content=content)
    dest = config.posts_dir / "tags" / "index.html"
    write_text(dest, html_doc)
    return dest


def build_tag(base_template: str, config: SiteConfig, tag: str, posts: list[Post]) -> Path:
    """Write the page of ``tag``; ``posts`` are the posts carrying it."""
    root = relative_root(path_depth(config.posts_root) + 1)
    content = (
        '<div class="section-head">'
        f"<h1>{html.escape(tag)}</h1>"
        f"<p>{len(posts)} post{'s' if len(posts) != 1 else ''} tagged {html.escape(tag)}.</p>"
        "</div>"
        f"{build_post_list(posts, root, config.posts_root)}"
    )
    html_doc = render_page(base_template, config, title=f"{tag} | {config.title}", root=root, content=content)
    dest = config.posts_dir / "tags" / f"{tag}.html"
    write_text(dest, html_doc)
    return dest
