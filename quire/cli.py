from __future__ import annotations

import argparse
import dataclasses
import sys
import time
from pathlib import Path
from typing import Optional

from .config import CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH, SiteConfig, read_config
from .content import format_front_matter
from .engine import MarkdownEngine
from .errors import QuireError
from .highlight import load_theme
from .pages import (
    RESERVED_CONTENT_NAMES,
    build_404,
    build_content_page,
    build_index,
    build_post,
    build_posts_index,
    build_rss,
    build_tag,
    build_tags_index,
    collect_post_scripts,
    render_scripts,
)
from .posts import Post, PostRepository
from .render import TEMPLATES_DIR, check_template, copy_static, read_template
from .utils import clean_output_dir

STATIC_DIR_NAME = "static"
BASE_TEMPLATE = "base.html"


def load_base_template(config: SiteConfig) -> str:
    path = (config.templates or TEMPLATES_DIR) / BASE_TEMPLATE
    return check_template(path, read_template(path), {"title", "content"})


def content_or_blank(engine: MarkdownEngine, path: Path) -> str:
    if not path.exists():
        return ""
    return engine.render_html(path.read_text(encoding="utf-8"))


def content_pages(content_dir: Path) -> list[Path]:
    """Loose content files, leaving out the stems with dedicated pages."""
    return [
        path
        for path in sorted(content_dir.iterdir(), key=lambda p: p.name)
        if not path.is_dir() and path.stem not in RESERVED_CONTENT_NAMES
    ]


def build_site(config: SiteConfig, verbose: bool = True) -> None:
    def say(message: str) -> None:
        if verbose:
            print(message)

    if config.build_root.exists():
        say(f">> removing build directory '{config.build_root}'")
        clean_output_dir(config.build_root, config.root)
    say(f">> creating build directory '{config.build_root}'")
    config.build_root.mkdir(parents=True)

    if config.static.exists():
        say(">> copying static files")
        copy_static(config.static, config.build_root / STATIC_DIR_NAME)

    engine = MarkdownEngine(load_theme(config.syntax_theme, config.root))
    base_template = load_base_template(config)

    dest = build_index(base_template, config, content_or_blank(engine, config.content / "index.md"))
    say(f">> creating '{dest}'")
    dest = build_404(base_template, config, content_or_blank(engine, config.content / "404.md"))
    say(f">> creating '{dest}'")

    say(">> creating additional content")
    for path in content_pages(config.content):
        content_html = engine.render_html(path.read_text(encoding="utf-8"))
        dest = build_content_page(base_template, config, path.stem, content_html)
        say(f"  -- '{dest}'")

    posts = PostRepository.load(config.posts)
    render_posts_and_tags(config, engine, base_template, posts, say)


def render_posts_and_tags(
    config: SiteConfig,
    engine: MarkdownEngine,
    base_template: str,
    posts: PostRepository,
    say=print,
) -> None:
    scripts_html = render_scripts(collect_post_scripts(config), config.posts_noscript)
    for post in posts:
        top = post.top_text()
        post.summary = engine.render_html(top) if top else ""
        # Rendered once here; the post page and the feed both use the HTML.
        post.content = engine.render_html(post.content)
        say(f"  -- rendering post '{post.name}'")
        build_post(base_template, config, post, scripts_html)

    description = content_or_blank(engine, config.content / "posts.md")
    dest = build_posts_index(base_template, config, posts, description)
    say(f">> creating '{dest}'")

    say(">> rendering RSS")
    build_rss(config, list(posts))

    tags = posts.tags()
    dest = build_tags_index(base_template, config, tags, list(posts))
    say(f">> creating '{dest}'")
    for tag in tags:
        say(f"  -- rendering tag '{tag}'")
        build_tag(base_template, config, tag, posts.posts_with_tag(tag))


def new_post(config: SiteConfig) -> Post:
    posts = PostRepository.load(config.posts)
    post = posts.create_post()
    print(f"» created new post '{posts.path_for(post)}'")
    print(format_front_matter(post.title, post.date, post.tags))
    return post


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="quire", description="Static site generator for Markdown posts.")
    parser.add_argument(
        "--config",
        default=None,
        help=f"Path to site config file (TOML/YAML/JSON). Defaults to ${CONFIG_ENV_VAR} or {DEFAULT_CONFIG_PATH}.",
    )
    parser.add_argument("--quiet", action="store_true", help="Only report errors.")
    commands = parser.add_subparsers(dest="command")
    build_parser = commands.add_parser("build", aliases=["b"], help="Regenerate the whole site.")
    build_parser.add_argument("--build-root", default=None, help="Output directory, overriding the config.")
    commands.add_parser("post", aliases=["p"], help="Create a new blank post.")
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_usage(sys.stderr)
        sys.exit(1)

    try:
        config = read_config(args.config)
        if args.command in {"build", "b"}:
            if args.build_root:
                config = dataclasses.replace(config, build_root=Path(args.build_root).resolve())
            start = time.perf_counter()
            build_site(config, verbose=not args.quiet)
            elapsed = time.perf_counter() - start
            if not args.quiet:
                print(f"Build completed in {elapsed:.2f}s.")
                print(f"Site generated in: {config.build_root}")
        else:
            new_post(config)
    except QuireError as exc:
        print(exc, file=sys.stderr)
        sys.exit(1)
    except OSError as exc:
        print(f"unexpected IO error: {exc}", file=sys.stderr)
        sys.exit(1)
