from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

try:
    import tomllib
except ImportError:  # Python < 3.11
    import tomli as tomllib

import yaml

from .errors import ConfigError, MissingConfigError
from .utils import url_path

DEFAULT_CONFIG_PATH = "config.toml"
CONFIG_ENV_VAR = "QUIRE_CONFIG"
REQUIRED_KEYS = ("url", "title", "content", "posts", "build_root", "posts_root")


@dataclass(frozen=True)
class SiteConfig:
    url: str
    title: str
    content: Path
    posts: Path
    build_root: Path
    # URL path of the posts section, relative to the build root.
    posts_root: str
    # Directory holding the config file; relative paths are resolved from it.
    root: Path
    static: Path
    templates: Optional[Path] = None
    syntax_theme: Optional[str] = None
    posts_src_scripts: tuple[str, ...] = ()
    posts_embed_scripts: Optional[Path] = None
    posts_noscript: Optional[str] = None

    @property
    def posts_dir(self) -> Path:
        return self.build_root / self.posts_root

    @property
    def posts_url(self) -> str:
        return f"{self.url}/{self.posts_root}" if self.posts_root else self.url


def config_path(value: Optional[str] = None) -> Path:
    """Pick the config file: explicit value, then the environment, then the default."""
    return Path(value or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)


def load_config(path: Path) -> dict:
    if not path.exists():
        raise MissingConfigError(path)
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(path, exc) from exc
    elif suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(path, exc) from exc
        if data is None:
            data = {}
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(path, exc) from exc
    if not isinstance(data, dict):
        raise ConfigError(path, "configuration must be a mapping")
    return data


def build_config(data: dict, path: Path) -> SiteConfig:
    missing = [key for key in REQUIRED_KEYS if not data.get(key)]
    if missing:
        raise ConfigError(path, f"missing key(s): {', '.join(missing)}")

    root = path.resolve().parent

    def resolve(value: object) -> Path:
        candidate = Path(str(value))
        return candidate if candidate.is_absolute() else root / candidate

    def optional_path(key: str) -> Optional[Path]:
        value = data.get(key)
        return resolve(value) if value else None

    src_scripts = data.get("posts_src_scripts") or []
    if not isinstance(src_scripts, list):
        raise ConfigError(path, "posts_src_scripts must be a list")

    return SiteConfig(
        url=str(data["url"]).rstrip("/"),
        title=str(data["title"]),
        content=resolve(data["content"]),
        posts=resolve(data["posts"]),
        build_root=resolve(data["build_root"]),
        posts_root=url_path(str(data["posts_root"])),
        root=root,
        static=resolve(data.get("static") or "static"),
        templates=optional_path("templates"),
        syntax_theme=str(data["syntax_theme"]) if data.get("syntax_theme") else None,
        posts_src_scripts=tuple(str(src) for src in src_scripts),
        posts_embed_scripts=optional_path("posts_embed_scripts"),
        posts_noscript=str(data["posts_noscript"]) if data.get("posts_noscript") else None,
    )


def read_config(value: Optional[str] = None) -> SiteConfig:
    path = config_path(value)
    return build_config(load_config(path), path)
