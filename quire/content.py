from __future__ import annotations

import datetime as dt
import json
from pathlib import Path
from typing import Optional

try:
    import tomllib
except ImportError:  # Python < 3.11
    import tomli as tomllib

from .errors import DateParseError, PostFormatError, PostHeaderError

DELIMITER = "---"
# Separates the "top" of a post from the rest, for use as a summary.
TOP_MARKER = "<!-- top -->"
HEADER_KEYS = ("title", "date", "tags")


def split_front_matter(text: str, path: Path) -> tuple[str, str]:
    """Split a post into its raw header and body.

    The header sits between the opening delimiter and the first delimiter
    after it; the body is everything following the closing delimiter.
    """
    clean_text = text.lstrip("\ufeff")
    if not clean_text.startswith(DELIMITER):
        raise PostFormatError(path, f"missing opening {DELIMITER!r} delimiter")
    start = len(DELIMITER)
    end = clean_text.find(DELIMITER, start)
    if end == -1:
        raise PostFormatError(path, f"missing closing {DELIMITER!r} delimiter")
    header = clean_text[start:end]
    body = clean_text[end + len(DELIMITER) :].lstrip("\r\n")
    return header, body


def parse_header(header: str, path: Path) -> dict:
    try:
        meta = tomllib.loads(header)
    except tomllib.TOMLDecodeError as exc:
        raise PostHeaderError(path, exc) from exc

    missing = [key for key in HEADER_KEYS if key not in meta]
    if missing:
        raise PostHeaderError(path, f"missing field(s): {', '.join(missing)}")
    if not isinstance(meta["title"], str):
        raise PostHeaderError(path, "title must be a string")
    tags = meta["tags"]
    if not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags):
        raise PostHeaderError(path, "tags must be a list of strings")
    return meta


def parse_post_date(value: object, path: Path) -> dt.date:
    # datetime is a subclass of date, so check it first.
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        try:
            return dt.date.fromisoformat(value.strip())
        except ValueError as exc:
            raise DateParseError(path, value) from exc
    raise DateParseError(path, value)


def find_top(body: str) -> Optional[int]:
    index = body.find(TOP_MARKER)
    return None if index == -1 else index


def toml_string(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def format_front_matter(title: str, date: dt.date, tags: list[str]) -> str:
    tag_list = ", ".join(toml_string(tag) for tag in tags)
    return f"title = {toml_string(title)}\ndate = {date.isoformat()}\ntags = [{tag_list}]\n"


def format_post(title: str, date: dt.date, tags: list[str], body: str) -> str:
    header = format_front_matter(title, date, tags)
    return f"{DELIMITER}\n{header}{DELIMITER}\n\n{body}"
