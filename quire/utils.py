from __future__ import annotations

import datetime as dt
import shutil
from pathlib import Path, PurePosixPath

from .errors import QuireError


def join_url(base: str, *parts: str) -> str:
    """Join URL segments with single slashes, skipping empty ones."""
    segments = [part.strip("/") for part in parts]
    return "/".join([base.rstrip("/"), *(segment for segment in segments if segment)])


def rfc822_date(value: dt.date) -> str:
    # Posts carry calendar dates only; they are published at midnight UTC.
    moment = dt.datetime.combine(value, dt.time(), tzinfo=dt.timezone.utc)
    return moment.strftime("%a, %d %b %Y %H:%M:%S %z")


def url_path(value: str) -> str:
    """Normalise a relative URL path such as ``/posts/`` to ``posts``."""
    value = value.strip("/")
    return PurePosixPath(value).as_posix() if value else ""


def path_depth(value: str) -> int:
    value = url_path(value)
    return len(PurePosixPath(value).parts) if value else 0


def relative_root(depth: int) -> str:
    """The relative URL leading back to the build root from ``depth`` levels down."""
    if depth <= 0:
        return "."
    return "/".join([".."] * depth)


def clean_output_dir(output_dir: Path, project_root: Path) -> None:
    if not output_dir.exists():
        return
    output_resolved = output_dir.resolve()
    root_resolved = project_root.resolve()
    if output_resolved == root_resolved:
        raise QuireError(f"refusing to remove project root {output_dir}")
    if not output_resolved.is_relative_to(root_resolved):
        raise QuireError(f"refusing to remove build directory outside project root: {output_dir}")
    shutil.rmtree(output_dir)
