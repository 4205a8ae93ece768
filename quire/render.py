from __future__ import annotations

import re
import shutil
from pathlib import Path

from .errors import TemplateError

PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")
TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def render_template(template: str, **context: str) -> str:
    """Fill ``{{key}}`` placeholders from ``context`` in a single pass.

    Substituted values are never scanned again, so rendered content that
    contains ``{{...}}`` comes out verbatim. Unknown placeholders are kept.
    """
    return PLACEHOLDER_RE.sub(lambda m: context.get(m.group(1), m.group(0)), template)


def read_template(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise TemplateError(path, exc) from exc


def check_template(path: Path, template: str, required: set[str]) -> str:
    found = set(PLACEHOLDER_RE.findall(template))
    missing = required - found
    if missing:
        raise TemplateError(path, f"missing placeholder(s): {', '.join(sorted(missing))}")
    return template


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def copy_static(static_dir: Path, output_dir: Path) -> None:
    shutil.copytree(static_dir, output_dir, dirs_exist_ok=True)
