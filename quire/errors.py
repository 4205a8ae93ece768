"""Exceptions raised while loading content and building the site."""

from __future__ import annotations

from pathlib import Path


class QuireError(Exception):
    """Base class for every build failure."""


class ConfigError(QuireError):
    def __init__(self, path: Path, reason: object) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"failed to read configuration from {path}: {reason}")


class MissingConfigError(ConfigError):
    def __init__(self, path: Path) -> None:
        self.path = path
        self.reason = "not found"
        QuireError.__init__(self, f"config file {path} not found")


class PostFormatError(QuireError):
    """The post file does not follow the ``---`` header layout."""

    def __init__(self, path: Path, reason: object) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"invalid post file {path}: {reason}")


class PostHeaderError(QuireError):
    def __init__(self, path: Path, reason: object) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"failed to read post header from {path}: {reason}")


class DateParseError(QuireError):
    def __init__(self, path: Path, value: object) -> None:
        self.path = path
        self.value = value
        super().__init__(f"failed to parse date {value!r} in {path}")


class HighlightError(QuireError):
    def __init__(self, reason: object) -> None:
        self.reason = reason
        super().__init__(f"failed to syntax highlight: {reason}")


class ThemeLoadError(QuireError):
    def __init__(self, path: Path, reason: object) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"failed to load syntax theme from {path}: {reason}")


class TemplateError(QuireError):
    def __init__(self, path: Path, reason: object) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"failed to render template {path}: {reason}")
