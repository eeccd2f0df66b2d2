"""Report generation module - read-only output surfaces for extracted modules."""

from .markdown import generate_markdown, render_markdown
from .artifact import build_summary, generate_artifacts, render_json

__all__ = [
    "build_summary",
    "generate_artifacts",
    "generate_markdown",
    "render_json",
    "render_markdown",
]
