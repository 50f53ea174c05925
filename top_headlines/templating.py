"""Jinja2 environment for top_headlines templates."""

from __future__ import annotations

import base64
import io
from importlib import resources

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from .models import ImageHandle

_ENV: Environment | None = None


def _checkbox(checked: bool) -> str:
    return "[x]" if checked else "[ ]"


def _data_uri(handle: ImageHandle | None) -> Markup:
    """Encode a resolved thumbnail as a PNG data URI."""
    if handle is None or handle.image is None:
        return Markup("")
    buffer = io.BytesIO()
    handle.image.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return Markup(f"data:image/png;base64,{encoded}")


def get_environment() -> Environment:
    """Return a cached Jinja environment configured for package templates."""
    global _ENV
    if _ENV is None:
        template_dir = resources.files(__package__) / "templates"
        loader = FileSystemLoader(str(template_dir))
        _ENV = Environment(
            loader=loader,
            autoescape=select_autoescape(["html", "xml", "html.j2"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        _ENV.filters["checkbox"] = _checkbox
        _ENV.filters["data_uri"] = _data_uri
    return _ENV
