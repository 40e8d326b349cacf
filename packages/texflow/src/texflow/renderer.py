"""
Preview rendering.

The editor core treats rendering as an opaque collaborator: a string and a
mode go in, displayable markup comes out, and a failure produces a visible
fallback instead of an exception.
"""
from __future__ import annotations

import html
import logging
from typing import Callable, Literal, Protocol

import mistune

logger = logging.getLogger(__name__)

RenderMode = Literal["text", "math"]


class Renderer(Protocol):
    def render(self, source: str, mode: RenderMode = "text") -> str: ...


def error_fallback(source: str) -> str:
    return f'<pre class="render-error">{html.escape(source)}</pre>\n'


class HtmlRenderer:
    """
    Renders LaTeX-in-markdown to HTML with mistune's math plugin.

    ``text`` mode treats the source as a document with ``$...$`` spans;
    ``math`` mode treats the whole source as one display formula.
    """

    def __init__(self, markdown: Callable[[str], str] | None = None) -> None:
        self._md = markdown or mistune.create_markdown(escape=True, plugins=["math"])

    def render(self, source: str, mode: RenderMode = "text") -> str:
        if not source.strip():
            return ""
        document = f"$$\n{source.strip()}\n$$\n" if mode == "math" else source
        try:
            output = self._md(document)
        except Exception:
            logger.exception("Rendering failed; showing raw source")
            return error_fallback(source)
        if not isinstance(output, str):
            logger.warning("Renderer returned %s instead of str", type(output).__name__)
            return error_fallback(source)
        return output
