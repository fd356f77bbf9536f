"""Wrap compiled output into a standalone HTML document."""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from .models import CompileResult

PAGE_TEMPLATE = "page.html.jinja"


def templates_dir() -> Path:
    """Directory holding the bundled page templates."""

    return Path(__file__).parent / "templates"


def jinja_env(extra_dirs: list[Path] | None = None) -> Environment:
    """Create a Jinja environment; ``extra_dirs`` take precedence over bundled templates."""

    search_path = [*(extra_dirs or []), templates_dir()]
    return Environment(
        loader=FileSystemLoader(search_path),
        autoescape=select_autoescape(["html", "jinja"]),
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
    )


def _css_for_style_element(css: str) -> str:
    # A literal "</" would let stylesheet text close the <style> element early.
    return css.replace("</", "<\\/")


def render_page(
    result: CompileResult,
    *,
    title: str = "",
    lang: str = "en",
    stylesheet_href: str | None = None,
    env: Environment | None = None,
) -> str:
    """Render ``result`` as a full document.

    The stylesheet is inlined in ``<style>`` unless ``stylesheet_href`` is
    given, in which case a ``<link>`` is emitted instead and writing the CSS
    file is left to the caller.
    """

    template = (env or jinja_env()).get_template(PAGE_TEMPLATE)
    return template.render(
        title=title,
        lang=lang,
        stylesheet_href=stylesheet_href,
        css=_css_for_style_element(result.css),
        body=result.html,
    )
