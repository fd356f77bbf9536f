"""CLI entrypoint for compiling an OMM tree file into HTML and CSS."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Sequence

import yaml
from pydantic import ValidationError

from .compile_pipeline import compile_tree
from .errors import MalformedNodeError, RecursionLimitError
from .io_utils import read_tree, stable_json_dumps, warn, write_text
from .models import CompileOptions, CompileResult, load_options
from .page import render_page


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compile an OMM tree (JSON or YAML) into HTML and CSS.")
    parser.add_argument("--input", required=True, type=Path, help="Path to the root node (.json, .yaml, .yml)")
    parser.add_argument("--out-html", dest="out_html", type=Path, default=None, help="Where to write the HTML")
    parser.add_argument("--out-css", dest="out_css", type=Path, default=None, help="Where to write the stylesheet")
    parser.add_argument("--config", type=Path, default=None, help="YAML file with compile options")
    parser.add_argument(
        "--class-prefix",
        dest="class_prefix",
        default=None,
        help="Prefix for generated class names (overrides --config).",
    )
    parser.add_argument(
        "--no-escape-text",
        dest="escape_text",
        action="store_false",
        default=None,
        help="Emit text children verbatim. Only for trusted content.",
    )
    parser.add_argument(
        "--page",
        action="store_true",
        help="Write a full HTML document instead of a fragment.",
    )
    parser.add_argument("--title", default="", help="Document title used with --page")
    parser.add_argument(
        "--diagnostics-json",
        dest="diagnostics_json",
        type=Path,
        default=None,
        help="Write collected diagnostics as JSON.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 when any diagnostic was recorded.",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Compile twice and fail if the outputs differ.",
    )
    return parser.parse_args(argv)


def _resolve_options(args: argparse.Namespace) -> CompileOptions:
    try:
        options = load_options(args.config) if args.config else CompileOptions()
        overrides = {}
        if args.class_prefix is not None:
            overrides["classPrefix"] = args.class_prefix
        if args.escape_text is not None:
            overrides["escapeText"] = args.escape_text
        if overrides:
            options = CompileOptions.model_validate(
                {**options.model_dump(by_alias=True), **overrides}
            )
    except (OSError, yaml.YAMLError, ValueError, ValidationError) as exc:
        raise SystemExit(f"Invalid options: {exc}") from exc
    return options


def _compile_once(tree: dict, options: CompileOptions) -> CompileResult:
    try:
        return compile_tree(tree, options)
    except (MalformedNodeError, RecursionLimitError) as exc:
        raise SystemExit(f"Cannot compile tree: {type(exc).__name__}: {exc}") from exc


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)
    options = _resolve_options(args)
    try:
        tree = read_tree(args.input)
    except (OSError, json.JSONDecodeError, yaml.YAMLError, ValueError) as exc:
        raise SystemExit(f"Invalid tree file {args.input}: {exc}") from exc

    result = _compile_once(tree, options)
    if args.check:
        again = _compile_once(tree, options)
        if (again.html, again.css) != (result.html, result.css):
            raise SystemExit("Determinism check failed: outputs differ between runs")

    for diagnostic in result.diagnostics:
        warn(f"[{diagnostic.kind}] {diagnostic.path}: {diagnostic.message}")

    if args.page:
        href = args.out_css.name if args.out_css else None
        html_text = render_page(result, title=args.title, stylesheet_href=href)
    else:
        html_text = result.html

    if args.out_html:
        write_text(args.out_html, html_text)
    else:
        sys.stdout.write(html_text + ("" if html_text.endswith("\n") else "\n"))
    if args.out_css:
        write_text(args.out_css, result.css)
    if args.diagnostics_json:
        payload = [diagnostic.model_dump() for diagnostic in result.diagnostics]
        write_text(args.diagnostics_json, stable_json_dumps(payload))

    if args.strict and result.diagnostics:
        sys.exit(1)


if __name__ == "__main__":
    main()
