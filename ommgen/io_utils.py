"""Utility helpers for tree IO and stderr reporting."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Union

import yaml

PathLike = Union[str, Path]


def stable_json_dumps(obj: object) -> str:
    """Serialize JSON in a stable, human-readable way with a trailing newline."""
    return json.dumps(obj, ensure_ascii=False, sort_keys=True, indent=2) + "\n"


def read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as fh:
        return json.load(fh)


def read_tree(path: PathLike) -> dict:
    """Load a root node from JSON or YAML, keeping key order.

    Key order matters: the first key of every node is its tag.
    """
    tree_path = Path(path)
    suffix = tree_path.suffix.lower()
    if suffix == ".json":
        data = read_json(tree_path)
    elif suffix in {".yaml", ".yml"}:
        data = yaml.safe_load(tree_path.read_text(encoding="utf-8"))
    else:
        raise ValueError(f"Unsupported tree format: {tree_path.name} (use .json, .yaml or .yml)")
    if not isinstance(data, dict):
        raise ValueError(f"{tree_path} must contain a single root node mapping")
    return data


def write_text(path: PathLike, content: str, *, encoding: str = "utf-8") -> Path:
    """Write text content to a file, creating parent directories as needed."""

    file_path = Path(path)
    if file_path.parent != Path(""):
        file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(content, encoding=encoding)
    return file_path


def warn(msg: str) -> None:
    print(msg, file=sys.stderr)
