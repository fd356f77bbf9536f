import json
from pathlib import Path

import pytest

from ommgen.cli import main
from ommgen.io_utils import read_json, read_tree


def _write_tree(tmp_path: Path, tree: dict) -> Path:
    path = tmp_path / "tree.json"
    path.write_text(json.dumps(tree), encoding="utf-8")
    return path


def test_compiles_tree_to_files(tmp_path: Path) -> None:
    tree_path = _write_tree(tmp_path, {"p": "Hello", "class": "note", "style": {"color": "red"}})
    out_html = tmp_path / "out" / "index.html"
    out_css = tmp_path / "out" / "site.css"

    main(["--input", str(tree_path), "--out-html", str(out_html), "--out-css", str(out_css)])

    html_text = out_html.read_text(encoding="utf-8")
    css_text = out_css.read_text(encoding="utf-8")
    assert html_text.startswith('<p class="note omm-')
    assert css_text.startswith(".omm-")
    assert "color: red;" in css_text


def test_prints_fragment_to_stdout(tmp_path: Path, capsys) -> None:
    tree_path = _write_tree(tmp_path, {"p": "Hello"})
    main(["--input", str(tree_path)])
    assert capsys.readouterr().out == "<p>Hello</p>\n"


def test_page_links_css_file(tmp_path: Path) -> None:
    tree_path = _write_tree(tmp_path, {"p": "Hello", "style": {"margin": 0}})
    out_html = tmp_path / "index.html"
    out_css = tmp_path / "site.css"

    main([
        "--input", str(tree_path),
        "--out-html", str(out_html),
        "--out-css", str(out_css),
        "--page",
        "--title", "Demo",
    ])

    page = out_html.read_text(encoding="utf-8")
    assert "<title>Demo</title>" in page
    assert 'href="site.css"' in page


def test_yaml_input_and_config(tmp_path: Path) -> None:
    tree_path = tmp_path / "tree.yaml"
    tree_path.write_text(
        "section:\n  - h2: Title\n    style:\n      color: red\nid: top\n",
        encoding="utf-8",
    )
    config_path = tmp_path / "omm.yaml"
    config_path.write_text("classPrefix: site-\n", encoding="utf-8")
    out_html = tmp_path / "index.html"

    main(["--input", str(tree_path), "--config", str(config_path), "--out-html", str(out_html)])

    assert list(read_tree(tree_path)) == ["section", "id"]
    assert out_html.read_text(encoding="utf-8").startswith('<section id="top"><h2 class="site-')


def test_class_prefix_flag_overrides_config(tmp_path: Path) -> None:
    tree_path = _write_tree(tmp_path, {"p": "x", "style": {"color": "red"}})
    config_path = tmp_path / "omm.yaml"
    config_path.write_text("classPrefix: site-\n", encoding="utf-8")
    out_html = tmp_path / "index.html"

    main([
        "--input", str(tree_path),
        "--config", str(config_path),
        "--class-prefix", "ui-",
        "--out-html", str(out_html),
    ])

    assert 'class="ui-' in out_html.read_text(encoding="utf-8")


def test_strict_fails_on_diagnostics(tmp_path: Path, capsys) -> None:
    tree_path = _write_tree(tmp_path, {"ul": [{"li": "a"}, {}]})
    diagnostics_path = tmp_path / "diagnostics.json"

    with pytest.raises(SystemExit) as excinfo:
        main([
            "--input", str(tree_path),
            "--out-html", str(tmp_path / "index.html"),
            "--diagnostics-json", str(diagnostics_path),
            "--strict",
        ])

    assert excinfo.value.code == 1
    assert "[MalformedNodeError] /ul/[1]" in capsys.readouterr().err
    assert read_json(diagnostics_path) == [
        {"kind": "MalformedNodeError", "message": "empty node has no tag key", "path": "/ul/[1]"}
    ]


def test_check_passes_for_deterministic_output(tmp_path: Path) -> None:
    tree_path = _write_tree(tmp_path, {"div": [{"p": "a", "style": {"color": "red"}}]})
    out_html = tmp_path / "index.html"
    main(["--input", str(tree_path), "--out-html", str(out_html), "--check"])
    assert out_html.exists()


def test_invalid_inputs_exit_with_message(tmp_path: Path) -> None:
    bad_json = tmp_path / "tree.json"
    bad_json.write_text("{not json", encoding="utf-8")
    with pytest.raises(SystemExit, match="Invalid tree file"):
        main(["--input", str(bad_json)])

    unsupported = tmp_path / "tree.txt"
    unsupported.write_text("div", encoding="utf-8")
    with pytest.raises(SystemExit, match="Invalid tree file"):
        main(["--input", str(unsupported)])

    malformed_root = _write_tree(tmp_path, {"style": {"color": "red"}})
    with pytest.raises(SystemExit, match="MalformedNodeError"):
        main(["--input", str(malformed_root)])


def test_invalid_options_exit_with_message(tmp_path: Path) -> None:
    tree_path = _write_tree(tmp_path, {"p": "x"})
    with pytest.raises(SystemExit, match="Invalid options"):
        main(["--input", str(tree_path), "--class-prefix", "9bad"])
