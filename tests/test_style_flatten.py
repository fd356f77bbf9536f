import pytest

from ommgen.errors import InvalidStyleError, RecursionLimitError
from ommgen.style_flatten import StyleRule, canonical_style_key, flatten_style


def test_hover_block_produces_two_rules() -> None:
    rules = flatten_style({"color": "red", "&:hover": {"color": "blue"}}, ".c1")

    assert rules == [
        StyleRule(".c1", (("color", "red"),)),
        StyleRule(".c1:hover", (("color", "blue"),)),
    ]
    assert [rule.render() for rule in rules] == [
        ".c1 { color: red; }",
        ".c1:hover { color: blue; }",
    ]


def test_nested_levels_substitute_immediate_parent() -> None:
    block = {
        "color": "red",
        "&:hover": {"&::after": {"content": "'x'"}, "& .icon": {"fill": "blue"}},
    }

    rules = flatten_style(block, ".c1")

    assert [rule.selector for rule in rules] == [".c1", ".c1:hover::after", ".c1:hover .icon"]


def test_every_ampersand_in_a_key_is_replaced() -> None:
    rules = flatten_style({"&+&": {"margin-left": "4px"}}, ".c1")
    assert rules == [StyleRule(".c1+.c1", (("margin-left", "4px"),))]


def test_repeated_property_keeps_position_and_last_value() -> None:
    pairs = [("color", "red"), ("margin", "0"), ("color", "blue")]
    rules = flatten_style(pairs, ".c1")
    assert rules == [StyleRule(".c1", (("color", "blue"), ("margin", "0")))]


def test_numbers_are_written_as_given() -> None:
    rules = flatten_style({"opacity": 0.5, "z-index": 3, "--gap": "2rem"}, ".c1")
    assert rules[0].declarations == (("opacity", "0.5"), ("z-index", "3"), ("--gap", "2rem"))


def test_empty_block_and_empty_nested_block() -> None:
    assert flatten_style({}, ".c1") == []
    assert flatten_style({"&:hover": {}}, ".c1") == []


def test_invalid_entries_raise_without_error_list() -> None:
    with pytest.raises(InvalidStyleError):
        flatten_style({"color": True}, ".c1")
    with pytest.raises(InvalidStyleError):
        flatten_style({"&:hover": "blue"}, ".c1")
    with pytest.raises(InvalidStyleError):
        flatten_style({"media": {"color": "red"}}, ".c1")
    with pytest.raises(InvalidStyleError):
        flatten_style({"color;": "red"}, ".c1")


def test_invalid_entries_are_collected_and_skipped() -> None:
    errors: list[InvalidStyleError] = []
    rules = flatten_style(
        {"color": None, "margin": "0", "&:focus": ["not-a-pair"]}, ".c1", errors=errors, path="/div"
    )

    assert rules == [StyleRule(".c1", (("margin", "0"),))]
    assert len(errors) == 2
    assert all(error.path == "/div" for error in errors)


def test_cyclic_style_block_is_rejected() -> None:
    block = {"color": "red"}
    block["&:hover"] = block
    with pytest.raises(RecursionLimitError):
        flatten_style(block, ".c1")


def test_style_depth_limit() -> None:
    block = {"a": "1", "&:x": {"&:y": {"b": "2"}}}
    assert len(flatten_style(block, ".c1", max_depth=3)) == 2
    with pytest.raises(RecursionLimitError):
        flatten_style(block, ".c1", max_depth=2)


def test_canonical_key_is_structural() -> None:
    block = {"color": "red", "&:hover": {"color": "blue"}}

    assert canonical_style_key(block) == "&{color:red;}&:hover{color:blue;}"
    assert canonical_style_key(dict(block)) == canonical_style_key(block)
    assert canonical_style_key({"color": "red"}) != canonical_style_key(block)
    assert canonical_style_key({"margin": "0", "color": "red"}) != canonical_style_key(
        {"color": "red", "margin": "0"}
    )


@pytest.mark.parametrize(
    "value",
    ["red; } body { display: none", "red}", "{red", "red\nbody", "</style>"],
)
def test_values_that_would_end_the_rule_are_rejected(value: str) -> None:
    with pytest.raises(InvalidStyleError):
        flatten_style({"color": value}, ".c1")

    errors: list[InvalidStyleError] = []
    assert flatten_style({"color": value, "margin": "0"}, ".c1", errors=errors) == [
        StyleRule(".c1", (("margin", "0"),))
    ]
    assert len(errors) == 1


@pytest.mark.parametrize("token", ["&, body {", "&}", "&;x", "&<x"])
def test_selectors_that_would_end_the_rule_are_rejected(token: str) -> None:
    errors: list[InvalidStyleError] = []
    rules = flatten_style({"color": "red", token: {"display": "none"}}, ".c1", errors=errors)

    assert rules == [StyleRule(".c1", (("color", "red"),))]
    assert len(errors) == 1


def test_start_depth_counts_against_the_limit() -> None:
    block = {"a": "1", "&:x": {"b": "2"}}
    assert len(flatten_style(block, ".c1", max_depth=5, depth=4)) == 2
    with pytest.raises(RecursionLimitError):
        flatten_style(block, ".c1", max_depth=5, depth=5)
