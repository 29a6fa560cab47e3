"""
Tests for gocodels/completion/signature_parser.py

Covers:
- match_func: splitting a func type into args and returns text
- parse_type: degenerate, empty and nested func types
- ensure_next_arg: repairing ", " splits inside nested func types
- parse_parameters: identifiers, grouped identifiers and variadics
"""
from __future__ import annotations

import pytest

from gocodels.completion.signature_parser import (
    MAX_NESTING,
    ensure_next_arg,
    match_func,
    match_paren,
    parse_parameters,
    parse_type,
)
from gocodels.gocode.types import Parameter, Signature


# =============================================================================
# match_paren / match_func
# =============================================================================


class TestMatchFunc:
    def test_match_paren_nested(self):
        assert match_paren("func(a func(int)) bool", 4) == 16

    def test_match_paren_unbalanced(self):
        assert match_paren("func(a int", 4) is None

    def test_not_a_func(self):
        assert match_func("int") == (None, None, None)
        assert match_func("") == (None, None, None)
        assert match_func("funcMap") == (None, None, None)

    def test_single_return(self):
        assert match_func("func(a int) string") == (
            "func(a int) string",
            "a int",
            "string",
        )

    def test_tuple_return(self):
        assert match_func("func(a int) (b, c string)") == (
            "func(a int) (b, c string)",
            "a int",
            "b, c string",
        )

    def test_no_return(self):
        assert match_func("func(a int)") == ("func(a int)", "a int", None)

    def test_no_args(self):
        assert match_func("func() int") == ("func() int", "", "int")

    def test_unbalanced_is_not_a_func(self):
        assert match_func("func(a, b") == (None, None, None)


# =============================================================================
# parse_type
# =============================================================================


class TestParseType:
    @pytest.mark.parametrize(
        "type_text",
        ["int", "string", "map[string]int", "*http.Request", "[]func(int)", "funcs"],
    )
    def test_non_function_types(self, type_text):
        signature = parse_type(type_text)

        assert signature.is_func is False
        assert signature.name == type_text
        assert signature.args == []
        assert signature.returns == []

    def test_empty(self):
        assert parse_type("") == Signature()
        assert parse_type("   ") == Signature()

    def test_func_without_args_or_returns(self):
        signature = parse_type("func()")

        assert signature.is_func is True
        assert signature.name == "func()"
        assert signature.args == []
        assert signature.returns == []

    def test_grouped_identifiers_stay_separate(self):
        signature = parse_type("func(a, b int) string")

        assert signature.is_func is True
        assert signature.args == [
            Parameter(name="a", identifier="", type="a"),
            Parameter(name="b int", identifier="b", type="int"),
        ]
        assert signature.returns == [Parameter(name="string", type="string")]

    def test_named_tuple_returns(self):
        signature = parse_type("func(a, b int) (c, d string)")

        assert [r.name for r in signature.returns] == ["c", "d string"]
        assert signature.returns[1].identifier == "d"
        assert signature.returns[1].type == "string"

    def test_variadic(self):
        signature = parse_type(
            "func(format string, a ...interface{}) (n int, err error)"
        )

        assert [a.name for a in signature.args] == ["format string", "a ...interface{}"]
        assert signature.args[1].type == "...interface{}"
        assert [r.identifier for r in signature.returns] == ["n", "err"]

    def test_nested_func_with_identifier(self):
        signature = parse_type("func(cb func(int) string) bool")

        assert len(signature.args) == 1
        cb = signature.args[0]
        assert cb.is_func is True
        assert cb.identifier == "cb"
        assert cb.name == "cb func(int) string"
        assert isinstance(cb.type, Signature)
        assert cb.type.name == "func(int) string"
        assert cb.type.args == [Parameter(name="int", type="int")]
        assert cb.type.returns == [Parameter(name="string", type="string")]
        assert signature.returns == [Parameter(name="bool", type="bool")]

    def test_anonymous_nested_func_with_commas(self):
        signature = parse_type("func(func(a, b int) string, x int)")

        assert [a.name for a in signature.args] == ["func(a, b int) string", "x int"]
        nested = signature.args[0]
        assert nested.is_func is True
        assert nested.identifier == ""
        assert [a.name for a in nested.type.args] == ["a", "b int"]

    def test_nested_func_with_tuple_return(self):
        signature = parse_type("func(cb func(int) (string, error), n int)")

        assert [a.name for a in signature.args] == [
            "cb func(int) (string, error)",
            "n int",
        ]
        assert [r.name for r in signature.args[0].type.returns] == ["string", "error"]

    def test_nested_func_returning_func(self):
        signature = parse_type("func(f func(int) func(a, b string) bool) error")

        f = signature.args[0]
        assert f.identifier == "f"
        assert len(f.type.returns) == 1

        inner = f.type.returns[0]
        assert inner.is_func is True
        assert [a.name for a in inner.type.args] == ["a", "b string"]
        assert inner.type.returns == [Parameter(name="bool", type="bool")]
        assert signature.returns == [Parameter(name="error", type="error")]

    def test_identifier_never_holds_func_token(self):
        signature = parse_type("func(func(int), cb func(a, b int) (int, error), c int)")

        for arg in signature.args:
            assert "func(" not in arg.identifier

    def test_scan_order_preserved(self):
        signature = parse_type("func(z int, y func(), x string)")

        assert [a.identifier for a in signature.args] == ["z", "y", "x"]

    def test_unbalanced_func_is_opaque(self):
        signature = parse_type("func(a, b")

        assert signature.is_func is False
        assert signature.name == "func(a, b"

    def test_deep_nesting_is_capped(self):
        depth = MAX_NESTING + 20
        type_text = "func(" * depth + ")" * depth

        signature = parse_type(type_text)

        assert signature.is_func is True
        current = signature
        levels = 0
        while isinstance(current, Signature) and current.args:
            current = current.args[0].type
            levels += 1
        assert levels <= MAX_NESTING + 1


# =============================================================================
# ensure_next_arg / parse_parameters
# =============================================================================


class TestEnsureNextArg:
    def test_empty(self):
        assert ensure_next_arg([]) == []

    def test_plain_segments_untouched(self):
        assert ensure_next_arg(["a", "b int"]) == ["a", "b int"]

    def test_rejoins_nested_func(self):
        assert ensure_next_arg(["cb func(a", "b int) string", "c int"]) == [
            "cb func(a, b int) string",
            "c int",
        ]

    def test_whole_text_when_nothing_follows(self):
        assert ensure_next_arg(["func(a", "b int) (c", "d string)"]) == [
            "func(a, b int) (c, d string)"
        ]


class TestParseParameters:
    def test_empty(self):
        assert parse_parameters("") == []
        assert parse_parameters("  ") == []

    def test_bare_types(self):
        assert parse_parameters("int, string") == [
            Parameter(name="int", type="int"),
            Parameter(name="string", type="string"),
        ]

    def test_identifier_split_on_first_space(self):
        params = parse_parameters("m map[string] int")

        assert params == [
            Parameter(name="m map[string] int", identifier="m", type="map[string] int")
        ]
