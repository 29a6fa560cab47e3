"""
Tests for gocodels/lsp/scopes.py
"""
import pytest

from gocodels.lsp.scopes import (
    BLOCK_COMMENT,
    DOUBLE_STRING,
    IMPORT,
    LINE_COMMENT,
    RAW_STRING,
    RUNE,
    SOURCE,
    in_import,
    scope_descriptor,
    selector_matches,
)


def scopes_at(text: str, marker: str) -> list[str]:
    return scope_descriptor(text, text.index(marker))


class TestScopeDescriptor:
    def test_plain_code(self):
        assert scopes_at("x := y", "y") == [SOURCE]

    def test_single_import(self):
        assert scopes_at('import "fmt"', "mt") == [SOURCE, IMPORT, DOUBLE_STRING]

    def test_aliased_import(self):
        assert scopes_at('import f "fmt"', "mt") == [SOURCE, IMPORT, DOUBLE_STRING]

    def test_import_block(self):
        text = 'import (\n\t"os"\n\tf "fmt"\n)'

        assert scopes_at(text, "os") == [SOURCE, IMPORT, DOUBLE_STRING]
        assert scopes_at(text, "fmt") == [SOURCE, IMPORT, DOUBLE_STRING]

    def test_string_after_import_block(self):
        text = 'import (\n\t"os"\n)\n\nvar s = "xyz"'

        assert scopes_at(text, "xyz") == [SOURCE, DOUBLE_STRING]

    def test_plain_string(self):
        assert scopes_at('fmt.Println("hello")', "hello") == [SOURCE, DOUBLE_STRING]

    def test_delimiters_belong_to_string(self):
        text = 'x("a")'

        assert scope_descriptor(text, 2) == [SOURCE, DOUBLE_STRING]
        assert scope_descriptor(text, 4) == [SOURCE, DOUBLE_STRING]
        assert scope_descriptor(text, 5) == [SOURCE]

    def test_escaped_quote(self):
        assert scopes_at('s := "a\\"bc"', "bc") == [SOURCE, DOUBLE_STRING]

    def test_unterminated_string_ends_at_newline(self):
        assert scopes_at('s := "abc\nxyz', "xyz") == [SOURCE]

    def test_raw_string_spans_lines(self):
        assert scopes_at("s := `a\nbc`", "bc") == [SOURCE, RAW_STRING]

    def test_rune(self):
        assert scopes_at("r := 'q'", "q") == [SOURCE, RUNE]

    def test_line_comment(self):
        text = "x // note\ny"

        assert scopes_at(text, "note") == [SOURCE, LINE_COMMENT]
        assert scopes_at(text, "y") == [SOURCE]

    def test_block_comment(self):
        text = "/* a */ b"

        assert scopes_at(text, "a") == [SOURCE, BLOCK_COMMENT]
        assert scope_descriptor(text, 6) == [SOURCE, BLOCK_COMMENT]
        assert scopes_at(text, "b") == [SOURCE]

    def test_quote_inside_comment(self):
        assert scopes_at('// don"t\nz', "z") == [SOURCE]

    @pytest.mark.parametrize("index", [-1, 100])
    def test_out_of_range(self, index):
        assert scope_descriptor("abc", index) == [SOURCE]


class TestInImport:
    def test_not_an_import(self):
        text = 'x := "a"'

        assert in_import(text, text.index('"')) is False

    def test_closed_block(self):
        text = 'import (\n\t"os"\n)\nvar s = "a"'

        assert in_import(text, text.rindex('"a"')) is False


class TestSelectorMatches:
    def test_partial_selector(self):
        assert selector_matches(".comment", [SOURCE, LINE_COMMENT])

    def test_full_selector(self):
        assert selector_matches(".comment.line.double-slash.go", [SOURCE, LINE_COMMENT])

    def test_no_match(self):
        assert not selector_matches(".string.quoted.raw", [SOURCE, DOUBLE_STRING])

    def test_empty_selector(self):
        assert not selector_matches("", [SOURCE])
