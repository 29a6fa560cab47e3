"""
Tests for gocodels/gocode/types.py
"""
from gocodels.gocode.types import PANIC, RawCandidate, Suggestion


class TestRawCandidate:
    def test_from_json(self):
        candidate = RawCandidate.from_json(
            {"class": "func", "name": "Println", "type": "func(a ...interface{})"}
        )

        assert candidate == RawCandidate(cls="func", name="Println", type="func(a ...interface{})")
        assert candidate.is_panic is False

    def test_missing_keys(self):
        assert RawCandidate.from_json({"name": "x"}) == RawCandidate(cls="", name="x", type="")

    def test_not_a_mapping(self):
        candidate = RawCandidate.from_json("oops")

        assert candidate.cls == ""
        assert candidate.name == "oops"

    def test_panic(self):
        candidate = RawCandidate.from_json({"class": PANIC, "name": PANIC, "type": PANIC})

        assert candidate.is_panic is True

    def test_partial_panic_is_not_a_panic(self):
        assert RawCandidate(cls=PANIC, name="x", type=PANIC).is_panic is False


def test_suggestion_defaults():
    suggestion = Suggestion()

    assert suggestion.type == "value"
    assert suggestion.snippet is None
    assert suggestion.replacement_prefix == ""
