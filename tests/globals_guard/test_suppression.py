"""Tests for globals_guard/sniffs/suppression.py - inline suppression comments."""

import pytest

from globals_guard.sniffs import CommentSuppressionMatcher, SuppressionMatcher
from globals_guard.tokens import TokenKind


@pytest.fixture
def matcher():
    return CommentSuppressionMatcher()


@pytest.fixture
def suppressed(tokenize, find_token, matcher):
    """Whether the first `$target` variable in a snippet is suppressed."""

    def _suppressed(code: str, tag: str = "override") -> bool:
        stream = tokenize(code)
        return matcher.is_suppressed(stream, find_token(stream, TokenKind.VARIABLE, "$target"), tag)

    return _suppressed


class TestCommentSuppression:
    """Tests for where a suppression comment is honoured."""

    def test_implements_protocol(self, matcher):
        assert isinstance(matcher, SuppressionMatcher)

    def test_trailing_comment(self, suppressed):
        assert suppressed("$target = 1; // WPCS: override ok.") is True

    def test_trailing_block_comment(self, suppressed):
        assert suppressed("$target = 1; /* override */") is True

    def test_comment_inside_statement_after(self, suppressed):
        assert suppressed("$target = /* override */ 1;") is True

    def test_comment_before_on_same_line(self, suppressed):
        assert suppressed("/* override */ $target = 1;") is True

    def test_comment_on_previous_line(self, suppressed):
        assert suppressed("// override\n$target = 1;") is False

    def test_comment_on_next_line(self, suppressed):
        assert suppressed("$target = 1;\n// override") is False

    def test_comment_of_previous_statement(self, suppressed):
        assert suppressed("$a = 1; // override\n$target = 1;") is False

    def test_no_comment(self, suppressed):
        assert suppressed("$target = 1;") is False

    def test_case_insensitive(self, suppressed):
        assert suppressed("$target = 1; // WPCS: OVERRIDE OK") is True

    def test_whole_word_only(self, suppressed):
        assert suppressed("$target = 1; // overridden on purpose") is False
        assert suppressed("$target = 1; // nooverride") is False

    def test_other_tag(self, suppressed):
        assert suppressed("$target = 1; // WPCS: input var ok.") is False
        assert suppressed("$target = 1; // WPCS: input var ok.", tag="input var") is True

    def test_multi_line_statement(self, suppressed):
        code = "$target = array(\n\t'a', // override\n\t'b'\n);"
        assert suppressed(code) is True

    def test_ignore_annotations(self, tokenize, find_token):
        stream = tokenize("$target = 1; // WPCS: override ok.")
        matcher = CommentSuppressionMatcher(ignore_annotations=True)

        position = find_token(stream, TokenKind.VARIABLE, "$target")
        assert matcher.is_suppressed(stream, position, "override") is False
