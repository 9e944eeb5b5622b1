"""Unit tests for the core template prompt builder."""
import pytest

from academy.core.prompt_builder import build_from_template, join_or_placeholder


@pytest.mark.unit
class TestBuildFromTemplate:
    def test_fills_values(self):
        assert build_from_template("Hi {name}!", name="Ada") == "Hi Ada!"

    def test_missing_and_none_render_empty(self):
        assert build_from_template("[{a}][{b}]", a=None) == "[][]"

    def test_empty_template(self):
        assert build_from_template("", a="x") == ""

    def test_values_are_not_formatted_again(self):
        assert build_from_template("{x}", x="{y}") == "{y}"


@pytest.mark.unit
class TestJoinOrPlaceholder:
    def test_joins(self):
        assert join_or_placeholder(["a", " b "], "none") == "a, b"

    def test_placeholder_when_blank(self):
        assert join_or_placeholder(["", "  "], "None yet") == "None yet"

    def test_custom_separator(self):
        assert join_or_placeholder(["a", "b"], "-", sep="; ") == "a; b"
