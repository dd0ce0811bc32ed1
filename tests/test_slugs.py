"""Tests for filename slug generation."""

import pytest

from slugs import MAX_SLUG_LEN, create_safe_filename, split_keywords

TITLES = [
    "Hello World",
    "Go 语言编程基础",
    "  --Leading and trailing__  ",
    "C++ & Rust!",
    "Ünïcödé Straße",
    "!!!",
    "",
    "a" * 120,
    "emoji 🎉 party",
    "tabs\tand\nnewlines",
    "__init__",
]


class TestCreateSafeFilename:
    def test_basic_title(self):
        assert create_safe_filename("Hello World") == "hello-world"

    def test_keeps_non_latin_letters(self):
        assert create_safe_filename("Go 语言编程") == "go-语言编程"

    def test_dotted_capital_i_lowercases_to_one_letter(self):
        assert create_safe_filename("İstanbul") == "istanbul"

    def test_punctuation_becomes_hyphens(self):
        assert create_safe_filename("Hello, World!") == "hello-world"

    def test_short_runs_collapse(self):
        assert create_safe_filename("a   b") == "a-b"

    def test_long_runs_only_partially_collapse(self):
        # "c", five separators, "rust", "!" -> two halving passes leave "--"
        assert create_safe_filename("C++ & Rust!") == "c--rust"

    def test_empty_falls_back_to_post(self):
        assert create_safe_filename("") == "post"
        assert create_safe_filename("!!!") == "post"
        assert create_safe_filename("___") == "post"

    def test_truncates_before_trimming(self):
        title = "a" * 49 + " b"
        assert create_safe_filename(title) == "a" * 49

    def test_underscores_trimmed_at_edges_only(self):
        assert create_safe_filename("__snake_case__") == "snake_case"

    def test_deterministic(self):
        assert create_safe_filename("Same Input") == create_safe_filename("Same Input")

    @pytest.mark.parametrize("title", TITLES)
    def test_output_properties(self, title):
        s = create_safe_filename(title)
        assert s
        assert len(s) <= MAX_SLUG_LEN
        assert all(ch.isalpha() or ch.isdecimal() or ch in "-_" for ch in s)
        assert s[0] not in "-_" and s[-1] not in "-_"


class TestSplitKeywords:
    def test_trims_and_dedupes(self):
        assert split_keywords("go, 语言, ,go,python ") == ["go", "语言", "python"]

    def test_empty(self):
        assert split_keywords("") == []
