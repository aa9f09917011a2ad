"""Tests for text measurement and greedy wrapping."""

from __future__ import annotations

from openexport.layout.measure import TextMeasurer

LOREM = (
    "Lorem ipsum dolor sit amet consectetur adipiscing elit sed do eiusmod "
    "tempor incididunt ut labore et dolore magna aliqua"
)


class TestWidth:
    def test_width_grows_with_text(self):
        m = TextMeasurer("Helvetica", 7)
        assert m.width("") == 0
        assert m.width("ab") > m.width("a") > 0

    def test_width_scales_with_font_size(self):
        small = TextMeasurer("Helvetica", 7).width("Rosario")
        big = TextMeasurer("Helvetica", 14).width("Rosario")
        assert abs(big - 2 * small) < 1e-6

    def test_with_font(self):
        m = TextMeasurer().with_font("Helvetica-Bold", 9)
        assert (m.font_name, m.font_size) == ("Helvetica-Bold", 9)


class TestWrap:
    def test_short_text_is_one_line(self):
        wrapped = TextMeasurer().wrap("Poblacion", 200)
        assert wrapped.lines == ("Poblacion",)
        assert wrapped.line_count == 1

    def test_lines_never_exceed_width(self):
        m = TextMeasurer("Helvetica", 7)
        for width in (60, 80, 140):
            wrapped = m.wrap(LOREM, width)
            assert wrapped.line_count > 1
            for line, w in zip(wrapped.lines, wrapped.widths):
                assert w <= width, (line, w, width)

    def test_words_are_preserved_in_order(self):
        wrapped = TextMeasurer().wrap(LOREM, 60)
        assert " ".join(wrapped.lines).split() == LOREM.split()

    def test_overlong_word_kept_whole(self):
        m = TextMeasurer("Helvetica", 7)
        word = "Pneumonoultramicroscopicsilicovolcanoconiosis"
        wrapped = m.wrap(f"a {word} b", 40)
        assert word in wrapped.lines
        assert wrapped.max_width > 40

    def test_explicit_newlines_break(self):
        wrapped = TextMeasurer().wrap("first\nsecond", 500)
        assert wrapped.lines == ("first", "second")

    def test_space_runs_kept_like_the_csv_cell(self):
        wrapped = TextMeasurer().wrap("A  B", 500)
        assert wrapped.lines == ("A  B",)

    def test_space_run_at_a_break_is_dropped(self):
        m = TextMeasurer("Helvetica", 10)
        width = m.width("alpha") + 1
        wrapped = m.wrap("alpha   beta", width)
        assert wrapped.lines == ("alpha", "beta")

    def test_empty_text_is_one_empty_line(self):
        wrapped = TextMeasurer().wrap("", 100)
        assert wrapped.lines == ("",)
        assert wrapped.max_width == 0
