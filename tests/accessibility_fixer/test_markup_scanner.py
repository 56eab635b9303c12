"""
Tests for the bounded markup scanning helpers.
"""

from __future__ import annotations

from backend.app.services.markup_scanner import (
    MAX_TAG_LENGTH,
    BlankRunFinder,
    ClosingTagFinder,
    ElementMatcher,
    LineCounter,
    ScanBudget,
    closes_immediately,
    find_open_tag,
    find_tag_end,
    has_attribute,
    has_label_for,
    iter_open_tags,
    line_number,
)


class TestTagScanning:
    """Locating tags and their ends."""

    def test_jsx_arrow_does_not_end_tag(self):
        text = "<div onClick={() => go()}>x</div>"

        tag = find_open_tag(text, "div")

        assert tag.raw == "<div onClick={() => go()}>"
        assert tag.attrs == " onClick={() => go()}"
        assert not tag.self_closing

    def test_quoted_gt_does_not_end_tag(self):
        text = '<img alt="a > b" src="x">'

        assert find_tag_end(text, 4) == len(text)

    def test_unbalanced_quote_falls_back_to_first_gt(self):
        text = '<img title="oops> rest'

        assert find_tag_end(text, 4) == text.index(">") + 1

    def test_unterminated_tag(self):
        assert find_tag_end("<img src='a.png'", 4) == -1
        assert find_open_tag("<img src='a.png'", "img") is None

    def test_scan_is_bounded(self):
        text = "<div data-x={" + "{" * (MAX_TAG_LENGTH * 2) + ">"

        assert find_tag_end(text, 4) == len(text)

    def test_exhausted_budget_falls_back_to_first_gt(self):
        text = "<div onClick={() => go()}>"
        budget = ScanBudget(0)

        assert find_tag_end(text, 4, budget) == text.index("=>") + 2
        assert budget.remaining == 0

    def test_budget_is_charged_for_scanned_characters(self):
        text = "<div a={1}>"
        budget = ScanBudget(100)

        find_tag_end(text, 4, budget)

        assert budget.remaining == 100 - (len(text) - 1 - 4)

    def test_tag_name_boundary(self):
        text = "<abbr></abbr><a href='#'></a><A/>"

        tags = list(iter_open_tags(text, "a"))

        assert [t.start for t in tags] == [13, 29]
        assert tags[1].self_closing


class TestAttributeInsertion:
    """Rewriting a tag keeps its layout."""

    def test_with_trailing_attribute(self):
        assert find_open_tag("<img/>", "img").with_trailing_attribute('alt=""') == '<img alt="" />'
        assert find_open_tag("<img>", "img").with_trailing_attribute('alt=""') == '<img alt="">'
        assert find_open_tag('<img src="a" >', "img").with_trailing_attribute('alt=""') == '<img src="a" alt="" >'

    def test_trailing_attribute_keeps_line_breaks(self):
        tag = find_open_tag('<img\n  src="x"\n/>', "img")

        assert tag.with_trailing_attribute('alt=""') == '<img\n  src="x" alt=""\n/>'

    def test_trailing_attribute_before_multiline_gt(self):
        tag = find_open_tag('<input\n  type="text"\n>', "input")

        assert tag.with_trailing_attribute('aria-label="x"') == '<input\n  type="text" aria-label="x"\n>'

    def test_with_leading_attribute(self):
        tag = find_open_tag('<a href="#">', "a")

        assert tag.with_leading_attribute('aria-label="x"') == '<a aria-label="x" href="#">'


class TestAttributes:
    """Attribute presence checks."""

    def test_aria_label_does_not_match_labelledby(self):
        assert not has_attribute(' aria-labelledby="t"', "aria-label")
        assert has_attribute(' aria-labelledby="t"', "aria-label", "aria-labelledby")

    def test_prefixed_names_do_not_match(self):
        assert not has_attribute(' data-alt="x" data-id="y"', "alt", "id")

    def test_case_insensitive_with_spaces(self):
        assert has_attribute(" TabIndex = {0}", "tabIndex")

    def test_label_for(self):
        assert has_label_for("<form><label for='name'>Name</label></form>")
        assert not has_label_for("<label>Name <input /></label>")
        assert not has_label_for('<p for="x"></p>')


class TestContent:
    """Inner-content helpers."""

    def test_blank_run(self):
        text = "<a><span><i/></span>  </a> hi"
        finder = BlankRunFinder(text)

        assert finder.is_blank(3, text.index("</a>"))
        assert not finder.is_blank(3, len(text))

    def test_blank_run_stops_at_text(self):
        text = "<a><span>Home</span></a>"

        assert not BlankRunFinder(text).is_blank(3, text.index("</a>"))

    def test_blank_run_is_reused_for_nested_openers(self):
        text = "<a><a><a>x</a>"
        finder = BlankRunFinder(text)

        assert finder.run_end(3) == text.index("x")
        assert finder.run_end(6) == text.index("x")

    def test_single_element(self):
        def single(fragment):
            text = f"<button>{fragment}</button>"
            return ElementMatcher(text, "svg").is_single_element(8, 8 + len(fragment))

        assert single("  <svg/>  ")
        assert single("<svg><g><path/></g></svg>")
        assert single("<svg><svg></svg></svg>")
        assert not single("<svg/><svg/>")
        assert not single("text <svg/>")
        assert not single("<svg>")
        assert not single("")

    def test_element_pairs(self):
        text = "<svg><svg/></svg><svg>"
        matcher = ElementMatcher(text, "svg")

        assert matcher.element_end(0) == 17
        assert matcher.element_end(5) == 11
        assert matcher.element_end(17) is None

    def test_closes_immediately(self):
        assert closes_immediately("<input>  </input>", "input", 7) == 17
        assert closes_immediately("<input> x </input>", "input", 7) is None

    def test_closing_finder_reuses_hit(self):
        text = "<a><a><a>x</a>"
        finder = ClosingTagFinder(text, "a")

        assert finder.find(3) == (10, 14)
        assert finder.find(6) == (10, 14)
        assert finder.find(14) is None


class TestLines:
    def test_line_number(self):
        text = "a\nb\nc"

        assert line_number(text, 0) == 1
        assert line_number(text, text.index("c")) == 3
        assert line_number(text, len(text) + 10) == 3

    def test_line_counter_matches_line_number(self):
        text = "a\n\nb\nc\n"
        counter = LineCounter(text)

        for offset in range(len(text)):
            assert counter.line_at(offset) == line_number(text, offset)
        assert counter.line_at(0) == 1
