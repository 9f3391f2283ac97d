"""Tests for literal fragment anchoring."""

from magic_writer.editor.anchor import Anchor, find_anchor


class TestFindAnchor:
    def test_finds_first_occurrence(self):
        assert find_anchor("the cat and the cat", "cat") == Anchor(4, 7)

    def test_missing_fragment(self):
        assert find_anchor("the cat sat", "dog") is None

    def test_empty_fragment(self):
        assert find_anchor("the cat sat", "") is None

    def test_regex_metacharacters_are_literal(self):
        markup = "Is it (really) 100% done? Yes [maybe]."
        assert find_anchor(markup, "(really)") == Anchor(6, 14)
        assert find_anchor(markup, "done?") == Anchor(20, 25)
        assert find_anchor(markup, "[maybe].") == Anchor(30, 38)
        assert find_anchor(markup, "r.ally") is None

    def test_skips_text_inside_existing_overlay(self):
        markup = (
            '<span class="grammar-error" id="grammar-1" title="x">cat</span> and cat'
        )
        anchor = find_anchor(markup, "cat")
        assert markup[anchor.start : anchor.end] == "cat"
        assert anchor.start == markup.rindex("cat")

    def test_all_occurrences_highlighted(self):
        markup = '<span class="suggestion-underline" id="suggestion-1" title="x">cat</span>'
        assert find_anchor(markup, "cat") is None

    def test_never_matches_inside_a_tag(self):
        markup = '<a href="cat.html">dog</a> cat'
        anchor = find_anchor(markup, "cat")
        assert anchor.start == markup.rindex("cat")

    def test_fragment_spanning_overlay_boundary_is_rejected(self):
        markup = 'big <span class="grammar-error" id="grammar-1" title="x">cat</span>'
        assert find_anchor(markup, "big cat") is None

    def test_matches_escaped_form(self):
        markup = "Tom &amp; Jerry &lt;3"
        anchor = find_anchor(markup, "Tom & Jerry <3")
        assert anchor == Anchor(0, len(markup))

    def test_matches_escaped_quotes(self):
        markup = "don&#39;t stop"
        assert find_anchor(markup, "don't") == Anchor(0, 9)

    def test_escaped_form_earlier_than_raw_wins(self):
        markup = "a &amp; b then a & b"
        assert find_anchor(markup, "a & b") == Anchor(0, 9)

    def test_never_matches_inside_an_entity(self):
        assert find_anchor("5 &lt; 6", "lt") is None
        assert find_anchor("Tom &amp; Jerry", "amp") is None
        assert find_anchor("say &quot;hi&quot;", "quot;hi") is None

    def test_entity_fragment_skipped_for_later_visible_text(self):
        markup = "5 &lt; 6 is lt"
        assert find_anchor(markup, "lt") == Anchor(12, 14)
