"""Tests for the document model and its plain-text projection."""

from magic_writer.editor.document import Document, markup_to_plain


class TestMarkupToPlain:
    def test_strips_tags_and_overlays(self):
        markup = (
            '<p><b>Teh</b> <span class="grammar-error" id="grammar-1" title="x">cat</span></p>'
        )
        assert markup_to_plain(markup) == "Teh cat\n"

    def test_line_breaks(self):
        assert markup_to_plain("one<br>two<br/>three") == "one\ntwo\nthree"

    def test_entities_are_kept(self):
        assert markup_to_plain("Tom &amp; Jerry") == "Tom &amp; Jerry"


class TestDocument:
    def test_text_unescapes_entities(self):
        assert Document("<p>Tom &amp; Jerry</p>").text == "Tom & Jerry\n"

    def test_revision_bumps_on_change(self):
        doc = Document("a")
        doc.set_content("b")
        doc.set_content("c")
        assert doc.revision == 2

    def test_unchanged_content_keeps_revision(self):
        doc = Document("a")
        doc.set_content("a")
        assert doc.revision == 0
