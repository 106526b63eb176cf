"""Tests for Word origin detection and markup cleanup."""

from __future__ import annotations

import pytest

from merknad.input_pipeline.word_filter import (
    clean_word_markup,
    count_word_markers,
    is_word_content,
)

REDUNDANT_SPAN = (
    '<p class="MsoNormal"><span style="mso-bidi-font-weight:normal;'
    'font-family:Calibri">Hei</span> verden</p>'
)


class TestIsWordContent:
    """Tests for is_word_content()."""

    @pytest.mark.parametrize(
        "markup",
        [
            '<p class="MsoNormal">x</p>',
            "<p class=MsoListParagraph>x</p>",
            '<span style="mso-spacerun:yes"> </span>',
            "<span style='font-size:11pt;mso-ansi-language:NB'>x</span>",
            "<xml><w:WordDocument></w:WordDocument></xml>",
            '<html xmlns:o="urn:schemas-microsoft-com:office:office">',
            '<meta name=Generator content="Microsoft Word 15">',
            '<font face="Times New Roman">x</font>',
        ],
    )
    def test_word_markers_detected(self, markup: str) -> None:
        assert is_word_content(markup)

    @pytest.mark.parametrize(
        "markup",
        [
            "",
            "hello",
            "<p>Plain <b>HTML</b></p>",
            '<p style="color:red">styled but not Word</p>',
            "**markdown** with `code`",
        ],
    )
    def test_other_content_not_detected(self, markup: str) -> None:
        assert not is_word_content(markup)

    def test_marker_count_grows_per_paste(self) -> None:
        one = '<p class="MsoNormal">x</p>'
        assert count_word_markers("<p>ren</p>") == 0
        assert count_word_markers(one) == 1
        assert count_word_markers(one + "<p>y</p>" + one) == 2


class TestCleanWordMarkup:
    """Tests for clean_word_markup()."""

    def test_non_word_markup_returned_unchanged(self) -> None:
        """Content without a Word marker is returned byte-for-byte."""
        markup = '<p>Hei <span class="x">der</span></p>\n<!-- keep -->'
        assert clean_word_markup(markup) == markup

    def test_plain_text_returned_unchanged(self) -> None:
        assert clean_word_markup("  just text  ") == "  just text  "

    def test_redundant_style_span_removed(self) -> None:
        assert clean_word_markup(REDUNDANT_SPAN) == "<p>Hei verden</p>"

    def test_emphasis_style_kept(self) -> None:
        """Emphasis/alignment style properties survive, mso-* ones do not."""
        markup = (
            '<p class=MsoNormal style="text-align:center;mso-line-height-alt:12pt">'
            '<span style="font-weight:bold;mso-bidi-font-size:11pt">Viktig</span></p>'
        )
        result = clean_word_markup(markup)
        assert result == (
            '<p style="text-align:center">'
            '<span style="font-weight:bold">Viktig</span></p>'
        )

    def test_font_tags_unwrapped(self) -> None:
        markup = '<p><font face="Times New Roman" size="3">Gammel</font> tekst</p>'
        assert clean_word_markup(markup) == "<p>Gammel tekst</p>"

    def test_office_paragraph_tags_removed(self) -> None:
        markup = '<p class="MsoNormal">Tekst<o:p></o:p></p>'
        assert clean_word_markup(markup) == "<p>Tekst</p>"

    def test_spacing_paragraphs_removed(self) -> None:
        markup = (
            '<p class="MsoNormal">En</p>'
            '<p class="MsoNormal"><o:p>&nbsp;</o:p></p>'
            '<p class="MsoNormal">To</p>'
        )
        assert clean_word_markup(markup) == "<p>En</p><p>To</p>"

    def test_ordered_list_detected_from_marker(self) -> None:
        markup = (
            "<p class=MsoListParagraph style='mso-list:l1 level1 lfo2'>"
            "<span style='mso-list:Ignore'>1.<span>&nbsp;&nbsp;</span></span>"
            "En</p>"
            "<p class=MsoListParagraph style='mso-list:l1 level1 lfo2'>"
            "<span style='mso-list:Ignore'>2.<span>&nbsp;&nbsp;</span></span>"
            "To</p>"
        )
        assert clean_word_markup(markup) == "<ol><li>En</li><li>To</li></ol>"

    def test_skipped_list_level_nests_inside_items(self) -> None:
        """A level 1 -> level 3 jump still puts each sublist inside an <li>."""
        markup = (
            "<p class=MsoListParagraph style='mso-list:l0 level1 lfo1'>"
            "<span style='mso-list:Ignore'>-</span>A</p>"
            "<p class=MsoListParagraph style='mso-list:l0 level3 lfo1'>"
            "<span style='mso-list:Ignore'>-</span>B</p>"
        )
        assert clean_word_markup(markup) == (
            "<ul><li>A<ul><li><ul><li>B</li></ul></li></ul></li></ul>"
        )

    def test_list_starting_below_top_level(self) -> None:
        markup = (
            "<p class=MsoListParagraph style='mso-list:l0 level2 lfo1'>"
            "<span style='mso-list:Ignore'>-</span>Dypt</p>"
        )
        assert clean_word_markup(markup) == (
            "<ul><li><ul><li>Dypt</li></ul></li></ul>"
        )

    def test_full_word_clipboard(self, word_clipboard_html: str) -> None:
        """A realistic Word export keeps structure and loses Office noise."""
        result = clean_word_markup(word_clipboard_html)

        assert "<h1>Merknad til punkt 3</h1>" in result
        assert "<p>Avtalen er <b>ikke</b> <i>signert</i>.</p>" in result
        assert (
            "<ul><li>Første punkt<ul><li>Underpunkt</li></ul></li>"
            "<li>Andre punkt</li></ul>"
        ) in result
        assert '<p>Se <a href="https://example.org/avtale">avtalen</a>.</p>' in result

        for noise in ("Mso", "mso-", "o:p", "<span", "<style", "_Toc", "<!--"):
            assert noise not in result
        assert "<p></p>" not in result
        assert not is_word_content(result)

    def test_idempotent_on_word_clipboard(self, word_clipboard_html: str) -> None:
        once = clean_word_markup(word_clipboard_html)
        assert clean_word_markup(once) == once

    @pytest.mark.parametrize(
        "markup",
        [
            REDUNDANT_SPAN,
            '<p class="MsoNormal">Tekst<o:p></o:p></p>',
            "<p>unbalanced <b>bold",
            '<div class="WordSection1"><p class="MsoNormal">Inni</p></div>',
            "<table class=MsoTableGrid border=1>"
            "<tr><td width=200>Celle</td></tr></table>",
        ],
    )
    def test_idempotent(self, markup: str) -> None:
        once = clean_word_markup(markup)
        assert clean_word_markup(once) == once

    def test_word_section_div_unwrapped(self) -> None:
        markup = '<div class="WordSection1"><p class="MsoNormal">Inni</p></div>'
        assert clean_word_markup(markup) == "<p>Inni</p>"

    def test_table_structure_kept(self) -> None:
        markup = (
            "<table class=MsoTableGrid border=1 cellspacing=0>"
            "<tr><td width=200 valign=top><p class=MsoNormal>Celle</p></td></tr>"
            "</table>"
        )
        result = clean_word_markup(markup)
        assert "<table>" in result
        assert "<td><p>Celle</p></td>" in result
        assert "width" not in result
