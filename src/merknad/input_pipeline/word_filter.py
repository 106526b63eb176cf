"""Word clipboard cleanup: origin detection and Office markup removal.

Word puts its whole HTML export on the clipboard: conditional comments,
Office XML namespaces, ``Mso*`` classes, ``mso-*`` style properties, fake
list paragraphs and a span around nearly every run of text.  The QEditor
content model either drops that content or mangles it, so it is cleaned
here first.

Content that does not carry a Word origin marker is returned unchanged.
Cleaned output never carries a marker, which makes the pass idempotent.
"""

# Pattern: Functional Core (pure functions, no I/O)

from __future__ import annotations

import html as html_module
import logging
import re
from typing import TYPE_CHECKING

from selectolax.lexbor import LexborHTMLParser

if TYPE_CHECKING:
    from selectolax.lexbor import LexborNode

logger = logging.getLogger(__name__)

_WORD_MARKERS = re.compile(
    r"""<font\s+face="Times New Roman"
    |class="?Mso
    |style="[^"]*\bmso-
    |style='[^']*\bmso-
    |w:WordDocument
    |urn:schemas-microsoft-com:office
    |<meta\s+name="?Generator"?\s+content="?Microsoft\s+Word""",
    re.IGNORECASE | re.VERBOSE,
)

# Regex pre-pass: constructs the HTML parser would turn into bogus nodes.
_CONDITIONAL_COMMENT = re.compile(r"<!--\[if[^\]]*\]>.*?<!\[endif\]-->", re.DOTALL)
_DOWNLEVEL_CONDITIONAL = re.compile(r"<!\[(?:if[^\]]*|endif)\]>", re.IGNORECASE)
_COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)
_XML_DECLARATION = re.compile(r"<\?xml[^>]*>", re.IGNORECASE)
_OFFICE_PARAGRAPH = re.compile(r"<o:p\b[^>]*>.*?</o:p>", re.IGNORECASE | re.DOTALL)
_OFFICE_TAG = re.compile(r"</?(?:o|w|v|m|st1):[\w-]+\b[^>]*>", re.IGNORECASE)

_DROP_ELEMENTS = ["style", "meta", "link", "title", "script", "xml"]

# Attributes Word sprinkles everywhere that carry no document structure.
_DROP_ATTRIBUTES = frozenset(
    (
        "class",
        "lang",
        "face",
        "size",
        "color",
        "width",
        "valign",
        "border",
        "cellpadding",
        "cellspacing",
        "clear",
    )
)

# Inline style properties worth keeping (emphasis and alignment).
_KEEP_STYLE_PROPS = ("text-align", "text-decoration", "font-weight", "font-style")

_WORD_SECTION = re.compile(r"^WordSection\d*$", re.IGNORECASE)
_LIST_STYLE = re.compile(r"mso-list\s*:\s*l\d+\s+level(\d+)", re.IGNORECASE)
_LIST_IGNORE = re.compile(r"mso-list\s*:\s*Ignore", re.IGNORECASE)
_ORDERED_MARKER = re.compile(r"^\(?(?:\d+|[a-z]|[ivxlc]+)[.)]$", re.IGNORECASE)

# Internal attributes set on list paragraphs between passes.
_LEVEL_ATTR = "data-word-list-level"
_TYPE_ATTR = "data-word-list-type"


def is_word_content(markup: str) -> bool:
    """Return True if *markup* carries a Microsoft Word origin marker."""
    return bool(markup) and _WORD_MARKERS.search(markup) is not None


def count_word_markers(markup: str) -> int:
    """Number of Word origin markers in *markup*; grows with each Word paste."""
    return sum(1 for _ in _WORD_MARKERS.finditer(markup))


def _strip_office_noise(markup: str) -> str:
    """Remove comments, conditionals and Office-namespaced tags by regex."""
    markup = _CONDITIONAL_COMMENT.sub("", markup)
    markup = _DOWNLEVEL_CONDITIONAL.sub("", markup)
    markup = _COMMENT.sub("", markup)
    markup = _XML_DECLARATION.sub("", markup)
    markup = _OFFICE_PARAGRAPH.sub("", markup)
    return _OFFICE_TAG.sub("", markup)


def _filter_style(style: str) -> str:
    kept: list[str] = []
    for declaration in style.split(";"):
        name, sep, value = declaration.partition(":")
        name = name.strip().lower()
        if sep and name in _KEEP_STYLE_PROPS and value.strip():
            kept.append(f"{name}:{value.strip()}")
    return ";".join(kept)


def _mark_list_paragraphs(tree: LexborHTMLParser) -> int:
    """Tag Word list paragraphs with their level and list type.

    Removes the ``mso-list:Ignore`` span holding the bullet/number text.
    Returns the number of list paragraphs found.
    """
    found = 0
    for para in tree.css("p"):
        style = para.attributes.get("style") or ""
        level_match = _LIST_STYLE.search(style)
        if level_match is None:
            continue

        marker = ""
        for span in para.css("span"):
            if _LIST_IGNORE.search(span.attributes.get("style") or ""):
                marker = (span.text() or "").strip()
                span.decompose()
                break

        para.attrs[_LEVEL_ATTR] = level_match.group(1)
        para.attrs[_TYPE_ATTR] = "ol" if _ORDERED_MARKER.match(marker) else "ul"
        found += 1
    return found


def _clean_attributes(tree: LexborHTMLParser) -> None:
    for node in tree.css("*"):
        attrs_to_remove: list[str] = []
        for attr_name in node.attributes:
            lower = attr_name.lower()
            if lower == "style":
                kept = _filter_style(node.attributes.get("style") or "")
                if kept:
                    node.attrs["style"] = kept
                else:
                    attrs_to_remove.append(attr_name)
            elif lower in _DROP_ATTRIBUTES or ":" in lower:
                attrs_to_remove.append(attr_name)

        for attr_name in attrs_to_remove:
            del node.attrs[attr_name]


def _unwrap_redundant(tree: LexborHTMLParser) -> None:
    """Unwrap attribute-less spans/fonts and href-less anchors (bookmarks)."""
    for node in tree.css("span, font"):
        if not node.attributes:
            node.unwrap()
    for node in tree.css("a"):
        if not node.attributes.get("href"):
            node.unwrap()


def _remove_empty_paragraphs(tree: LexborHTMLParser) -> None:
    """Drop paragraphs Word uses purely for vertical spacing."""
    for para in tree.css("p"):
        if (para.text() or "").strip():
            continue
        if para.css_first("img, br, table"):
            continue
        para.decompose()


def _render_list(items: list[tuple[int, str, str]]) -> str:
    """Render ``(level, list_tag, inner_html)`` items as nested lists.

    Skipped levels (level 1 straight to 3) get an empty ``<li>`` each, so
    every nested list sits inside a list item.
    """
    parts: list[str] = []
    stack: list[str] = []
    for level, tag, content in items:
        if level > len(stack):
            opened = 0
            while len(stack) < level:
                if opened:
                    parts.append("<li>")
                parts.append(f"<{tag}>")
                stack.append(tag)
                opened += 1
        else:
            parts.append("</li>")
            while len(stack) > level:
                parts.append(f"</{stack.pop()}></li>")
        parts.append(f"<li>{content}")

    parts.append("</li>")
    while stack:
        parts.append(f"</{stack.pop()}>")
        if stack:
            parts.append("</li>")
    return "".join(parts)


def _serialise_node(node: LexborNode) -> str:
    if node.tag == "-text":
        return html_module.escape(node.text() or "", quote=False)
    if node.tag == "_comment":
        return ""
    return node.html or ""


def _assemble_body(body: LexborNode) -> str:
    """Serialise top-level body children, folding list paragraph runs."""
    parts: list[str] = []
    pending: list[tuple[int, str, str]] = []

    for node in body.iter(include_text=True):
        level = node.attributes.get(_LEVEL_ATTR) if node.tag == "p" else None
        if level is not None:
            list_tag = node.attributes.get(_TYPE_ATTR) or "ul"
            del node.attrs[_LEVEL_ATTR]
            del node.attrs[_TYPE_ATTR]
            pending.append((max(1, int(level)), list_tag, node.inner_html or ""))
            continue

        if pending and node.tag == "-text" and not (node.text() or "").strip():
            # Line breaks between list paragraphs
            continue
        if pending:
            parts.append(_render_list(pending))
            pending = []
        parts.append(_serialise_node(node))

    if pending:
        parts.append(_render_list(pending))
    return "".join(parts)


def _drop_list_markers(tree: LexborHTMLParser) -> None:
    """Turn list paragraphs outside the top level back into plain paragraphs."""
    for para in tree.css(f"p[{_LEVEL_ATTR}]"):
        del para.attrs[_LEVEL_ATTR]
        del para.attrs[_TYPE_ATTR]


def clean_word_markup(markup: str) -> str:
    """Strip Word export artefacts from *markup*, keeping document structure.

    Headings, paragraphs, emphasis, tables and lists survive; Office
    namespaces, ``Mso`` classes, ``mso-*`` styles, redundant spans and
    spacing paragraphs do not.  Word's fake list paragraphs become real
    ``<ul>``/``<ol>`` lists.

    Args:
        markup: HTML from the clipboard or the editor.

    Returns:
        Cleaned HTML, or *markup* unchanged when it is not Word content.
    """
    if not is_word_content(markup):
        return markup

    input_size = len(markup)
    tree = LexborHTMLParser(_strip_office_noise(markup))
    tree.strip_tags(_DROP_ELEMENTS)

    body = tree.body
    if body is None:
        return ""

    for div in tree.css("div"):
        if _WORD_SECTION.match(div.attributes.get("class") or ""):
            div.unwrap()

    list_paragraphs = _mark_list_paragraphs(tree)
    _clean_attributes(tree)
    _unwrap_redundant(tree)
    _remove_empty_paragraphs(tree)

    cleaned = _assemble_body(body).strip()
    if list_paragraphs:
        # Nested list paragraphs (inside tables etc.) stay paragraphs
        reparsed = LexborHTMLParser(cleaned)
        _drop_list_markers(reparsed)
        cleaned = (reparsed.body.inner_html if reparsed.body else cleaned).strip()

    logger.info(
        "[PASTE] Word cleanup: %d -> %d bytes, %d list paragraphs",
        input_size,
        len(cleaned),
        list_paragraphs,
    )
    return cleaned
