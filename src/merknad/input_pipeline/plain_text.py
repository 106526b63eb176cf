"""Plain-text stripping for saved comments.

Comments are persisted and forwarded as plain text only.  ``strip_tags``
applies a zero-tags, zero-attributes policy: every element is removed,
text of content-bearing elements is kept, text of non-content elements
(script, style, ...) is dropped with them.  Whitespace is kept verbatim.

Malformed or unbalanced markup never raises; lxml recovers what it can and
a regex fallback handles input lxml rejects outright.
"""

from __future__ import annotations

import html as html_module
import logging
import re

from lxml import etree
from lxml import html as lxml_html

logger = logging.getLogger(__name__)

# Elements whose text is not document content.
_NON_TEXT_TAGS = ("script", "style", "textarea", "noscript", "template", "option")

_NON_TEXT_BLOCK = re.compile(
    r"<(" + "|".join(_NON_TEXT_TAGS) + r")\b[^>]*>.*?</\1\s*>",
    re.DOTALL | re.IGNORECASE,
)
_COMMENT = re.compile(r"<!--.*?(?:-->|$)", re.DOTALL)
_TAG = re.compile(r"<[/!?]?[a-zA-Z][^>]*>?")

# Elements that end a line in exported editor markup.
_BLOCK_TAGS = ("div", "p", "li", "h1", "h2", "h3", "h4", "h5", "h6", "tr")

_LINE_BREAK = re.compile(r"<br\s*/?>", re.IGNORECASE)
_BLOCK_END = re.compile(
    r"</(?:" + "|".join(_BLOCK_TAGS) + r")\s*>(?=[^\n])",
    re.IGNORECASE,
)


def strip_tags(markup: str) -> str:
    """Remove all tags and attributes from *markup*, returning plain text.

    Line structure of editor markup survives: ``<br>`` and the end of each
    block element (``div``, ``p``, ``li``, headings, table rows) become a
    newline when more content follows.

    Entities are decoded and never re-escaped, so ``&lt;`` in the
    markup comes back as a literal ``<``.  The result is plain text for
    storage, not markup safe to insert into HTML.

    Args:
        markup: Arbitrary (possibly malformed) HTML or markdown with HTML.

    Returns:
        Text content with entities decoded.  Never raises.
    """
    if not markup:
        return ""
    if "<" not in markup and "&" not in markup:
        return markup

    try:
        # create_parent accepts bare text before the first tag
        root = lxml_html.fragment_fromstring(markup, create_parent="div")
    except (etree.ParserError, ValueError, AssertionError) as exc:
        # lxml asserts when a full document parses without a <body>
        logger.debug("lxml rejected markup (%s), using regex fallback", exc)
        return _strip_tags_regex_fallback(markup)

    for tag in _NON_TEXT_TAGS:
        for element in root.xpath(f".//{tag}"):
            # drop_tree() keeps the element's tail text
            element.drop_tree()

    _break_lines(root)
    return str(root.text_content())


def _break_lines(root: lxml_html.HtmlElement) -> None:
    """Put newlines into tail text where the markup ends a line."""
    for br in root.iter("br"):
        br.tail = "\n" + (br.tail or "")

    for element in root.iter(*_BLOCK_TAGS):
        tail = element.tail or ""
        if element.getnext() is None and not tail.strip():
            continue
        if not tail.startswith("\n"):
            element.tail = "\n" + tail


def _strip_tags_regex_fallback(markup: str) -> str:
    """Regex fallback for input the HTML parser refuses.

    Less robust than DOM-based stripping but never raises.
    """
    text = _NON_TEXT_BLOCK.sub("", markup)
    text = _COMMENT.sub("", text)
    text = _LINE_BREAK.sub("\n", text)
    text = _BLOCK_END.sub("\n", text)
    text = _TAG.sub("", text)
    return html_module.unescape(text)
