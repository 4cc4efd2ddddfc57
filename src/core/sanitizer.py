"""
HTML sanitization for user-authored board content.

Content is parsed with BeautifulSoup and rebuilt against an allow-list
covering text formatting, lists, tables, headings, links and images.

- Executable or embedding elements (script, style, iframe, ...) are removed
  together with everything inside them.
- Any other tag outside the allow-list is unwrapped: the tag goes, its text stays.
- Attributes not listed for a tag are dropped, which covers every on* handler.
- URL attributes keep only absolute http/https (and mailto/ftp for links) values.
- HTML comments are removed.
"""

import logging

from bs4 import BeautifulSoup, Comment

logger = logging.getLogger(__name__)


REMOVED_WITH_CONTENT = frozenset(
    {
        "script",
        "style",
        "iframe",
        "frame",
        "frameset",
        "object",
        "embed",
        "applet",
        "noscript",
        "template",
        "svg",
        "math",
        "link",
        "meta",
        "base",
        "form",
    }
)

ALLOWED_TAGS = frozenset(
    {
        "a", "b", "blockquote", "br", "caption", "cite", "code", "col",
        "colgroup", "dd", "div", "dl", "dt", "em", "h1", "h2", "h3", "h4",
        "h5", "h6", "i", "img", "li", "ol", "p", "pre", "q", "small", "span",
        "strike", "strong", "sub", "sup", "table", "tbody", "td", "tfoot",
        "th", "thead", "tr", "u", "ul",
    }
)

ALLOWED_ATTRIBUTES: dict[str, frozenset[str]] = {
    "a": frozenset({"href", "title"}),
    "blockquote": frozenset({"cite"}),
    "col": frozenset({"span", "width"}),
    "colgroup": frozenset({"span", "width"}),
    "img": frozenset({"align", "alt", "height", "src", "title", "width"}),
    "ol": frozenset({"start", "type"}),
    "q": frozenset({"cite"}),
    "table": frozenset({"summary", "width"}),
    "td": frozenset({"abbr", "axis", "colspan", "rowspan", "width"}),
    "th": frozenset({"abbr", "axis", "colspan", "rowspan", "scope", "width"}),
    "ul": frozenset({"type"}),
}

ALLOWED_PROTOCOLS: dict[tuple[str, str], frozenset[str]] = {
    ("a", "href"): frozenset({"ftp", "http", "https", "mailto"}),
    ("blockquote", "cite"): frozenset({"http", "https"}),
    ("img", "src"): frozenset({"http", "https"}),
    ("q", "cite"): frozenset({"http", "https"}),
}


def _has_allowed_protocol(value: str, protocols: frozenset[str]) -> bool:
    # Browsers ignore embedded whitespace and control characters in schemes
    compact = "".join(ch for ch in value if ch.isprintable() and not ch.isspace())
    if ":" not in compact:
        return False
    scheme = compact.split(":", 1)[0].lower()
    return scheme in protocols


def _clean_attributes(tag) -> None:
    allowed = ALLOWED_ATTRIBUTES.get(tag.name, frozenset())
    for attr in list(tag.attrs):
        if attr not in allowed:
            del tag[attr]
            continue

        protocols = ALLOWED_PROTOCOLS.get((tag.name, attr))
        value = tag[attr]
        if isinstance(value, list):
            value = " ".join(value)
        if protocols is not None and not _has_allowed_protocol(value, protocols):
            del tag[attr]


def sanitize_html(html: str | None) -> str | None:
    """
    Strip executable and non-allow-listed markup from an HTML fragment.

    Blank input is returned unchanged.

    Example:
        >>> sanitize_html("<script>alert(1)</script><p>ok</p>")
        '<p>ok</p>'
    """
    if html is None or not html.strip():
        return html

    soup = BeautifulSoup(html, "html.parser")

    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()

    for tag in soup.find_all(sorted(REMOVED_WITH_CONTENT)):
        if not tag.decomposed:
            tag.decompose()

    for tag in soup.find_all(True):
        if tag.name in ALLOWED_TAGS:
            _clean_attributes(tag)
        else:
            tag.unwrap()

    sanitized = str(soup)
    logger.debug(f"Sanitized HTML content: {len(html)} -> {len(sanitized)} characters")
    return sanitized
