"""Plain-text conversion for feed item HTML."""

import re

_BLOCK_BREAKS = (
    (re.compile(r"</p>", re.IGNORECASE), "\n\n"),
    (re.compile(r"<br\s*/?>", re.IGNORECASE), "\n"),
    (re.compile(r"</div>", re.IGNORECASE), "\n"),
    (re.compile(r"</h[1-6]>", re.IGNORECASE), "\n\n"),
    (re.compile(r"</li>", re.IGNORECASE), "\n"),
)

_TAG_RE = re.compile(r"<[^>]+>")
_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")
_INLINE_SPACE_RE = re.compile(r"[ \t]+")

# Decoded in this order, so "&amp;lt;" ends up as "<"
_ENTITIES = (
    ("&quot;", '"'),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&nbsp;", " "),
    ("&#39;", "'"),
    ("&apos;", "'"),
)


def html_to_text(html: str | None) -> str:
    """Strip tags from feed HTML, keeping paragraph and line structure."""
    if not html:
        return ""

    text = html
    for pattern, replacement in _BLOCK_BREAKS:
        text = pattern.sub(replacement, text)

    text = _TAG_RE.sub("", text)

    for entity, char in _ENTITIES:
        text = text.replace(entity, char)

    text = _EXCESS_NEWLINES_RE.sub("\n\n", text)
    text = _INLINE_SPACE_RE.sub(" ", text)
    return text.strip()
