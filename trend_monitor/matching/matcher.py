"""Case-insensitive substring matching of keywords against post text."""

from collections.abc import Iterable

from trend_monitor.keywords.schemas import Keyword


def normalize_text(text: str) -> str:
    return text.lower().strip()


def match_keyword(text: str, name: str, aliases: Iterable[str] = ()) -> bool:
    """True when the name or any alias occurs in the text, ignoring case."""
    normalized = normalize_text(text)
    for term in (name, *aliases):
        candidate = normalize_text(term)
        if candidate and candidate in normalized:
            return True
    return False


class KeywordMatcher:
    """
    Finds which keywords a text mentions.

    Matching is plain substring containment, so "AI" also matches "SAID".
    """

    def match_keywords(self, text: str, keywords: Iterable[Keyword]) -> list[str]:
        """Return ids of matching keywords, deduplicated, in keyword order."""
        matches: dict[str, None] = {}
        for keyword in keywords:
            if match_keyword(text, keyword.name, keyword.aliases):
                matches[keyword.id] = None
        return list(matches)
