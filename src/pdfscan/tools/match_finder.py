"""
Literal phrase matching for the PDF Scanner.

This module finds every non-overlapping occurrence of a phrase in extracted
document text and builds a context snippet for each one. Offsets are always
reported against the original text, even when case folding changes the
length of some characters (for example 'ß' folds to 'ss').
"""

from typing import List, Optional, Tuple

from ..models.search_results import MatchSpan


DEFAULT_CONTEXT_CHARS = 40


def fold_text(text: str, case_sensitive: bool) -> Tuple[str, Optional[List[int]]]:
    """
    Prepare text for matching under the configured case rule.

    Args:
        text: Original text
        case_sensitive: Whether matching respects letter case

    Returns:
        Tuple of (folded text, origin map). The origin map gives, for every
        character of the folded text, the index of the original character it
        came from. It is None when folded and original indices coincide.
    """
    if case_sensitive:
        return text, None

    folded = text.casefold()
    # casefold never shrinks a character, so equal lengths mean a 1:1 mapping
    if len(folded) == len(text):
        return folded, None

    pieces = []
    origin = []
    for index, char in enumerate(text):
        folded_char = char.casefold()
        pieces.append(folded_char)
        origin.extend([index] * len(folded_char))
    return ''.join(pieces), origin


class MatchFinder:
    """
    Finds occurrences of one phrase in any number of texts.

    The phrase is folded once at construction so a worker can reuse the same
    finder for every document it scans.
    """

    def __init__(self, phrase: str, case_sensitive: bool = False,
                 context_chars: int = DEFAULT_CONTEXT_CHARS):
        """
        Initialize the match finder.

        Args:
            phrase: Literal phrase to look for (must not be empty)
            case_sensitive: Whether matching respects letter case
            context_chars: Characters of context kept on each side of a match

        Raises:
            ValueError: If the phrase is empty or context_chars is negative
        """
        if not phrase:
            raise ValueError("Cannot search for an empty phrase")
        if context_chars < 0:
            raise ValueError("context_chars must not be negative")

        self.phrase = phrase
        self.case_sensitive = case_sensitive
        self.context_chars = context_chars
        self._needle = phrase if case_sensitive else phrase.casefold()

    def find(self, text: str) -> List[MatchSpan]:
        """
        Find all non-overlapping occurrences of the phrase, left to right.

        Args:
            text: Extracted document text

        Returns:
            One MatchSpan per occurrence, ordered by offset
        """
        haystack, origin = fold_text(text, self.case_sensitive)
        needle = self._needle
        spans = []

        position = haystack.find(needle)
        while position >= 0:
            end = position + len(needle)

            if origin is None:
                spans.append(self._build_span(text, position, end))
                position = haystack.find(needle, end)
                continue

            # A match must cover whole original characters
            if not self._on_boundaries(origin, position, end):
                position = haystack.find(needle, position + 1)
                continue

            spans.append(self._build_span(text, origin[position], origin[end - 1] + 1))
            position = haystack.find(needle, end)

        return spans

    @staticmethod
    def _on_boundaries(origin: List[int], start: int, end: int) -> bool:
        starts_cleanly = start == 0 or origin[start - 1] != origin[start]
        ends_cleanly = end == len(origin) or origin[end] != origin[end - 1]
        return starts_cleanly and ends_cleanly

    def _build_span(self, text: str, start: int, end: int) -> MatchSpan:
        """
        Build a span for text[start:end] with context clamped to the text bounds.

        Args:
            text: Original text
            start: Match start index in the original text
            end: Match end index in the original text

        Returns:
            MatchSpan with context and in-context match positions
        """
        context_start = max(0, start - self.context_chars)
        context_end = min(len(text), end + self.context_chars)

        return MatchSpan(
            context_text=text[context_start:context_end],
            start_offset=start,
            match_length=end - start,
            match_start=start - context_start,
            match_end=end - context_start
        )


def find_matches(text: str, phrase: str, case_sensitive: bool = False,
                 context_chars: int = DEFAULT_CONTEXT_CHARS) -> List[MatchSpan]:
    """
    Convenience function to find all occurrences of a phrase in a text.

    The empty phrase matches nothing here; reporting every document for an
    empty phrase is the caller's match-all policy.

    Args:
        text: Extracted document text
        phrase: Literal phrase to look for
        case_sensitive: Whether matching respects letter case
        context_chars: Characters of context kept on each side of a match

    Returns:
        One MatchSpan per non-overlapping occurrence, ordered by offset
    """
    if not phrase:
        return []
    return MatchFinder(phrase, case_sensitive, context_chars).find(text)
