from __future__ import annotations

from wt.models import NO_MATCH, Match

BONUS_FIRST_CHAR = 16
BONUS_SEPARATOR = 16
BONUS_CAMEL_CASE = 16
BONUS_ADJACENT = 8
PENALTY_LEADING_GAP = -3
PENALTY_GAP = -1

SEPARATORS = frozenset("-_./")


def fuzzy_match(text: str, pattern: str) -> Match:
    """Score ``text`` against ``pattern`` with a greedy forward scan.

    Matching is case-insensitive, but separator and camelCase boundaries are
    classified on the original text. Higher scores are better; scores only
    compare candidates matched against the same pattern.
    """
    if not pattern:
        return Match(matched=True)
    if not text or len(pattern) > len(text):
        return NO_MATCH

    folded_pattern = [char.casefold() for char in pattern]
    positions: list[int] = []
    score = 0
    previous = -1

    for index, char in enumerate(text):
        if len(positions) == len(folded_pattern):
            break
        if char.casefold() != folded_pattern[len(positions)]:
            continue

        if not positions:
            score += index * PENALTY_LEADING_GAP
        elif index - previous > 1:
            score += (index - previous - 1) * PENALTY_GAP

        if index == 0:
            score += BONUS_FIRST_CHAR
        else:
            before = text[index - 1]
            if before in SEPARATORS:
                score += BONUS_SEPARATOR
            if before.islower() and char.isupper():
                score += BONUS_CAMEL_CASE

        # previous starts at -1, so a match at index 0 also counts as adjacent.
        if previous == index - 1:
            score += BONUS_ADJACENT

        positions.append(index)
        previous = index

    if len(positions) < len(folded_pattern):
        return NO_MATCH
    return Match(matched=True, score=score, positions=tuple(positions))
