"""String similarity for OCR-vs-record comparison.

Strings are normalized (whitespace, hyphens and half/full-width brackets
removed, lower-cased) and scored as one minus the Levenshtein distance
over the longer length. Python strings index by code point, so CJK text
is compared character by character.
"""

import re
from collections.abc import Callable

_STRIP_CHARS = re.compile(r"[\s\-()（）]")

Scorer = Callable[[str, str], float]


def normalize(text: str) -> str:
    """Remove whitespace, hyphens and brackets, then lower-case."""
    return _STRIP_CHARS.sub("", text).lower()


def levenshtein_distance(a: str, b: str) -> int:
    """Minimum number of single-character edits turning ``a`` into ``b``.

    Insertions, deletions and substitutions all cost 1.
    """
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        current = [i]
        for j, cb in enumerate(b, 1):
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + (ca != cb),
                )
            )
        previous = current
    return previous[-1]


def _prepare(a: str, b: str) -> tuple[str, str] | float:
    """Normalize both strings, or return the score for the trivial cases."""
    clean_a, clean_b = normalize(a), normalize(b)
    if clean_a == clean_b:
        return 1.0
    if not clean_a or not clean_b:
        return 0.0
    return clean_a, clean_b


def similarity(a: str, b: str) -> float:
    """Edit-distance similarity in ``[0, 1]``; 1 only for equal normalized strings."""
    prepared = _prepare(a, b)
    if isinstance(prepared, float):
        return prepared

    clean_a, clean_b = prepared
    distance = levenshtein_distance(clean_a, clean_b)
    score = 1.0 - distance / max(len(clean_a), len(clean_b))
    return min(1.0, max(0.0, score))


def containment_similarity(a: str, b: str) -> float:
    """Cheap heuristic: 0.9 when one string contains the other, else length ratio.

    Faster than :func:`similarity` but blind to character differences
    between strings of equal length.
    """
    prepared = _prepare(a, b)
    if isinstance(prepared, float):
        return prepared

    clean_a, clean_b = prepared
    if clean_a in clean_b or clean_b in clean_a:
        return 0.9
    return min(len(clean_a), len(clean_b)) / max(len(clean_a), len(clean_b))


_SCORERS: dict[str, Scorer] = {
    "levenshtein": similarity,
    "containment": containment_similarity,
}


def get_scorer(method: str = "levenshtein") -> Scorer:
    """Look up a similarity function by name.

    Raises:
        ValueError: If ``method`` is not a known scorer.
    """
    try:
        return _SCORERS[method]
    except KeyError:
        raise ValueError(f"Unsupported similarity method: {method}") from None
