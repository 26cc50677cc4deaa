"""
Lexicon matching - whole-word, case-insensitive term lookup.

Used for fixed vocabularies (kinship terms) where a regex per term
would add nothing over a plain scan.
"""
from typing import Iterable, List, Tuple


def _lower_preserving_length(text: str) -> str:
    # str.lower() may expand some characters (e.g. "İ"), which would shift offsets
    return "".join(ch.lower() if len(ch.lower()) == 1 else ch for ch in text)


def find_lexicon_terms(text: str, terms: Iterable[str]) -> List[Tuple[int, int, str]]:
    """
    Find every whole-word occurrence of each term.

    Args:
        text: Task title text.
        terms: Vocabulary entries (matched case-insensitively).

    Returns:
        (start, end, term) triples ordered by start, then term order.
    """
    lower_text = _lower_preserving_length(text)
    hits: List[Tuple[int, int, str]] = []

    for term in terms:
        lower_term = term.lower()
        if not lower_term:
            continue
        pos = 0

        while pos < len(lower_text):
            pos = lower_text.find(lower_term, pos)
            if pos == -1:
                break

            # Word boundary check
            before_ok = (pos == 0) or (not lower_text[pos - 1].isalnum())
            after_index = pos + len(lower_term)
            after_ok = (
                after_index == len(lower_text)
                or not lower_text[after_index].isalnum()
            )

            if before_ok and after_ok:
                hits.append((pos, after_index, term))

            pos += 1

    hits.sort(key=lambda h: h[0])
    return hits
