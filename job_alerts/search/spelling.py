"""Did-you-mean suggestions for common job-title misspellings."""

from typing import Dict, Optional

CORRECTIONS: Dict[str, str] = {
    "desinger": "designer",
    "developr": "developer",
    "enginee": "engineer",
    "programer": "programmer",
    "analist": "analyst",
    "managr": "manager",
    "specialst": "specialist",
}


def _correct_word(word: str) -> str:
    for misspelling, correction in CORRECTIONS.items():
        if misspelling in word and correction not in word:
            return word.replace(misspelling, correction, 1)
    return word


def suggest_correction(query: str) -> Optional[str]:
    """
    Suggest a corrected query, or None when nothing looks misspelled.

    The query is lowercased and split on whitespace; in each word the first
    known misspelling is replaced. Words that already contain the correct
    spelling are left alone, so "engineer" is never rewritten.

    Example:
        >>> suggest_correction("Senior Developr")
        'senior developer'
        >>> suggest_correction("software engineer") is None
        True
    """
    if not query or not query.strip():
        return None

    words = query.lower().split()
    corrected = [_correct_word(word) for word in words]

    if corrected == words:
        return None
    return " ".join(corrected)
