"""Password Policy - Advisory strength checks for issued passwords"""
import re
from typing import Any, Dict

SYMBOLS = '!@#$%^&*(),.?":{}|<>'
MIN_LENGTH = 8

_DIGIT = re.compile(r"\d")
_UPPER = re.compile(r"[A-Z]")
_SYMBOL = re.compile("[" + re.escape(SYMBOLS) + "]")


def is_strong(password: str) -> bool:
    """Strong iff long enough and containing a digit and a symbol"""
    return (
        len(password) >= MIN_LENGTH
        and bool(_DIGIT.search(password))
        and bool(_SYMBOL.search(password))
    )


def strength_score(password: str) -> int:
    """0-100 meter, 25 points each for length, uppercase, digit and symbol"""
    score = 0
    if len(password) >= MIN_LENGTH:
        score += 25
    if _UPPER.search(password):
        score += 25
    if _DIGIT.search(password):
        score += 25
    if _SYMBOL.search(password):
        score += 25
    return score


def evaluate(password: str) -> Dict[str, Any]:
    """
    Full strength report for a candidate password

    Returns:
        Dict with ``strong``, ``score`` and the individual checks
    """
    return {
        "strong": is_strong(password),
        "score": strength_score(password),
        "checks": {
            "length": len(password) >= MIN_LENGTH,
            "uppercase": bool(_UPPER.search(password)),
            "digit": bool(_DIGIT.search(password)),
            "symbol": bool(_SYMBOL.search(password)),
        },
    }
