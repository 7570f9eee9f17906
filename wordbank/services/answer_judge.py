from typing import Literal

from rapidfuzz import fuzz

from wordbank.utils.normalize import normalize_term

Verdict = Literal["correct", "near", "incorrect"]

NEAR_THRESHOLD = 85
# partial_ratio lets a fragment score 100 against a longer word; only trust it
# once the answer covers most of the expected text.
PARTIAL_MIN_COVERAGE = 0.8


def judge_answer(given: str, expected: str, threshold: int = NEAR_THRESHOLD) -> Verdict:
    """Grade a typed or picked answer; a near miss still counts as correct."""
    answer_norm = normalize_term(given)
    expected_norm = normalize_term(expected)
    if not answer_norm or not expected_norm:
        return "incorrect"

    if answer_norm == expected_norm:
        return "correct"

    score = fuzz.ratio(answer_norm, expected_norm)
    if len(answer_norm) >= len(expected_norm) * PARTIAL_MIN_COVERAGE:
        score = max(score, fuzz.partial_ratio(answer_norm, expected_norm))
    return "near" if score >= threshold else "incorrect"
