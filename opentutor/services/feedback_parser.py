"""
Recover structured fields from free-text harmony feedback.

The model is asked to end its reply with tagged lines such as ``SCORE: 85``,
but its wording is not guaranteed. Parsing is best-effort: any tag that is
missing falls back to a default and is reported in the list of missing
fields, and no input makes the parser raise.
"""
import logging
import re
from typing import List, Optional, Sequence, Tuple

from opentutor.schemas.practice import HarmonyAnalysis, NoteEvent

logger = logging.getLogger(__name__)

DEFAULT_SCORE = 70
DEFAULT_ACCURACY = 70

SCORE_PATTERN = re.compile(r"SCORE:\s*(\d+)", re.IGNORECASE)
ACCURACY_PATTERN = re.compile(r"ACCURACY:\s*(\d+)", re.IGNORECASE)
BLUE_NOTES_PATTERN = re.compile(r"BLUE_NOTES:\s*([^\n]+)", re.IGNORECASE)
CHORDS_PATTERN = re.compile(r"CHORDS:\s*([^\n]+)", re.IGNORECASE)
SUGGESTION_PATTERN = re.compile(r"SUGGESTION:\s*([^\n]+)", re.IGNORECASE)


def _parse_percentage(pattern: re.Pattern, feedback: str) -> Optional[int]:
    match = pattern.search(feedback)
    if not match:
        return None
    # Only digits are captured, so int() cannot fail; clamp to 0-100
    return min(100, int(match.group(1)))


def _parse_list(pattern: re.Pattern, feedback: str) -> Optional[List[str]]:
    """
    Split a tagged comma-separated line.

    Returns None when the tag is absent and [] when the model wrote "none".
    """
    match = pattern.search(feedback)
    if not match:
        return None
    captured = match.group(1)
    if "none" in captured.lower():
        return []
    items = [item.strip() for item in captured.split(",")]
    return [item for item in items if item and item.lower() != "none"]


def parse_harmony_feedback(
    feedback: str,
    notes: Optional[Sequence[NoteEvent]] = None
) -> Tuple[HarmonyAnalysis, List[str]]:
    """
    Parse AI feedback into a HarmonyAnalysis.

    Args:
        feedback: Free-text reply from the feedback generator
        notes: The notes that were sent for analysis, used to flag blue notes
               the student never played

    Returns:
        Tuple of (analysis, names of the fields that were not found)
    """
    feedback = feedback or ""
    missing: List[str] = []

    score = _parse_percentage(SCORE_PATTERN, feedback)
    if score is None:
        missing.append("score")
        score = DEFAULT_SCORE

    accuracy = _parse_percentage(ACCURACY_PATTERN, feedback)
    if accuracy is None:
        missing.append("accuracy")
        accuracy = DEFAULT_ACCURACY

    blue_notes = _parse_list(BLUE_NOTES_PATTERN, feedback)
    if blue_notes is None:
        missing.append("blue_notes")
        blue_notes = []

    chords = _parse_list(CHORDS_PATTERN, feedback)
    if chords is None:
        missing.append("chords")
        chords = []

    suggestions: List[str] = []
    suggestion_match = SUGGESTION_PATTERN.search(feedback)
    if suggestion_match and suggestion_match.group(1).strip():
        suggestions = [suggestion_match.group(1).strip()]
    else:
        missing.append("suggestion")

    if notes and blue_notes:
        played = {note.note for note in notes}
        unplayed = [note for note in blue_notes if note not in played]
        if unplayed:
            logger.debug(f"Feedback names blue notes that were not played: {unplayed}")

    if missing:
        logger.info(f"Feedback missing tagged fields, using defaults: {missing}")

    analysis = HarmonyAnalysis(
        score=score,
        accuracy=accuracy,
        blue_notes=blue_notes,
        chords=chords,
        suggestions=suggestions,
    )
    return analysis, missing
