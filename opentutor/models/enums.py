"""
Model enums.
"""
from enum import Enum


class SkillLevel(str, Enum):
    """Self-reported skill level of a user."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class SessionType(str, Enum):
    """Practice mode selected when starting a session."""
    JAZZ_HARMONY = "jazz_harmony"
    SIGHT_READING = "sight_reading"
    BLUE_NOTES = "blue_notes"
    CHORD_PROGRESSIONS = "chord_progressions"
    FUNCTIONAL_HARMONY = "functional_harmony"
    FREE_PRACTICE = "free_practice"


class SkillArea(str, Enum):
    """Competency dimension tracked with its own progress record."""
    BLUE_NOTES = "blue_notes"
    FUNCTIONAL_HARMONY = "functional_harmony"
    CHORD_PROGRESSIONS = "chord_progressions"
    SIGHT_READING = "sight_reading"
    IMPROVISATION = "improvisation"
    RHYTHM = "rhythm"


class AchievementCategory(str, Enum):
    PRACTICE = "practice"
    MASTERY = "mastery"
    STREAK = "streak"
    SPECIAL = "special"


class RequirementType(str, Enum):
    """Kinds of achievement requirement predicates."""
    SESSIONS = "sessions"
    STREAK = "streak"
    SCORE = "score"
