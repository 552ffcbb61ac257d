"""
Practice session schemas.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from opentutor.models.enums import SessionType
from opentutor.schemas.achievement import AchievementResponse


class NoteEvent(BaseModel):
    """A single played note, relative to the start of the session."""
    note: str = Field(..., min_length=1, description="Pitch and octave, e.g. 'Eb4'")
    time: float = Field(..., ge=0, description="Seconds since the session started")
    velocity: Optional[int] = Field(None, ge=0, le=127, description="MIDI velocity (0-127)")
    duration: Optional[float] = Field(None, ge=0, description="Note duration in seconds")


class HarmonyAnalysis(BaseModel):
    """Structured fields recovered from the free-text AI feedback."""
    score: int = Field(70, ge=0, le=100)
    accuracy: int = Field(70, ge=0, le=100)
    blue_notes: List[str] = Field(default_factory=list)
    chords: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)


class CreateSessionRequest(BaseModel):
    """Request to start a practice session."""
    session_type: SessionType = Field(..., description="Practice mode, e.g. 'jazz_harmony'")


class PracticeSessionUpdate(BaseModel):
    """
    Partial update of a practice session.

    Only fields present in the request body are written; omitted fields keep
    their stored value. An explicit null is distinct from an omitted field.
    """
    duration_seconds: Optional[int] = Field(None, ge=0)
    score: Optional[int] = Field(None, ge=0, le=100)
    accuracy_percentage: Optional[int] = Field(None, ge=0, le=100)
    notes_played: Optional[List[NoteEvent]] = None
    mistakes_count: Optional[int] = Field(None, ge=0)
    ai_feedback: Optional[str] = None
    ai_suggestions: Optional[List[str]] = None
    harmony_analysis: Optional[HarmonyAnalysis] = None
    completed: Optional[bool] = None

    class Config:
        json_schema_extra = {
            "example": {
                "duration_seconds": 95,
                "score": 88,
                "accuracy_percentage": 92,
                "completed": True
            }
        }


class PracticeSessionResponse(BaseModel):
    id: int
    user_id: int
    session_type: str
    duration_seconds: int
    score: Optional[int] = None
    accuracy_percentage: Optional[int] = None
    notes_played: List[dict] = Field(default_factory=list)
    mistakes_count: int = 0
    ai_feedback: Optional[str] = None
    ai_suggestions: List[str] = Field(default_factory=list)
    harmony_analysis: Optional[dict] = None
    completed: bool
    created_at: datetime

    class Config:
        from_attributes = True


class SessionResponse(BaseModel):
    success: bool = True
    session: PracticeSessionResponse
    new_achievements: Optional[List[AchievementResponse]] = None


class SessionListResponse(BaseModel):
    success: bool = True
    sessions: List[PracticeSessionResponse]


class AnalyzeRequest(BaseModel):
    """Request to analyze recorded notes without touching a session."""
    notes: List[NoteEvent] = Field(..., description="Recorded notes in playing order")
    context: Optional[str] = Field(None, description="Free-text context passed to the model")
    session_type: Optional[SessionType] = None

    class Config:
        json_schema_extra = {
            "example": {
                "notes": [
                    {"note": "C4", "time": 0.0, "velocity": 90},
                    {"note": "Eb4", "time": 0.5, "velocity": 84}
                ],
                "context": "Practice session: blue_notes",
                "session_type": "blue_notes"
            }
        }


class AnalyzeResponse(BaseModel):
    success: bool = True
    feedback: str
    analysis: HarmonyAnalysis
    missing_fields: List[str] = Field(default_factory=list)


class CompleteSessionRequest(BaseModel):
    """Request to stop a session: analyze its notes and persist the result."""
    notes: List[NoteEvent] = Field(..., description="Recorded notes in playing order")
    duration_seconds: int = Field(..., ge=0)
    context: Optional[str] = None


class CompleteSessionResponse(SessionResponse):
    feedback: str
    analysis: HarmonyAnalysis
