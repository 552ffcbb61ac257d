"""
Note capture for an active practice window.

Input surfaces (the on-screen keyboard or a MIDI controller) report notes as
they are played; the recorder keeps them in playing order, stamped with the
offset from the start of the session.
"""
import logging
from typing import List, Optional

from opentutor.core.exceptions import ValidationError
from opentutor.schemas.practice import NoteEvent

logger = logging.getLogger(__name__)

NOTE_NAMES = ['C', 'C#', 'D', 'D#', 'E', 'F', 'F#', 'G', 'G#', 'A', 'A#', 'B']

MIDI_NOTE_ON = 0x90


def midi_note_to_name(midi_note: int) -> str:
    """
    Convert a MIDI note number to a note label.

    Example: 60 -> "C4", 63 -> "D#4", 21 -> "A0".

    Raises:
        ValidationError: If the number is outside the MIDI range 0-127
    """
    if not 0 <= midi_note <= 127:
        raise ValidationError(f"MIDI note number must be between 0 and 127, got {midi_note}")
    octave = midi_note // 12 - 1
    return f"{NOTE_NAMES[midi_note % 12]}{octave}"


class NoteRecorder:
    """Collects note events between start() and stop()."""

    def __init__(self):
        self._started_at: Optional[float] = None
        self._notes: List[NoteEvent] = []

    @property
    def active(self) -> bool:
        return self._started_at is not None

    @property
    def notes(self) -> List[NoteEvent]:
        return list(self._notes)

    def start(self, now: float) -> None:
        """Open a new capture window; any previous notes are discarded."""
        self._started_at = now
        self._notes = []

    def record(self, note: str, velocity: Optional[int], at: float) -> Optional[NoteEvent]:
        """
        Append a note played at time `at`.

        Notes played while no session is active are ignored and None is
        returned. Offsets are clamped at zero so a late-arriving event never
        produces a negative time.
        """
        if self._started_at is None:
            return None
        event = NoteEvent(note=note, time=max(0.0, at - self._started_at), velocity=velocity)
        self._notes.append(event)
        return event

    def record_midi_message(self, status: int, data1: int, data2: int, at: float) -> Optional[NoteEvent]:
        """
        Record a raw MIDI message.

        Only note-on messages with a non-zero velocity are notes; note-off
        and a note-on with velocity 0 (running-status note-off) are skipped.
        """
        if status & 0xF0 != MIDI_NOTE_ON or data2 == 0:
            return None
        return self.record(midi_note_to_name(data1), data2, at)

    def stop(self) -> List[NoteEvent]:
        """Close the capture window and return the notes in playing order."""
        notes = list(self._notes)
        logger.debug(f"Capture window closed with {len(notes)} notes")
        self._started_at = None
        return notes

    def clear(self) -> None:
        self._notes = []
