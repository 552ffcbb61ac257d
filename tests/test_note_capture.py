import pytest

from opentutor.core.exceptions import ValidationError
from opentutor.services.note_capture import NoteRecorder, midi_note_to_name


@pytest.mark.parametrize("number,name", [(60, "C4"), (63, "D#4"), (21, "A0"), (0, "C-1"), (127, "G9")])
def test_midi_note_to_name(number, name):
    assert midi_note_to_name(number) == name


def test_midi_note_out_of_range():
    with pytest.raises(ValidationError):
        midi_note_to_name(128)


def test_notes_outside_a_session_are_ignored():
    recorder = NoteRecorder()
    assert recorder.record("C4", 90, at=5.0) is None
    assert recorder.notes == []


def test_notes_keep_recording_order_and_offsets():
    recorder = NoteRecorder()
    recorder.start(now=100.0)
    recorder.record("E4", 80, at=101.5)
    recorder.record("C4", 70, at=100.5)

    notes = recorder.stop()
    assert [n.note for n in notes] == ["E4", "C4"]
    assert notes[0].time == pytest.approx(1.5)
    assert notes[1].time == pytest.approx(0.5)
    assert not recorder.active


def test_midi_messages_only_record_note_on():
    recorder = NoteRecorder()
    recorder.start(now=0.0)
    recorder.record_midi_message(0x90, 60, 100, at=0.25)   # note on
    recorder.record_midi_message(0x80, 60, 0, at=0.5)      # note off
    recorder.record_midi_message(0x91, 63, 0, at=0.75)     # note on, velocity 0
    recorder.record_midi_message(0x91, 63, 64, at=1.0)     # note on, channel 2

    notes = recorder.stop()
    assert [(n.note, n.velocity) for n in notes] == [("C4", 100), ("D#4", 64)]


def test_start_discards_previous_notes():
    recorder = NoteRecorder()
    recorder.start(now=0.0)
    recorder.record("C4", 90, at=1.0)
    recorder.start(now=10.0)
    assert recorder.notes == []
