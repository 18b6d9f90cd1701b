"""Tests for the core NoteSequence types and building sequences from raw tracks."""

import pytest

from noteseq.core import (
    NoteSequence,
    SeqNote,
    Tempo,
    ConstructionError,
    MultipleTempoError,
    QuantizationStatusError,
)
from noteseq.input import (
    NoteOnEvent,
    NoteOffEvent,
    ProgramChangeEvent,
    ControlChangeEvent,
    PitchBendEvent,
    TimeSignatureEvent,
    KeySignatureEvent,
    SetTempoEvent,
    build_note_sequence,
    to_absolute_time,
    to_relative_time,
    ms_per_tick,
    seconds_to_ticks,
)

from helpers import add_notes, note_tuples


class TestSeqNote:
    """Test note construction and derived values."""

    def test_valid_note(self):
        """A note reports its duration and pitch name."""
        note = SeqNote(pitch=60, velocity=100, start_time=0, end_time=220)
        assert note.duration == 220
        assert note.pitch_name == "C4"
        assert note.pitch_class == 0

    @pytest.mark.parametrize("pitch", [-1, 128])
    def test_invalid_pitch(self, pitch):
        """Pitches outside 0-127 are rejected."""
        with pytest.raises(ConstructionError):
            SeqNote(pitch, 100, 0, 10)

    @pytest.mark.parametrize("velocity", [0, 128])
    def test_invalid_velocity(self, velocity):
        """Velocities outside 1-127 are rejected."""
        with pytest.raises(ConstructionError):
            SeqNote(60, velocity, 0, 10)

    @pytest.mark.parametrize("start,end", [(10, 10), (10, 5)])
    def test_note_must_end_after_start(self, start, end):
        """A note must have positive length."""
        with pytest.raises(ConstructionError):
            SeqNote(60, 100, start, end)

    def test_construction_error_is_value_error(self):
        """ConstructionError can be caught as ValueError."""
        with pytest.raises(ValueError):
            SeqNote(200, 100, 0, 10)

    def test_tempo_must_be_positive(self):
        """A tempo of 0 qpm is rejected."""
        with pytest.raises(ConstructionError):
            Tempo(0, 0.0)


class TestNoteSequence:
    """Test NoteSequence validation and helpers."""

    def test_defaults(self):
        """A new sequence is empty, unquantized and at 220 tpq."""
        ns = NoteSequence()
        assert ns.tpq == 220
        assert not ns.is_quantized
        assert ns.steps_per_second is None
        assert ns.total_time == 0
        assert ns.qpm == 120.0

    def test_invalid_tpq(self):
        """Ticks per quarter must be positive."""
        with pytest.raises(ConstructionError):
            NoteSequence(tpq=0)

    def test_quantized_requires_steps_per_second(self):
        """Quantized sequences need a positive step rate."""
        with pytest.raises(ConstructionError):
            NoteSequence(is_quantized=True)
        with pytest.raises(ConstructionError):
            NoteSequence(is_quantized=True, steps_per_second=0)

    def test_unquantized_rejects_steps_per_second(self):
        """Unquantized sequences cannot have a step rate."""
        with pytest.raises(ConstructionError):
            NoteSequence(steps_per_second=100)

    def test_total_time_follows_notes(self):
        """total_time tracks the latest note end."""
        ns = NoteSequence()
        add_notes(ns, 0, [(60, 100, 0, 220), (64, 100, 100, 700)])
        assert ns.total_time == 700

        ns.notes[1].end_time = 900
        assert ns.total_time == 900

        ns.notes.pop()
        assert ns.total_time == 220

    def test_instruments_and_notes_for(self):
        """Instruments are listed in order of first appearance."""
        ns = NoteSequence()
        add_notes(ns, 2, [(60, 100, 0, 10)])
        add_notes(ns, 0, [(62, 100, 0, 10)])
        add_notes(ns, 2, [(64, 100, 10, 20)])

        assert ns.instruments == [2, 0]
        assert [n.pitch for n in ns.notes_for(2)] == [60, 64]
        assert ns.notes_for(5) == []

    def test_single_tempo(self):
        """Repeated equal tempos count as one."""
        ns = NoteSequence()
        ns.tempos = [Tempo(0, 90.0), Tempo(440, 90.0)]
        assert ns.qpm == 90.0

    def test_multiple_tempos(self):
        """Differing tempos raise MultipleTempoError."""
        ns = NoteSequence()
        ns.tempos = [Tempo(0, 120.0), Tempo(440, 60.0)]
        with pytest.raises(MultipleTempoError):
            ns.qpm

    def test_steps_per_quarter(self):
        """steps_per_quarter needs a quantized sequence."""
        ns = NoteSequence(is_quantized=True, steps_per_second=8)
        assert ns.steps_per_quarter == 4.0

        with pytest.raises(QuantizationStatusError):
            NoteSequence().steps_per_quarter

    def test_quantization_assertions(self):
        """The quantization assertions match the sequence state."""
        ns = NoteSequence()
        ns.assert_unquantized()
        with pytest.raises(QuantizationStatusError):
            ns.assert_quantized()

    def test_copy_is_independent(self):
        """Changing a copy leaves the original alone."""
        ns = NoteSequence()
        add_notes(ns, 0, [(60, 100, 0, 220)])
        other = ns.copy()

        other.notes[0].pitch = 72
        other.notes.append(SeqNote(64, 100, 0, 10))

        assert note_tuples(ns, 0) == [(60, 100, 0, 220)]

    def test_summary(self):
        """The summary mentions resolution and note count."""
        ns = NoteSequence()
        add_notes(ns, 0, [(60, 100, 0, 220)])
        summary = ns.summary()
        assert "tpq=220" in summary
        assert "1 Notes" in summary


class TestTimeConversion:
    """Test raw track time helpers."""

    def test_absolute_relative_round_trip(self):
        """Converting to absolute and back restores delta times."""
        track = [
            NoteOnEvent(10, 0, 60, 100),
            NoteOffEvent(20, 0, 60),
            NoteOnEvent(0, 0, 62, 100),
        ]
        absolute = to_absolute_time(track)
        assert [e.time for e in absolute] == [10, 30, 30]
        # Input is not modified
        assert [e.time for e in track] == [10, 20, 0]

        assert [e.time for e in to_relative_time(absolute)] == [10, 20, 0]

    def test_ms_per_tick(self):
        """Milliseconds per tick follow tpq and tempo."""
        assert ms_per_tick(220, 120.0) == pytest.approx(60_000 / (120 * 220))

    def test_seconds_to_ticks(self):
        """Seconds convert to ticks at the given tempo."""
        assert seconds_to_ticks(1, 220, 120.0) == 440
        assert seconds_to_ticks(0.5, 480, 60.0) == 240

    def test_set_tempo_qpm(self):
        """Microseconds per quarter convert to qpm."""
        assert SetTempoEvent(0, 500_000).qpm == 120.0


class TestBuildNoteSequence:
    """Test building a NoteSequence from raw tracks."""

    def test_meta_events_from_all_tracks(self):
        """Meta events are collected from every track."""
        tracks = [
            [SetTempoEvent(0, 500_000), TimeSignatureEvent(0, 3, 4)],
            [
                KeySignatureEvent(0, "G"),
                NoteOnEvent(0, 0, 60, 100),
                NoteOffEvent(220, 0, 60),
                SetTempoEvent(440, 1_000_000),
            ],
        ]
        ns = build_note_sequence(tracks, tpq=220)

        assert ns.tpq == 220
        assert [(t.time, t.qpm) for t in ns.tempos] == [(0, 120.0), (440, 60.0)]
        assert [(t.numerator, t.denominator) for t in ns.time_signatures] == [(3, 4)]
        assert [k.key for k in ns.key_signatures] == ["G"]

    def test_instruments_are_numbered_by_first_appearance(self):
        """Instrument numbers follow the first note of each instrument."""
        tracks = [
            [
                ProgramChangeEvent(0, 1, 40),
                NoteOnEvent(0, 1, 72, 90),
                NoteOnEvent(0, 0, 60, 100),
                NoteOffEvent(100, 1, 72),
                NoteOffEvent(200, 0, 60),
            ],
        ]
        ns = build_note_sequence(tracks, tpq=220)

        assert ns.instruments == [0, 1]
        assert note_tuples(ns, 0) == [(72, 90, 0, 100)]
        assert ns.notes_for(0)[0].program == 40
        assert note_tuples(ns, 1) == [(60, 100, 0, 200)]
        assert ns.notes_for(1)[0].program == 0

    def test_controller_events_are_tagged(self):
        """Controllers carry their instrument and program."""
        tracks = [
            [
                ProgramChangeEvent(0, 0, 5),
                ControlChangeEvent(10, 0, 64, 127),
                PitchBendEvent(20, 0, 2048),
                NoteOnEvent(0, 0, 60, 100),
                NoteOffEvent(30, 0, 60),
            ],
        ]
        ns = build_note_sequence(tracks, tpq=220)

        cc = ns.control_changes[0]
        assert (cc.time, cc.controller, cc.value, cc.instrument, cc.program) == (10, 64, 127, 0, 5)
        pb = ns.pitch_bends[0]
        assert (pb.time, pb.bend, pb.instrument, pb.program) == (20, 2048, 0, 5)

    def test_relative_tracks(self):
        """Delta-time tracks are converted before building."""
        tracks = [[NoteOnEvent(10, 0, 60, 100), NoteOffEvent(100, 0, 60)]]
        ns = build_note_sequence(tracks, tpq=220, relative=True)
        assert note_tuples(ns, 0) == [(60, 100, 10, 110)]
