"""Tests for Melody representation, extraction and one-hot encoding."""

import numpy as np
import pytest

from noteseq.core import (
    NoteSequence,
    TimeSignature,
    ConstructionError,
    MissingTimeSignatureError,
    PolyphonicMelodyError,
    QuantizationStatusError,
)
from noteseq.core.constants import MELODY_NO_EVENT as NO_EVENT, MELODY_NOTE_OFF as NOTE_OFF
from noteseq.representation import (
    Melody,
    MelodyConfig,
    MelodyExtractor,
    MelodyOneHotEncoding,
    extract_melody,
    set_length,
)

from helpers import add_notes


def quantized_sequence(steps_per_second=8, numerator=4, denominator=4):
    """At 120 qpm, 8 steps per second gives 4 steps per quarter."""
    ns = NoteSequence(is_quantized=True, steps_per_second=steps_per_second)
    ns.time_signatures.append(TimeSignature(0, numerator, denominator))
    return ns


class TestMelody:
    """Test Melody construction and editing."""

    def test_leading_note_offs_become_no_events(self):
        """Note-offs before the first note are replaced with NO_EVENT."""
        melody = Melody([NOTE_OFF, NOTE_OFF, 60, NOTE_OFF])
        assert melody.events == [NO_EVENT, NO_EVENT, 60, NOTE_OFF]

    @pytest.mark.parametrize("event", [-3, 128])
    def test_invalid_event(self, event):
        """Out-of-range events are rejected on construction and append."""
        with pytest.raises(ConstructionError):
            Melody([60, event])
        with pytest.raises(ConstructionError):
            Melody().append(event)

    def test_sequence_protocol(self):
        """Melody supports len, iteration and indexing."""
        melody = Melody([60, NO_EVENT, 62], start_step=16)
        assert len(melody) == 3
        assert list(melody) == [60, NO_EVENT, 62]
        assert melody[2] == 62
        assert melody.end_step == 19

    def test_set_length_extends_and_closes_note(self):
        """Extending a melody closes the note sounding at the old end."""
        melody = Melody([60, NO_EVENT, NO_EVENT])
        melody.set_length(5)
        assert melody.events == [60, NO_EVENT, NO_EVENT, NOTE_OFF, NO_EVENT]

    def test_set_length_after_note_off(self):
        """Extending after a note-off only pads with NO_EVENT."""
        melody = Melody([60, NOTE_OFF])
        set_length(melody, 4)
        assert melody.events == [60, NOTE_OFF, NO_EVENT, NO_EVENT]

    def test_set_length_truncates(self):
        """A shorter length drops trailing events."""
        melody = Melody([60, NO_EVENT, 62, NO_EVENT])
        melody.set_length(2)
        assert melody.events == [60, NO_EVENT]

    def test_last_on_off_events(self):
        """Indexes of the last note and its note-off are found."""
        assert Melody([60, NO_EVENT, NOTE_OFF, 62, NO_EVENT]).last_on_off_events() == (3, 5)
        assert Melody([60, NO_EVENT, NOTE_OFF]).last_on_off_events() == (0, 2)
        with pytest.raises(ValueError):
            Melody([NO_EVENT]).last_on_off_events()

    def test_transpose_folds_into_range(self):
        """Transposed notes are folded by octaves into the range."""
        melody = Melody([60, NO_EVENT, NOTE_OFF, 70])
        melody.transpose(5, min_note=48, max_note=72)
        assert melody.events == [65, NO_EVENT, NOTE_OFF, 63]

        melody = Melody([50])
        melody.transpose(-5, min_note=48, max_note=72)
        assert melody.events == [57]

    def test_note_histogram_and_major_key(self):
        """Pitch class counts pick the matching major key."""
        c_major = Melody([60, 62, 64, 65, 67, 69, 71, 72])
        histogram = c_major.note_histogram()
        assert histogram.shape == (12,)
        assert histogram[0] == 2
        assert histogram.sum() == 8
        assert c_major.major_key() == 0

        g_major = Melody([67, 69, 71, 72, 74, 76, 78])
        assert g_major.major_key() == 7

    def test_to_note_sequence(self):
        """A melody converts to notes at the default resolution."""
        melody = Melody([60, NO_EVENT, 62, NO_EVENT, NOTE_OFF], steps_per_quarter=4)
        ns = melody.to_note_sequence(velocity=90, instrument=2, program=5)

        assert not ns.is_quantized
        assert ns.tpq == 220
        assert [(n.pitch, n.start_time, n.end_time) for n in ns.notes] == [
            (60, 0, 110),
            (62, 110, 220),
        ]
        assert {(n.velocity, n.instrument, n.program) for n in ns.notes} == {(90, 2, 5)}
        assert ns.qpm == 120.0
        assert (ns.time_signatures[0].numerator, ns.time_signatures[0].denominator) == (4, 4)

    def test_to_note_sequence_with_steps_shorter_than_a_tick(self):
        """Notes at 440 steps per quarter are lengthened to one tick."""
        melody = Melody([60, 62], steps_per_quarter=440)
        ns = melody.to_note_sequence()

        assert [(n.pitch, n.start_time, n.end_time) for n in ns.notes] == [
            (60, 0, 1),
            (62, 0, 1),
        ]


class TestMelodyExtractor:
    """Test monophonic melody extraction."""

    def test_simple_melody(self):
        """Consecutive notes become a note-on followed by NO_EVENTs."""
        ns = quantized_sequence()
        add_notes(ns, 0, [(60, 100, 0, 4), (62, 100, 4, 8), (64, 100, 8, 12)])

        melody = extract_melody(ns)

        assert melody.events == [
            60, NO_EVENT, NO_EVENT, NO_EVENT,
            62, NO_EVENT, NO_EVENT, NO_EVENT,
            64, NO_EVENT, NO_EVENT, NO_EVENT,
        ]
        assert melody.start_step == 0
        assert melody.end_step == 12
        assert melody.steps_per_bar == 16

    def test_rests_between_notes(self):
        """A rest is marked by a note-off."""
        ns = quantized_sequence()
        add_notes(ns, 0, [(60, 100, 0, 2), (62, 100, 4, 6)])

        melody = extract_melody(ns)

        assert melody.events == [60, NO_EVENT, NOTE_OFF, NO_EVENT, 62, NO_EVENT]

    def test_start_aligned_to_bar(self):
        """The melody starts at the bar of its first note."""
        ns = quantized_sequence()
        add_notes(ns, 0, [(60, 100, 20, 24)])

        melody = extract_melody(ns)

        assert melody.start_step == 16
        assert melody.events == [NO_EVENT] * 4 + [60, NO_EVENT, NO_EVENT, NO_EVENT]

    def test_pad_end(self):
        """pad_end fills the melody up to a whole bar."""
        ns = quantized_sequence()
        add_notes(ns, 0, [(60, 100, 0, 4)])

        melody = extract_melody(ns, pad_end=True)

        assert len(melody) == 16
        assert melody.events[:6] == [60, NO_EVENT, NO_EVENT, NO_EVENT, NOTE_OFF, NO_EVENT]

    def test_stops_at_gap(self):
        """A rest of gap_bars or longer ends the melody."""
        ns = quantized_sequence()
        add_notes(ns, 0, [(60, 100, 0, 4), (62, 100, 24, 28)])

        melody = extract_melody(ns, gap_bars=1)

        assert melody.events == [60, NO_EVENT, NO_EVENT, NO_EVENT]

    def test_short_gap_is_kept(self):
        """A rest shorter than gap_bars stays in the melody."""
        ns = quantized_sequence()
        add_notes(ns, 0, [(60, 100, 0, 4), (62, 100, 18, 20)])

        melody = extract_melody(ns, gap_bars=1)

        assert melody.end_step == 20
        assert melody.events[18] == 62

    def test_polyphony_raises(self):
        """Simultaneous notes raise PolyphonicMelodyError."""
        ns = quantized_sequence()
        add_notes(ns, 0, [(60, 100, 0, 4), (64, 100, 0, 4), (67, 100, 4, 8)])

        with pytest.raises(PolyphonicMelodyError):
            extract_melody(ns)

    def test_ignore_polyphony_keeps_highest(self):
        """With ignore_polyphony the highest simultaneous note wins."""
        ns = quantized_sequence()
        add_notes(ns, 0, [(60, 100, 0, 4), (64, 100, 0, 4), (67, 100, 4, 8)])

        melody = extract_melody(ns, ignore_polyphony=True)

        assert melody.events == [64, NO_EVENT, NO_EVENT, NO_EVENT, 67, NO_EVENT, NO_EVENT, NO_EVENT]

    def test_instrument_and_search_start(self):
        """Only the chosen instrument after search_start_step is used."""
        ns = quantized_sequence()
        add_notes(ns, 0, [(60, 100, 0, 4), (62, 100, 32, 36)])
        add_notes(ns, 1, [(72, 100, 0, 4)])

        config = MelodyConfig(instrument=0, search_start_step=8)
        melody = MelodyExtractor(config).extract(ns)

        assert melody.start_step == 32
        assert melody.events == [62, NO_EVENT, NO_EVENT, NO_EVENT]

    def test_no_notes(self):
        """An empty sequence yields no melody."""
        assert extract_melody(quantized_sequence()) is None

    def test_three_four_time(self):
        """Bars follow the 3/4 time signature."""
        ns = quantized_sequence(numerator=3, denominator=4)
        add_notes(ns, 0, [(60, 100, 14, 16)])

        melody = extract_melody(ns)

        assert melody.steps_per_bar == 12
        assert melody.start_step == 12

    def test_requires_quantized(self):
        """Unquantized sequences are rejected."""
        ns = NoteSequence()
        ns.time_signatures.append(TimeSignature(0, 4, 4))
        with pytest.raises(QuantizationStatusError):
            extract_melody(ns)

    def test_requires_time_signature(self):
        """A time signature is required."""
        ns = NoteSequence(is_quantized=True, steps_per_second=8)
        with pytest.raises(MissingTimeSignatureError):
            extract_melody(ns)

    def test_non_integral_steps_per_bar(self):
        """A bar must hold a whole number of steps."""
        ns = quantized_sequence(steps_per_second=5, numerator=3, denominator=8)
        add_notes(ns, 0, [(60, 100, 0, 4)])
        with pytest.raises(ConstructionError):
            extract_melody(ns)

    def test_config_overrides(self):
        """Keyword overrides replace config fields."""
        extractor = MelodyExtractor(MelodyConfig(gap_bars=2.0), pad_end=True)
        assert extractor.config.gap_bars == 2.0
        assert extractor.config.pad_end


class TestMelodyOneHotEncoding:
    """Test Melody event one-hot indices."""

    @pytest.mark.parametrize(
        "event,index",
        [
            (NO_EVENT, 0),
            (NOTE_OFF, 1),
            (43, 2),
            (80, 39),
            (79, 38),
            (50, 9),
        ],
    )
    def test_encode_decode(self, event, index):
        """Melody events map to and from their indices."""
        encoding = MelodyOneHotEncoding(43, 81)
        assert encoding.encode_event(event) == index
        assert encoding.decode_event(index) == event

    @pytest.mark.parametrize("bounds", [(0, 129), (-1, 100), (50, 25), (10, 10)])
    def test_invalid_range(self, bounds):
        """Pitch ranges outside MIDI or empty are rejected."""
        with pytest.raises(ConstructionError):
            MelodyOneHotEncoding(*bounds)

    def test_labels(self):
        """Labels cover the two special events and the pitch range."""
        assert MelodyOneHotEncoding(0, 128).labels == range(130)
        assert MelodyOneHotEncoding(43, 81).labels == range(40)
        assert MelodyOneHotEncoding(0, 1).labels == range(3)

    @pytest.mark.parametrize("event", [42, 81, -3])
    def test_out_of_vocabulary(self, event):
        """Pitches outside the range cannot be encoded."""
        with pytest.raises(ConstructionError):
            MelodyOneHotEncoding(43, 81).encode_event(event)

    def test_default_event(self):
        """The padding event is NO_EVENT."""
        assert MelodyOneHotEncoding(43, 81).default_event == NO_EVENT

    def test_encode_melody(self):
        """A whole melody encodes to indices and one-hot vectors."""
        encoding = MelodyOneHotEncoding(48, 84)
        melody = Melody([60, NO_EVENT, NOTE_OFF, 72])

        indices = encoding.encode_events(melody)
        assert indices.tolist() == [14, 0, 1, 26]
        assert encoding.decode_events(indices) == melody.events

        one_hot = encoding.encode_one_hot(60)
        assert one_hot.shape == (encoding.num_classes,)
        assert one_hot.sum() == 1.0
        assert int(np.argmax(one_hot)) == 14
