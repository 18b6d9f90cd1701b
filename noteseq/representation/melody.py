"""Monophonic melody representation and extraction.

A Melody is a flat list of integer events, one per quantized step:

- 0 to 127: a note-on of that MIDI pitch. The note is held through the
  following NO_EVENT steps.
- MELODY_NOTE_OFF (-1): ends the sounding note; silence follows.
- MELODY_NO_EVENT (-2): no change, the previous state continues.

Extraction aligns the melody to the bar containing its first note, so
`start_step` is always a multiple of `steps_per_bar`.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

import numpy as np

from ..core import (
    NoteSequence,
    SeqNote,
    Tempo,
    TimeSignature,
    ConstructionError,
    MissingTimeSignatureError,
    NoteOrderError,
    PolyphonicMelodyError,
)
from ..core.constants import (
    DEFAULT_PROGRAM,
    DEFAULT_QPM,
    DEFAULT_STEPS_PER_BAR,
    DEFAULT_STEPS_PER_QUARTER,
    DEFAULT_TPQ,
    MAX_MELODY_EVENT,
    MELODY_NO_EVENT,
    MELODY_NOTE_OFF,
    MIN_MELODY_EVENT,
    MIN_MIDI_PITCH,
    NOTES_PER_OCTAVE,
)
from .base import EventSequence

logger = logging.getLogger(__name__)

# Pitch classes of the C major scale; rotated to get every major key.
_MAJOR_SCALE = np.array([1, 0, 1, 0, 1, 1, 0, 1, 0, 1, 0, 1])


def _check_event(event: int) -> int:
    if not MIN_MELODY_EVENT <= event <= MAX_MELODY_EVENT:
        raise ConstructionError(f"Melody event is out of range: {event}")
    return event


class Melody(EventSequence):
    """A quantized monophonic melody.

    Attributes:
        events: Melody events, see module docstring
        steps_per_bar: Number of steps in a bar
        steps_per_quarter: Number of steps in a quarter note
        start_step: Step of the source sequence where the melody begins
    """

    def __init__(
        self,
        events: Optional[Iterable[int]] = None,
        start_step: int = 0,
        steps_per_bar: int = DEFAULT_STEPS_PER_BAR,
        steps_per_quarter: float = DEFAULT_STEPS_PER_QUARTER,
    ):
        self.events: List[int] = [_check_event(event) for event in (events or [])]
        self.start_step = start_step
        self.steps_per_bar = steps_per_bar
        self.steps_per_quarter = steps_per_quarter

        # A melody cannot begin by ending a note.
        for i, event in enumerate(self.events):
            if event not in (MELODY_NO_EVENT, MELODY_NOTE_OFF):
                break
            self.events[i] = MELODY_NO_EVENT

    @property
    def end_step(self) -> int:
        return self.start_step + len(self.events)

    def __eq__(self, other):
        if not isinstance(other, Melody):
            return False
        return (
            self.events == other.events
            and self.steps_per_bar == other.steps_per_bar
            and self.start_step == other.start_step
        )

    def __repr__(self):
        return (
            f"Melody(start_step={self.start_step}, end_step={self.end_step}, "
            f"steps_per_bar={self.steps_per_bar}, events={self.events})"
        )

    def append(self, event: int) -> None:
        self.events.append(_check_event(event))

    def extend(self, events: Iterable[int]) -> None:
        self.events.extend(_check_event(event) for event in events)

    def set_length(self, steps: int) -> None:
        """
        Pad with NO_EVENT or truncate so the melody lasts `steps` steps.

        When the melody grows, a note still sounding at the old end is
        closed there with a NOTE_OFF.
        """
        old_len = len(self.events)
        if steps > old_len:
            self.events.extend([MELODY_NO_EVENT] * (steps - old_len))
            for i in reversed(range(old_len)):
                if self.events[i] == MELODY_NOTE_OFF:
                    break
                if self.events[i] != MELODY_NO_EVENT:
                    self.events[old_len] = MELODY_NOTE_OFF
                    break
        else:
            del self.events[steps:]

    def add_note(self, pitch: int, start_step: int, end_step: int) -> None:
        """
        Write a note over the events, relative to `start_step` of the melody.

        Everything after `end_step` is deleted, and the events are padded so
        that the last one is the note's NOTE_OFF.
        """
        if start_step >= end_step:
            raise ConstructionError(
                f"Start step does not precede end step: start={start_step}, end={end_step}"
            )

        if len(self.events) < end_step + 1:
            self.events.extend([MELODY_NO_EVENT] * (end_step + 1 - len(self.events)))
        else:
            del self.events[end_step + 1:]

        self.events[start_step] = pitch
        self.events[end_step] = MELODY_NOTE_OFF
        for i in range(start_step + 1, end_step):
            self.events[i] = MELODY_NO_EVENT

    def last_on_off_events(self) -> Tuple[int, int]:
        """
        Indexes of the most recent pitch event and the NOTE_OFF that ends it.

        The NOTE_OFF index is `len(self)` when the last note is still sounding.

        Raises:
            ValueError: If the melody contains no pitch events
        """
        last_off = len(self.events)
        for i in range(len(self.events) - 1, -1, -1):
            if self.events[i] == MELODY_NOTE_OFF:
                last_off = i
            if self.events[i] >= MIN_MIDI_PITCH:
                return i, last_off
        raise ValueError("No pitch events in the melody")

    def transpose(self, amount: int, min_note: int = 0, max_note: int = 128) -> None:
        """
        Transpose the melody in place, folding notes into [min_note, max_note).

        Notes that leave the range are moved by whole octaves back inside it.
        """
        for i, event in enumerate(self.events):
            if event < MIN_MIDI_PITCH:
                continue
            pitch = event + amount
            if pitch < min_note:
                pitch = min_note + (pitch - min_note) % NOTES_PER_OCTAVE
            elif pitch >= max_note:
                pitch = max_note - NOTES_PER_OCTAVE + (pitch - max_note) % NOTES_PER_OCTAVE
            self.events[i] = pitch

    def note_histogram(self) -> np.ndarray:
        """Count of note-ons per pitch class (C at index 0)."""
        events = np.array(self.events, dtype=int)
        return np.bincount(
            events[events >= MIN_MIDI_PITCH] % NOTES_PER_OCTAVE,
            minlength=NOTES_PER_OCTAVE,
        )

    def major_key(self) -> int:
        """Most likely major key, 0 = C major through 11 = B major.

        Ties go to the lowest key index.
        """
        histogram = self.note_histogram()
        scores = [
            int(np.dot(histogram, np.roll(_MAJOR_SCALE, key)))
            for key in range(NOTES_PER_OCTAVE)
        ]
        return int(np.argmax(scores))

    def to_note_sequence(
        self,
        velocity: int = 100,
        instrument: int = 0,
        program: int = DEFAULT_PROGRAM,
        qpm: float = DEFAULT_QPM,
    ) -> NoteSequence:
        """
        Convert the melody to an unquantized NoteSequence.

        Steps are placed at `DEFAULT_TPQ / steps_per_quarter` ticks each,
        counting from the melody's `start_step`. A note shorter than one
        tick is lengthened to one tick.

        Args:
            velocity: Velocity of every note
            instrument: Instrument number of every note
            program: Program of every note
            qpm: Tempo of the sequence

        Returns:
            A NoteSequence with tick times
        """
        ticks_per_step = DEFAULT_TPQ / self.steps_per_quarter
        ns = NoteSequence(tpq=DEFAULT_TPQ)
        ns.tempos.append(Tempo(0, qpm))
        quarters_per_bar = self.steps_per_bar / self.steps_per_quarter
        if quarters_per_bar == int(quarters_per_bar):
            ns.time_signatures.append(TimeSignature(0, int(quarters_per_bar), 4))

        def ticks(step: int) -> int:
            return int(round((self.start_step + step) * ticks_per_step))

        pitch, start = None, 0
        for step, event in enumerate(self.events + [MELODY_NOTE_OFF]):
            if event == MELODY_NO_EVENT:
                continue
            if pitch is not None:
                start_time = ticks(start)
                end_time = max(ticks(step), start_time + 1)
                ns.notes.append(
                    SeqNote(pitch, velocity, start_time, end_time, instrument, program)
                )
                pitch = None
            if event >= MIN_MIDI_PITCH:
                pitch, start = event, step

        return ns


@dataclass
class MelodyConfig:
    """Configuration for melody extraction.

    Attributes:
        search_start_step: Ignore notes starting before this step (default: 0)
        instrument: Only consider this instrument, None for all (default: None)
        gap_bars: Stop when a silence of this many bars follows a note (default: 1.0)
        ignore_polyphony: Keep the highest note when several start on the
            same step instead of raising (default: False)
        pad_end: Pad the melody with NO_EVENT up to the next bar (default: False)
    """

    search_start_step: int = 0
    instrument: Optional[int] = None
    gap_bars: float = 1.0
    ignore_polyphony: bool = False
    pad_end: bool = False


class MelodyExtractor:
    """Extract a monophonic Melody from a quantized NoteSequence."""

    def __init__(self, config: Optional[MelodyConfig] = None, **overrides):
        """
        Initialize MelodyExtractor.

        Args:
            config: Optional MelodyConfig
            **overrides: MelodyConfig fields to override
        """
        self.config = config or MelodyConfig()
        if overrides:
            self.config = MelodyConfig(**{**self.config.__dict__, **overrides})

    @staticmethod
    def steps_per_bar(ns: NoteSequence) -> int:
        """
        Steps per bar from the sequence's first time signature.

        Raises:
            MissingTimeSignatureError: If the sequence has no time signature
            ConstructionError: If a bar is not a whole number of steps
        """
        if not ns.time_signatures:
            raise MissingTimeSignatureError("The NoteSequence has no time signature.")
        ts = ns.time_signatures[0]
        steps = ns.steps_per_quarter * ts.numerator * 4 / ts.denominator
        if steps % 1 != 0:
            raise ConstructionError(
                f"There are {steps} steps per bar. "
                f"Time signature: {ts.numerator}/{ts.denominator}"
            )
        return int(steps)

    def extract(self, ns: NoteSequence) -> Optional[Melody]:
        """
        Extract the first melody at or after `search_start_step`.

        Notes are visited by start step, highest pitch first among notes
        starting together. Extraction ends before a note that follows a
        silence of `gap_bars` bars or more.

        Args:
            ns: Quantized sequence with a time signature

        Returns:
            The melody, or None if no note qualifies

        Raises:
            QuantizationStatusError: If the sequence is not quantized
            MissingTimeSignatureError: If the sequence has no time signature
            PolyphonicMelodyError: If two notes start on the same step and
                polyphony is not ignored
        """
        ns.assert_quantized()
        cfg = self.config
        steps_per_bar = self.steps_per_bar(ns)
        melody = Melody(steps_per_bar=steps_per_bar, steps_per_quarter=ns.steps_per_quarter)

        notes = sorted(
            (
                note
                for note in ns.notes
                if (cfg.instrument is None or note.instrument == cfg.instrument)
                and note.start_time >= cfg.search_start_step
                and note.velocity > 0
            ),
            key=lambda note: (note.start_time, -note.pitch),
        )

        offset = None
        for note in notes:
            if offset is None:
                offset = note.start_time - note.start_time % steps_per_bar

            start_index = note.start_time - offset
            end_index = note.end_time - offset

            if not melody.events:
                melody.add_note(note.pitch, start_index, end_index)
                continue

            last_on, last_off = melody.last_on_off_events()
            on_distance = start_index - last_on
            off_distance = start_index - last_off
            if on_distance == 0:
                if cfg.ignore_polyphony:
                    # Sorted by pitch descending, so the highest note is already placed.
                    continue
                raise PolyphonicMelodyError(
                    f"Multiple notes start at step {note.start_time}"
                )
            if on_distance < 0:
                raise NoteOrderError("Unexpected note. Not in ascending order.")

            if off_distance >= cfg.gap_bars * steps_per_bar:
                logger.debug("Melody ended by a %d step gap", off_distance)
                break

            melody.add_note(note.pitch, start_index, end_index)

        if not melody.events:
            return None

        melody.start_step = offset

        # A melody ends on its last note, not on a dangling NOTE_OFF.
        if melody.events[-1] == MELODY_NOTE_OFF:
            del melody.events[-1]

        length = len(melody)
        if cfg.pad_end:
            length += -length % steps_per_bar
        melody.set_length(length)

        return melody


def extract_melody(
    ns: NoteSequence, config: Optional[MelodyConfig] = None, **overrides
) -> Optional[Melody]:
    """Extract a Melody from a quantized NoteSequence. See `MelodyExtractor.extract`."""
    return MelodyExtractor(config, **overrides).extract(ns)
