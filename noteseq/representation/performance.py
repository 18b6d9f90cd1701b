"""Performance representation - polyphonic music as a stream of events.

The event vocabulary follows Oore et al., "This Time with Feeling":
NOTE_ON and NOTE_OFF for each of the 128 MIDI pitches, TIME_SHIFT events
of 1 to `max_shift_steps` steps, and optional VELOCITY events that set the
velocity bin of the following note-ons.
"""

import copy
import logging
import math
from collections import defaultdict, deque
from dataclasses import dataclass
from enum import IntEnum
from typing import Deque, Dict, Iterable, List, Optional, Tuple, Union

from ..core import (
    NoteSequence,
    SeqNote,
    Tempo,
    TimeSignature,
    ConstructionError,
    UnknownEventError,
)
from ..core.constants import (
    DEFAULT_MAX_SHIFT_STEPS,
    DEFAULT_PROGRAM,
    DEFAULT_QPM,
    DEFAULT_STEPS_PER_SECOND,
    DEFAULT_TIME_SIGNATURE,
    DEFAULT_TPQ,
    MAX_MIDI_PITCH,
    MAX_MIDI_VELOCITY,
    MIN_MIDI_PITCH,
    MIN_MIDI_VELOCITY,
)
from ..input.events import seconds_to_ticks
from .base import EventSequence

logger = logging.getLogger(__name__)


class PerformanceEventType(IntEnum):
    NOTE_ON = 1
    NOTE_OFF = 2
    TIME_SHIFT = 3
    VELOCITY = 4


NOTE_ON = PerformanceEventType.NOTE_ON
NOTE_OFF = PerformanceEventType.NOTE_OFF
TIME_SHIFT = PerformanceEventType.TIME_SHIFT
VELOCITY = PerformanceEventType.VELOCITY


@dataclass(frozen=True)
class PerformanceEvent:
    """A single performance event.

    Attributes:
        event_type: One of NOTE_ON, NOTE_OFF, TIME_SHIFT, VELOCITY
        event_value: Pitch for note events, number of steps for
            TIME_SHIFT, velocity bin for VELOCITY
    """

    event_type: PerformanceEventType
    event_value: int

    def __post_init__(self):
        try:
            event_type = PerformanceEventType(self.event_type)
        except ValueError:
            raise ConstructionError(
                f"Invalid performance event type: {self.event_type}"
            ) from None
        object.__setattr__(self, "event_type", event_type)

        value = self.event_value
        if event_type in (NOTE_ON, NOTE_OFF):
            if not MIN_MIDI_PITCH <= value <= MAX_MIDI_PITCH:
                raise ConstructionError(f"Invalid pitch value: {value}")
        elif event_type == TIME_SHIFT:
            if value < 0:
                raise ConstructionError(f"Invalid time shift value: {value}")
        elif not MIN_MIDI_VELOCITY <= value <= MAX_MIDI_VELOCITY:
            raise ConstructionError(f"Invalid velocity value: {value}")

    def __repr__(self):
        return f"{self.event_type.name.replace('_', '-')} {self.event_value}"


def velocity_bin_size(velocity_bins: int) -> int:
    """Number of MIDI velocities covered by one bin."""
    if velocity_bins <= 0:
        raise ConstructionError(f"Number of velocity bins must be positive, got {velocity_bins}")
    return math.ceil((MAX_MIDI_VELOCITY - MIN_MIDI_VELOCITY + 1) / velocity_bins)


def velocity_to_bin(velocity: int, velocity_bins: int) -> int:
    """Map a MIDI velocity to its 1-based bin."""
    return (velocity - MIN_MIDI_VELOCITY) // velocity_bin_size(velocity_bins) + 1


def bin_to_velocity(velocity_bin: int, velocity_bins: int) -> int:
    """Map a 1-based bin to the MIDI velocity at its midpoint."""
    size = velocity_bin_size(velocity_bins)
    velocity = MIN_MIDI_VELOCITY + (velocity_bin - 1) * size + size // 2
    return min(velocity, MAX_MIDI_VELOCITY)


class Performance(EventSequence):
    """A polyphonic sequence as a stream of PerformanceEvents.

    Attributes:
        events: The performance events
        steps_per_second: Quantization resolution of the source sequence
        start_step: Step of the source sequence where the performance begins
        velocity_bins: Number of velocity bins, 0 if velocity is not encoded
        max_shift_steps: Largest value of a single TIME_SHIFT event
        program: MIDI program, -1 if unset
    """

    def __init__(
        self,
        steps_per_second: int = DEFAULT_STEPS_PER_SECOND,
        start_step: int = 0,
        velocity_bins: int = 0,
        max_shift_steps: int = DEFAULT_MAX_SHIFT_STEPS,
        program: int = -1,
        events: Optional[Iterable[PerformanceEvent]] = None,
    ):
        if steps_per_second <= 0:
            raise ConstructionError(f"steps_per_second must be positive, got {steps_per_second}")
        if max_shift_steps <= 0:
            raise ConstructionError(f"max_shift_steps must be positive, got {max_shift_steps}")
        if velocity_bins < 0:
            raise ConstructionError(f"velocity_bins cannot be negative, got {velocity_bins}")

        self.events: List[PerformanceEvent] = list(events or [])
        self.steps_per_second = steps_per_second
        self.start_step = start_step
        self.velocity_bins = velocity_bins
        self.max_shift_steps = max_shift_steps
        self.program = program

    @property
    def num_steps(self) -> int:
        """Total duration in steps: the sum of all TIME_SHIFT values."""
        return sum(e.event_value for e in self.events if e.event_type == TIME_SHIFT)

    @property
    def end_step(self) -> int:
        return self.start_step + self.num_steps

    def __eq__(self, other):
        if not isinstance(other, Performance):
            return False
        return (
            self.events == other.events
            and self.steps_per_second == other.steps_per_second
            and self.start_step == other.start_step
            and self.velocity_bins == other.velocity_bins
            and self.max_shift_steps == other.max_shift_steps
            and self.program == other.program
        )

    def __repr__(self):
        return (
            f"Performance(start_step={self.start_step}, num_steps={self.num_steps}, "
            f"steps_per_second={self.steps_per_second}, events={len(self.events)})"
        )

    def __setitem__(self, index: int, event: PerformanceEvent):
        self.events[index] = event

    def append(self, event: PerformanceEvent) -> None:
        self.events.append(event)

    def extend(self, events: Union["Performance", Iterable[PerformanceEvent]]) -> None:
        if isinstance(events, Performance):
            events = events.events
        self.events.extend(events)

    def pop(self) -> PerformanceEvent:
        return self.events.pop()

    def copy(self) -> "Performance":
        return copy.copy(self)

    def __copy__(self):
        return Performance(
            steps_per_second=self.steps_per_second,
            start_step=self.start_step,
            velocity_bins=self.velocity_bins,
            max_shift_steps=self.max_shift_steps,
            program=self.program,
            events=self.events,
        )

    def truncate(self, num_events: int) -> None:
        """Keep only the first `num_events` events."""
        del self.events[num_events:]

    def _append_steps(self, num_steps: int) -> None:
        max_shift = self.max_shift_steps
        if self.events and self.events[-1].event_type == TIME_SHIFT:
            last_shift = self.events[-1].event_value
            if last_shift < max_shift:
                steps = min(num_steps, max_shift - last_shift)
                self.events[-1] = PerformanceEvent(TIME_SHIFT, last_shift + steps)
                num_steps -= steps

        while num_steps >= max_shift:
            self.events.append(PerformanceEvent(TIME_SHIFT, max_shift))
            num_steps -= max_shift

        if num_steps > 0:
            self.events.append(PerformanceEvent(TIME_SHIFT, num_steps))

    def _trim_steps(self, num_steps: int) -> None:
        trimmed = 0
        dropped = 0
        while self.events and trimmed < num_steps:
            last = self.events[-1]
            if last.event_type == TIME_SHIFT:
                if trimmed + last.event_value > num_steps:
                    self.events[-1] = PerformanceEvent(
                        TIME_SHIFT, last.event_value - num_steps + trimmed
                    )
                    trimmed = num_steps
                else:
                    trimmed += last.event_value
                    self.events.pop()
            else:
                self.events.pop()
                dropped += 1

        if dropped:
            logger.warning("Trimming the performance removed %d note/velocity events", dropped)

    def set_length(self, steps: int) -> None:
        """
        Set the duration of the performance to exactly `steps` steps.

        A shorter performance is padded with TIME_SHIFT events, growing the
        final TIME_SHIFT first. A longer one is trimmed from the end: trailing
        TIME_SHIFTs shrink or are removed, and any other events met on the way
        are dropped.
        """
        current = self.num_steps
        if current < steps:
            self._append_steps(steps - current)
        elif current > steps:
            self._trim_steps(current - steps)

        assert self.num_steps == steps


@dataclass
class PerformanceConfig:
    """Configuration for encoding a NoteSequence as a Performance.

    Attributes:
        start_step: Ignore notes starting before this step (default: 0)
        velocity_bins: Number of velocity bins, 0 to omit VELOCITY events (default: 0)
        max_shift_steps: Largest single TIME_SHIFT (default: 100)
        instrument: Only encode this instrument, None for all (default: None)
    """

    start_step: int = 0
    velocity_bins: int = 0
    max_shift_steps: int = DEFAULT_MAX_SHIFT_STEPS
    instrument: Optional[int] = None


def _performance_events(ns: NoteSequence, config: PerformanceConfig) -> List[PerformanceEvent]:
    notes = [
        note
        for note in ns.notes
        if note.start_time >= config.start_step
        and (config.instrument is None or note.instrument == config.instrument)
    ]
    notes.sort(key=lambda note: (note.start_time, note.pitch))

    # (step, note index, is_offset), ordered by step then note index.
    note_events = sorted(
        [(note.start_time, i, False) for i, note in enumerate(notes)]
        + [(note.end_time, i, True) for i, note in enumerate(notes)]
    )

    current_step = config.start_step
    current_velocity_bin = 0
    events = []

    for step, index, is_offset in note_events:
        if step > current_step:
            while step > current_step + config.max_shift_steps:
                events.append(PerformanceEvent(TIME_SHIFT, config.max_shift_steps))
                current_step += config.max_shift_steps
            events.append(PerformanceEvent(TIME_SHIFT, step - current_step))
            current_step = step

        note = notes[index]
        if config.velocity_bins > 0 and not is_offset:
            velocity_bin = velocity_to_bin(note.velocity, config.velocity_bins)
            if velocity_bin != current_velocity_bin:
                current_velocity_bin = velocity_bin
                events.append(PerformanceEvent(VELOCITY, velocity_bin))

        events.append(PerformanceEvent(NOTE_OFF if is_offset else NOTE_ON, note.pitch))

    return events


def encode_performance(
    ns: NoteSequence, config: Optional[PerformanceConfig] = None, **overrides
) -> Performance:
    """
    Encode a quantized NoteSequence as a Performance.

    Args:
        ns: Quantized sequence
        config: Optional PerformanceConfig
        **overrides: PerformanceConfig fields to override

    Returns:
        The performance, with the sequence's steps_per_second

    Raises:
        QuantizationStatusError: If the sequence is not quantized
    """
    ns.assert_quantized()
    config = config or PerformanceConfig()
    if overrides:
        config = PerformanceConfig(**{**config.__dict__, **overrides})

    performance = Performance(
        steps_per_second=ns.steps_per_second,
        start_step=config.start_step,
        velocity_bins=config.velocity_bins,
        max_shift_steps=config.max_shift_steps,
        events=_performance_events(ns, config),
    )
    logger.debug("Encoded %d notes as %r", len(ns.notes), performance)
    return performance


def decode_performance(
    performance: Performance,
    velocity: int = 100,
    instrument: int = 0,
    program: int = -1,
) -> NoteSequence:
    """
    Decode a Performance into an unquantized NoteSequence.

    Steps are converted to ticks at `DEFAULT_TPQ` ticks per quarter and
    120 qpm. Overlapping notes of the same pitch are paired first-in
    first-out. Notes that start and end on the same step are dropped, and
    notes left open are ended at the final step. A note shorter than one
    tick is lengthened to one tick.

    Args:
        performance: Performance to decode
        velocity: Note velocity until the first VELOCITY event
        instrument: Instrument number of every note
        program: Program of every note. -1 uses the performance's program,
            or the default program if that is unset too.

    Returns:
        NoteSequence with a single tempo and a 4/4 time signature

    Raises:
        UnknownEventError: If an event has an unknown type
    """
    ticks_per_step = seconds_to_ticks(1, DEFAULT_TPQ, DEFAULT_QPM) / performance.steps_per_second
    sequence_start = performance.start_step * ticks_per_step

    if program == -1:
        program = performance.program if performance.program != -1 else DEFAULT_PROGRAM

    ns = NoteSequence(tpq=DEFAULT_TPQ)
    ns.tempos.append(Tempo(0, DEFAULT_QPM))
    ns.time_signatures.append(TimeSignature(0, *DEFAULT_TIME_SIGNATURE))

    def add_note(pitch: int, start_step: int, end_step: int, note_velocity: int):
        start_time = round(ticks_per_step * start_step + sequence_start)
        end_time = round(ticks_per_step * end_step + sequence_start)
        # Steps finer than a tick still give every note at least one tick.
        end_time = max(end_time, start_time + 1)
        ns.notes.append(SeqNote(pitch, note_velocity, start_time, end_time, instrument, program))

    # Pitch -> queue of (start step, velocity) for notes still sounding.
    pitch_map: Dict[int, Deque[Tuple[int, int]]] = defaultdict(deque)
    step = 0

    for event in performance:
        if event.event_type == NOTE_ON:
            pitch_map[event.event_value].append((step, velocity))
        elif event.event_type == NOTE_OFF:
            if not pitch_map.get(event.event_value):
                continue
            start_step, note_velocity = pitch_map[event.event_value].popleft()
            if start_step == step:
                continue
            add_note(event.event_value, start_step, step, note_velocity)
        elif event.event_type == TIME_SHIFT:
            step += event.event_value
        elif event.event_type == VELOCITY:
            velocity = bin_to_velocity(event.event_value, performance.velocity_bins)
        else:
            raise UnknownEventError(f"Unknown event type {event.event_type}")

    for pitch, queue in pitch_map.items():
        for start_step, note_velocity in queue:
            if start_step != step:
                add_note(pitch, start_step, step, note_velocity)

    return ns
