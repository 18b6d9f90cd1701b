"""One-hot index encodings for Melody and Performance events.

Each encoding is an ordered table of disjoint (event type, min, max) ranges.
An event's index is the total width of the ranges before its own plus its
offset within that range. Indices start at 0.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from ..core import ConstructionError
from ..core.constants import (
    DEFAULT_MAX_SHIFT_STEPS,
    MAX_MIDI_PITCH,
    MELODY_NO_EVENT,
    MELODY_NOTE_OFF,
    MIN_MIDI_PITCH,
)
from .performance import (
    NOTE_OFF,
    NOTE_ON,
    TIME_SHIFT,
    VELOCITY,
    PerformanceEvent,
)

EventRange = Tuple[int, int, int]


class OneHotEncoding(ABC):
    """Maps events to indices in [0, num_classes) through a table of ranges.

    Subclasses fill `event_ranges` and convert between events and
    (type, value) pairs.
    """

    def __init__(self, event_ranges: Sequence[EventRange]):
        self.event_ranges: Tuple[EventRange, ...] = tuple(event_ranges)
        self.num_classes = sum(high - low + 1 for _, low, high in self.event_ranges)

    def __repr__(self):
        return f"{type(self).__name__}(num_classes={self.num_classes})"

    @property
    def labels(self) -> range:
        return range(self.num_classes)

    @property
    @abstractmethod
    def default_event(self):
        """Event used to pad sequences of this encoding."""

    @abstractmethod
    def _split(self, event) -> Tuple[int, int]:
        """Return the (event type, value) pair of an event."""

    @abstractmethod
    def _join(self, event_type: int, value: int):
        """Build an event from its (event type, value) pair."""

    def encode_event(self, event) -> int:
        """
        Return the one-hot index of an event.

        Raises:
            ConstructionError: If the event is outside the vocabulary
        """
        event_type, value = self._split(event)
        offset = 0
        for range_type, low, high in self.event_ranges:
            if range_type == event_type and low <= value <= high:
                return offset + value - low
            offset += high - low + 1
        raise ConstructionError(f"Event is not in the vocabulary of {self!r}: {event!r}")

    def decode_event(self, index: int):
        """
        Return the event at a one-hot index.

        Raises:
            ConstructionError: If the index is outside [0, num_classes)
        """
        if not 0 <= index < self.num_classes:
            raise ConstructionError(f"Index {index} is out of range for {self!r}")
        offset = 0
        for range_type, low, high in self.event_ranges:
            width = high - low + 1
            if index < offset + width:
                return self._join(range_type, low + index - offset)
            offset += width

    def encode_one_hot(self, event) -> np.ndarray:
        """One-hot vector of length `num_classes` for an event."""
        vector = np.zeros(self.num_classes, dtype=np.float32)
        vector[self.encode_event(event)] = 1.0
        return vector

    def encode_events(self, events: Iterable) -> np.ndarray:
        """Indices of a sequence of events, as an integer array."""
        return np.array([self.encode_event(event) for event in events], dtype=np.int64)

    def decode_events(self, indices: Iterable[int]) -> List:
        return [self.decode_event(int(index)) for index in indices]


class PerformanceOneHotEncoding(OneHotEncoding):
    """One-hot encoding of PerformanceEvents.

    Ranges, in order: NOTE_ON and NOTE_OFF over all MIDI pitches,
    TIME_SHIFT from 1 to `max_shift_steps`, then VELOCITY from 1 to
    `num_velocity_bins` when velocity bins are used. With 16 bins and the
    default shift limit this gives 128 + 128 + 100 + 16 = 372 classes.
    """

    def __init__(self, num_velocity_bins: int = 0, max_shift_steps: int = DEFAULT_MAX_SHIFT_STEPS):
        if num_velocity_bins < 0:
            raise ConstructionError(
                f"num_velocity_bins cannot be negative, got {num_velocity_bins}"
            )
        if max_shift_steps < 1:
            raise ConstructionError(f"max_shift_steps must be positive, got {max_shift_steps}")

        ranges = [
            (NOTE_ON, MIN_MIDI_PITCH, MAX_MIDI_PITCH),
            (NOTE_OFF, MIN_MIDI_PITCH, MAX_MIDI_PITCH),
            (TIME_SHIFT, 1, max_shift_steps),
        ]
        if num_velocity_bins > 0:
            ranges.append((VELOCITY, 1, num_velocity_bins))
        super().__init__(ranges)
        self.num_velocity_bins = num_velocity_bins
        self.max_shift_steps = max_shift_steps

    @property
    def default_event(self) -> PerformanceEvent:
        return PerformanceEvent(TIME_SHIFT, self.max_shift_steps)

    def _split(self, event: PerformanceEvent) -> Tuple[int, int]:
        return event.event_type, event.event_value

    def _join(self, event_type: int, value: int) -> PerformanceEvent:
        return PerformanceEvent(event_type, value)


# Type tags for the melody ranges. Pitches share one range.
_MELODY_NO_EVENT = 0
_MELODY_NOTE_OFF = 1
_MELODY_PITCH = 2


class MelodyOneHotEncoding(OneHotEncoding):
    """One-hot encoding of Melody events over a pitch range.

    Index 0 is NO_EVENT, index 1 is NOTE_OFF, and pitches in
    [min_pitch, max_pitch) follow from index 2.
    """

    def __init__(self, min_pitch: int, max_pitch: int):
        """
        Initialize MelodyOneHotEncoding.

        Args:
            min_pitch: Lowest encodable pitch, inclusive
            max_pitch: Highest encodable pitch, exclusive

        Raises:
            ConstructionError: If the pitch range is empty or not within MIDI
        """
        if min_pitch < MIN_MIDI_PITCH:
            raise ConstructionError(f"min_pitch must be at least {MIN_MIDI_PITCH}, got {min_pitch}")
        if max_pitch > MAX_MIDI_PITCH + 1:
            raise ConstructionError(
                f"max_pitch must be at most {MAX_MIDI_PITCH + 1}, got {max_pitch}"
            )
        if max_pitch <= min_pitch:
            raise ConstructionError(
                f"max_pitch must exceed min_pitch, got {min_pitch} and {max_pitch}"
            )

        super().__init__([
            (_MELODY_NO_EVENT, MELODY_NO_EVENT, MELODY_NO_EVENT),
            (_MELODY_NOTE_OFF, MELODY_NOTE_OFF, MELODY_NOTE_OFF),
            (_MELODY_PITCH, min_pitch, max_pitch - 1),
        ])
        self.min_pitch = min_pitch
        self.max_pitch = max_pitch

    @property
    def default_event(self) -> int:
        return MELODY_NO_EVENT

    def _split(self, event: int) -> Tuple[int, int]:
        if event == MELODY_NO_EVENT:
            return _MELODY_NO_EVENT, event
        if event == MELODY_NOTE_OFF:
            return _MELODY_NOTE_OFF, event
        return _MELODY_PITCH, event

    def _join(self, event_type: int, value: int) -> int:
        return value


def encode_index(event, encoding: OneHotEncoding) -> int:
    """Encode an event to its one-hot index under `encoding`."""
    return encoding.encode_event(event)


def decode_index(index: int, encoding: OneHotEncoding):
    """Decode a one-hot index back to an event under `encoding`."""
    return encoding.decode_event(index)
