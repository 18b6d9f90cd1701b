"""Base class for flat event-stream representations."""

from abc import ABC, abstractmethod
from typing import Iterator, Union


class EventSequence(ABC):
    """A flat stream of events stored in `self.events`.

    Exposes the read-only sequence operations the codecs rely on
    (length, iteration, indexing) and a length setter.
    """

    events: list

    def __len__(self) -> int:
        return len(self.events)

    def __iter__(self) -> Iterator:
        return iter(self.events)

    def __getitem__(self, index: Union[int, slice]):
        return self.events[index]

    @property
    def num_steps(self) -> int:
        """Length of the stream in time steps."""
        return len(self.events)

    @abstractmethod
    def set_length(self, steps: int) -> None:
        """Pad or truncate the stream so that it lasts exactly `steps` steps."""
        pass


def set_length(sequence: EventSequence, steps: int) -> EventSequence:
    """Set the length of a Melody or Performance in steps, in place."""
    sequence.set_length(steps)
    return sequence
