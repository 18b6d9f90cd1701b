"""NoteSequence - the unified multi-instrument container."""

import copy
from dataclasses import dataclass, field
from typing import List, Optional

from .constants import DEFAULT_TPQ, DEFAULT_QPM
from .exceptions import (
    ConstructionError,
    MultipleTempoError,
    QuantizationStatusError,
)
from .note import (
    SeqNote,
    Tempo,
    TimeSignature,
    KeySignature,
    PitchBend,
    ControlChange,
)


@dataclass
class NoteSequence:
    """A sequence of notes and timestamped events from one or more instruments.

    Times are MIDI ticks (scaled by `tpq`) until the sequence is quantized,
    after which note and control change times are steps (scaled by
    `steps_per_second`).

    Attributes:
        tpq: Ticks per quarter note
        is_quantized: Whether note times are steps rather than ticks
        steps_per_second: Quantization resolution, set only when quantized
        time_signatures: Time signature changes
        key_signatures: Key signature changes
        tempos: Tempo changes
        notes: Notes of all instruments
        pitch_bends: Pitch bend events of all instruments
        control_changes: Control change events of all instruments
    """

    tpq: int = DEFAULT_TPQ
    is_quantized: bool = False
    steps_per_second: Optional[int] = None
    time_signatures: List[TimeSignature] = field(default_factory=list)
    key_signatures: List[KeySignature] = field(default_factory=list)
    tempos: List[Tempo] = field(default_factory=list)
    notes: List[SeqNote] = field(default_factory=list)
    pitch_bends: List[PitchBend] = field(default_factory=list)
    control_changes: List[ControlChange] = field(default_factory=list)

    def __post_init__(self):
        if self.tpq <= 0:
            raise ConstructionError(f"Ticks per quarter must be positive, got {self.tpq}")
        if self.is_quantized:
            if self.steps_per_second is None or self.steps_per_second <= 0:
                raise ConstructionError(
                    "`steps_per_second` must be greater than zero for a quantized sequence"
                )
        elif self.steps_per_second is not None:
            raise ConstructionError(
                "`steps_per_second` is only valid for a quantized sequence"
            )

    @property
    def total_time(self) -> int:
        """End time of the last note, 0 for a sequence without notes."""
        return max((note.end_time for note in self.notes), default=0)

    @property
    def instruments(self) -> List[int]:
        """Distinct instrument ids in order of first appearance."""
        return list(dict.fromkeys(note.instrument for note in self.notes))

    @property
    def qpm(self) -> float:
        """The sequence's single tempo.

        Raises:
            MultipleTempoError: If the tempos disagree
        """
        values = {tempo.qpm for tempo in self.tempos}
        if len(values) > 1:
            raise MultipleTempoError(
                f"NoteSequence has an inconsistent tempo: {sorted(values)} qpm"
            )
        return values.pop() if values else DEFAULT_QPM

    @property
    def steps_per_quarter(self) -> float:
        """Quantized steps in one quarter note at the sequence's tempo."""
        self.assert_quantized()
        return self.steps_per_second * 60.0 / self.qpm

    def notes_for(self, instrument: int) -> List[SeqNote]:
        """Notes belonging to one instrument, in sequence order."""
        return [note for note in self.notes if note.instrument == instrument]

    def assert_quantized(self) -> None:
        if not self.is_quantized:
            raise QuantizationStatusError("The NoteSequence must be quantized.")

    def assert_unquantized(self) -> None:
        if self.is_quantized:
            raise QuantizationStatusError("The NoteSequence must not be quantized.")

    def copy(self) -> "NoteSequence":
        """Deep copy, sharing no events with this sequence."""
        return copy.deepcopy(self)

    def summary(self) -> str:
        unit = f"{self.steps_per_second} steps/s" if self.is_quantized else f"tpq={self.tpq}"
        return (
            f"NoteSequence({unit}, total_time={self.total_time}): "
            f"{len(self.time_signatures)} TimeSignatures, "
            f"{len(self.key_signatures)} KeySignatures, {len(self.tempos)} Tempos, "
            f"{len(self.notes)} Notes, {len(self.pitch_bends)} PitchBends, "
            f"{len(self.control_changes)} ControlChanges"
        )
