"""Note quantization - Convert tick times to absolute-time steps."""

import logging
import math

from ..core import NoteSequence, ConstructionError, NegativeTimeError
from ..core.constants import DEFAULT_STEPS_PER_SECOND, QUANTIZE_CUTOFF
from ..input.events import ms_per_tick

logger = logging.getLogger(__name__)


class Quantizer:
    """Quantize a NoteSequence onto a grid of `steps_per_second` steps.

    A tick time is converted to seconds at the sequence's tempo, then to
    fractional steps. A fractional part at or above `cutoff` rounds up,
    anything below rounds down.
    """

    def __init__(
        self,
        steps_per_second: int = DEFAULT_STEPS_PER_SECOND,
        cutoff: float = QUANTIZE_CUTOFF,
    ):
        """
        Initialize Quantizer.

        Args:
            steps_per_second: Quantization resolution
            cutoff: Fraction of a step at which times round up
        """
        if steps_per_second <= 0:
            raise ConstructionError(
                f"steps_per_second must be positive, got {steps_per_second}"
            )
        if not 0.0 <= cutoff <= 1.0:
            raise ConstructionError(f"cutoff must be within [0, 1], got {cutoff}")
        self.steps_per_second = steps_per_second
        self.cutoff = cutoff

    def to_step(self, ticks: int, tick_ms: float) -> int:
        """Quantize a tick time given the milliseconds per tick."""
        steps = ticks * tick_ms / 1000.0 * self.steps_per_second
        return math.floor(steps + (1.0 - self.cutoff))

    def quantize(self, ns: NoteSequence) -> NoteSequence:
        """
        Quantize a NoteSequence in place.

        Note times and control change times are converted to steps. Every
        new time is computed and checked before any is written, so a failure
        leaves the sequence untouched.

        Args:
            ns: Unquantized sequence with a single tempo

        Returns:
            The same sequence, now quantized

        Raises:
            QuantizationStatusError: If the sequence is already quantized
            MultipleTempoError: If the sequence changes tempo
            NegativeTimeError: If a time quantizes below zero
        """
        ns.assert_unquantized()
        tick_ms = ms_per_tick(ns.tpq, ns.qpm)

        note_steps = []
        for note in ns.notes:
            start = self.to_step(note.start_time, tick_ms)
            end = self.to_step(note.end_time, tick_ms)
            if start < 0 or end < 0:
                raise NegativeTimeError(
                    f"Got negative note time: start_step = {start}, end_step = {end}"
                )
            note_steps.append((start, end))

        cc_steps = []
        for cc in ns.control_changes:
            step = self.to_step(cc.time, tick_ms)
            if step < 0:
                raise NegativeTimeError(f"Got negative event time: step = {step}")
            cc_steps.append(step)

        collapsed = 0
        for note, (start, end) in zip(ns.notes, note_steps):
            if end == start:
                end += 1
                collapsed += 1
            note.start_time = start
            note.end_time = end
        for cc, step in zip(ns.control_changes, cc_steps):
            cc.time = step

        if collapsed:
            logger.warning(
                "%d notes shorter than a step were extended to one step", collapsed
            )

        ns.is_quantized = True
        ns.steps_per_second = self.steps_per_second
        return ns


def quantize(
    ns: NoteSequence,
    steps_per_second: int = DEFAULT_STEPS_PER_SECOND,
    cutoff: float = QUANTIZE_CUTOFF,
) -> NoteSequence:
    """Quantize `ns` in place. See `Quantizer.quantize`."""
    return Quantizer(steps_per_second, cutoff).quantize(ns)
