"""Time and pitch transforms on unquantized NoteSequences."""

import logging
from itertools import chain
from typing import Tuple

from ..core import NoteSequence, ConstructionError
from ..core.constants import MIN_MIDI_PITCH, MAX_MIDI_PITCH

logger = logging.getLogger(__name__)


def stretch(ns: NoteSequence, factor: float) -> NoteSequence:
    """
    Apply a constant temporal stretch to a NoteSequence in place.

    Factors above one lengthen the sequence (slower), factors below one
    shorten it (faster). Every event time is scaled and rounded to the
    nearest tick, and tempos are divided by the factor so the sequence
    keeps its duration in quarter notes.

    Args:
        ns: Unquantized sequence
        factor: Stretch factor, must be positive

    Returns:
        The same sequence, stretched

    Raises:
        QuantizationStatusError: If the sequence is quantized
    """
    ns.assert_unquantized()
    if factor <= 0:
        raise ConstructionError(f"Stretch factor must be positive, got {factor}")
    if factor == 1.0:
        return ns

    for note in ns.notes:
        note.start_time = round(note.start_time * factor)
        # Keep at least one tick so a note never vanishes.
        note.end_time = max(round(note.end_time * factor), note.start_time + 1)

    events = chain(
        ns.time_signatures,
        ns.key_signatures,
        ns.tempos,
        ns.pitch_bends,
        ns.control_changes,
    )
    for event in events:
        event.time = round(event.time * factor)

    for tempo in ns.tempos:
        tempo.qpm /= factor

    return ns


def transpose(
    ns: NoteSequence,
    amount: int,
    min_pitch: int = MIN_MIDI_PITCH,
    max_pitch: int = MAX_MIDI_PITCH,
    in_place: bool = False,
) -> Tuple[NoteSequence, int]:
    """
    Transpose every note by `amount` half steps, deleting out-of-range notes.

    Args:
        ns: Sequence to transpose
        amount: Number of half steps, positive transposes up
        min_pitch: Lowest pitch allowed after transposition
        max_pitch: Highest pitch allowed after transposition
        in_place: Edit `ns` directly instead of a copy

    Returns:
        Tuple of (transposed sequence, number of deleted notes)
    """
    if not MIN_MIDI_PITCH <= min_pitch <= max_pitch <= MAX_MIDI_PITCH:
        raise ConstructionError(
            f"Invalid pitch bounds: [{min_pitch}, {max_pitch}]"
        )

    if not in_place:
        ns = ns.copy()

    kept = []
    for note in ns.notes:
        pitch = note.pitch + amount
        if min_pitch <= pitch <= max_pitch:
            note.pitch = pitch
            kept.append(note)

    deleted = len(ns.notes) - len(kept)
    ns.notes = kept
    if deleted:
        logger.debug("Transposition by %d deleted %d notes", amount, deleted)

    return ns, deleted
