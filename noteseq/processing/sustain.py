"""Sustain pedal - Extend note durations according to sustain control changes."""

import logging
from collections import defaultdict
from typing import Dict, List

from ..core import NoteSequence, SeqNote
from ..core.constants import (
    DEFAULT_SUSTAIN_CONTROL_NUMBER,
    SUSTAIN_THRESHOLD,
    MAX_CONTROL_VALUE,
)

logger = logging.getLogger(__name__)

# Event priorities at equal times: pedal changes are seen before the notes
# they affect, and onsets before offsets.
_SUSTAIN_ON = 0
_SUSTAIN_OFF = 1
_NOTE_ON = 2
_NOTE_OFF = 3


def _without(notes: List[SeqNote], note: SeqNote) -> List[SeqNote]:
    return [n for n in notes if n is not note]


def apply_sustain(
    ns: NoteSequence,
    control_number: int = DEFAULT_SUSTAIN_CONTROL_NUMBER,
) -> NoteSequence:
    """
    Apply sustain pedal control changes to a NoteSequence in place.

    Each note released while the pedal is down is extended until the pedal
    comes up or the same pitch is struck again, whichever happens first.
    Pedal state is tracked per instrument.

    Args:
        ns: Sequence to modify
        control_number: Controller number of the sustain pedal. Values of
            64 and above press the pedal, lower values release it.

    Returns:
        The same sequence with note end times extended
    """
    events = []
    events.extend((note.start_time, _NOTE_ON, note) for note in ns.notes)
    events.extend((note.end_time, _NOTE_OFF, note) for note in ns.notes)

    for cc in ns.control_changes:
        if cc.controller != control_number:
            continue
        if not 0 <= cc.value <= MAX_CONTROL_VALUE:
            logger.warning("Sustain control change has out of range value: %d", cc.value)
        if cc.value >= SUSTAIN_THRESHOLD:
            events.append((cc.time, _SUSTAIN_ON, cc))
        else:
            events.append((cc.time, _SUSTAIN_OFF, cc))

    events.sort(key=lambda event: (event[0], event[1]))

    active_notes: Dict[int, List[SeqNote]] = defaultdict(list)
    sustain_active: Dict[int, bool] = defaultdict(bool)
    deleted = set()

    time = 0
    for time, event_type, event in events:
        instrument = event.instrument
        if event_type == _SUSTAIN_ON:
            sustain_active[instrument] = True

        elif event_type == _SUSTAIN_OFF:
            sustain_active[instrument] = False
            still_active = []
            for note in active_notes[instrument]:
                if note.end_time < time:
                    # Held only by the pedal.
                    note.end_time = time
                else:
                    still_active.append(note)
            active_notes[instrument] = still_active

        elif event_type == _NOTE_ON:
            if sustain_active[instrument]:
                still_active = []
                for note in active_notes[instrument]:
                    if note.pitch != event.pitch:
                        still_active.append(note)
                        continue
                    note.end_time = time
                    if note.start_time == note.end_time:
                        # Struck twice at the same time; keep only the new one.
                        deleted.add(id(note))
                active_notes[instrument] = still_active
            active_notes[instrument].append(event)

        else:
            if not sustain_active[instrument]:
                # May already be gone if re-struck while the pedal was down.
                active_notes[instrument] = _without(active_notes[instrument], event)

    # End any notes still held by the pedal.
    for notes in active_notes.values():
        for note in notes:
            note.end_time = time

    if deleted:
        logger.debug("Sustain removed %d zero-length notes", len(deleted))
        ns.notes = [note for note in ns.notes if id(note) not in deleted]

    return ns
