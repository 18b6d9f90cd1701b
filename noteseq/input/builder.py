"""Build a NoteSequence from raw MIDI tracks."""

import logging
from dataclasses import replace
from typing import Sequence

from ..core import (
    NoteSequence,
    Tempo,
    TimeSignature,
    KeySignature,
    PitchBend,
    ControlChange,
)
from .events import (
    SetTempoEvent,
    TimeSignatureEvent,
    KeySignatureEvent,
    Track,
    to_absolute_time,
)
from .instruments import extract_instruments

logger = logging.getLogger(__name__)


def build_note_sequence(tracks: Sequence[Track], tpq: int, relative: bool = False) -> NoteSequence:
    """
    Build an unquantized NoteSequence from raw MIDI tracks.

    Tempo, time signature and key signature events are collected from every
    track. Instruments are numbered in order of first appearance, and every
    note, pitch bend and control change is tagged with its instrument number
    and program.

    Args:
        tracks: Tracks of raw MIDI events
        tpq: Ticks per quarter note of the source
        relative: Whether event times are relative (delta) times

    Returns:
        A NoteSequence with tick times
    """
    if relative:
        tracks = [to_absolute_time(track) for track in tracks]

    ns = NoteSequence(tpq=tpq)

    meta_events = sorted(
        (
            event
            for track in tracks
            for event in track
            if isinstance(event, (SetTempoEvent, TimeSignatureEvent, KeySignatureEvent))
        ),
        key=lambda event: event.time,
    )
    for event in meta_events:
        if isinstance(event, SetTempoEvent):
            ns.tempos.append(Tempo(time=event.time, qpm=event.qpm))
        elif isinstance(event, TimeSignatureEvent):
            ns.time_signatures.append(
                TimeSignature(event.time, event.numerator, event.denominator)
            )
        else:
            ns.key_signatures.append(KeySignature(event.time, event.key))

    instruments = extract_instruments(tracks)
    for ins_num, ins in enumerate(instruments):
        for note in ins.notes:
            ns.notes.append(replace(note, instrument=ins_num, program=ins.program))
        for event in ins.pitch_bends:
            ns.pitch_bends.append(PitchBend(event.time, event.value, ins_num, ins.program))
        for event in ins.control_changes:
            ns.control_changes.append(
                ControlChange(event.time, event.controller, event.value, ins_num, ins.program)
            )

    logger.debug("Built %s", ns.summary())
    return ns
