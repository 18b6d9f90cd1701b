"""Instrument extraction - demultiplex raw MIDI tracks into instruments.

Each track is scanned in event order. Every channel has a current program
(initially 0); notes, control changes and pitch bends are collected into an
`Instrument` bucket keyed by (program, channel, track index). Buckets keep
the order in which their keys were first seen.
"""

import logging
from collections import deque
from dataclasses import dataclass, field, replace
from typing import Deque, Dict, List, Sequence, Tuple

from ..core import SeqNote
from ..core.constants import DEFAULT_PROGRAM, MIDI_CHANNELS
from .events import (
    NoteOnEvent,
    NoteOffEvent,
    ProgramChangeEvent,
    ControlChangeEvent,
    PitchBendEvent,
    Track,
    to_absolute_time,
)

logger = logging.getLogger(__name__)

InstrumentKey = Tuple[int, int, int]  # (program, channel, track)


@dataclass
class Instrument:
    """Notes and controller events played by one program on one channel of one track."""

    program: int = DEFAULT_PROGRAM
    channel: int = 0
    track: int = 0
    notes: List[SeqNote] = field(default_factory=list)
    pitch_bends: List[PitchBendEvent] = field(default_factory=list)
    control_changes: List[ControlChangeEvent] = field(default_factory=list)

    @property
    def key(self) -> InstrumentKey:
        return (self.program, self.channel, self.track)

    @property
    def is_empty(self) -> bool:
        return not (self.notes or self.pitch_bends or self.control_changes)


class InstrumentExtractor:
    """Reconstruct notes and per-instrument event buckets from raw tracks."""

    def __init__(self):
        self._buckets: Dict[InstrumentKey, Instrument] = {}

    def extract(self, tracks: Sequence[Track], relative: bool = False) -> List[Instrument]:
        """
        Extract instruments from a list of tracks.

        Args:
            tracks: Tracks of raw MIDI events
            relative: Whether event times are relative (delta) times. The
                input tracks are never modified; a converted copy is used.

        Returns:
            Instruments in order of first appearance
        """
        self._buckets = {}
        for track_num, track in enumerate(tracks):
            if relative:
                track = to_absolute_time(track)
            self._process_track(track_num, track)
        return list(self._buckets.values())

    def _get_or_insert(self, program: int, channel: int, track_num: int) -> Instrument:
        key = (program, channel, track_num)
        instrument = self._buckets.get(key)
        if instrument is None:
            instrument = Instrument(program=program, channel=channel, track=track_num)
            self._buckets[key] = instrument
        return instrument

    def _process_track(self, track_num: int, track: Track) -> None:
        current_program = [DEFAULT_PROGRAM] * MIDI_CHANNELS
        # (channel, pitch) -> queue of (start time, velocity) of sounding notes
        pending: Dict[Tuple[int, int], Deque[Tuple[int, int]]] = {}

        for event in track:
            if isinstance(event, NoteOnEvent) and event.velocity > 0:
                key = (event.channel, event.pitch)
                pending.setdefault(key, deque()).append((event.time, event.velocity))

            elif isinstance(event, (NoteOnEvent, NoteOffEvent)):
                key = (event.channel, event.pitch)
                if key not in pending:
                    continue
                closing = [entry for entry in pending[key] if entry[0] != event.time]
                # Notes starting on this very tick are retriggers, keep them sounding.
                continuing = deque(entry for entry in pending[key] if entry[0] == event.time)

                if closing:
                    program = current_program[event.channel]
                    instrument = self._get_or_insert(program, event.channel, track_num)
                    for start_time, velocity in closing:
                        instrument.notes.append(
                            SeqNote(
                                pitch=event.pitch,
                                velocity=velocity,
                                start_time=start_time,
                                end_time=event.time,
                                program=program,
                            )
                        )

                if continuing:
                    pending[key] = continuing
                else:
                    del pending[key]

            elif isinstance(event, ProgramChangeEvent):
                current_program[event.channel] = event.program
                self._relabel_default(event.channel, track_num, event.program)

            elif isinstance(event, ControlChangeEvent):
                program = current_program[event.channel]
                instrument = self._get_or_insert(program, event.channel, track_num)
                instrument.control_changes.append(replace(event))

            elif isinstance(event, PitchBendEvent):
                program = current_program[event.channel]
                instrument = self._get_or_insert(program, event.channel, track_num)
                instrument.pitch_bends.append(replace(event))

        if pending:
            logger.debug(
                "Dropping %d unterminated notes at the end of track %d",
                sum(len(queue) for queue in pending.values()),
                track_num,
            )

    def _relabel_default(self, channel: int, track_num: int, program: int) -> None:
        """Move a note-less default-program bucket to the program just selected.

        Control changes and pitch bends often precede the first program change
        of a channel; they belong to the program that follows.
        """
        old_key = (DEFAULT_PROGRAM, channel, track_num)
        instrument = self._buckets.get(old_key)
        if program == DEFAULT_PROGRAM or instrument is None or instrument.notes:
            return

        new_key = (program, channel, track_num)
        logger.debug("Relabeling instrument %s to program %d", old_key, program)
        instrument.program = program

        existing = self._buckets.get(new_key)
        if existing is not None:
            existing.pitch_bends.extend(instrument.pitch_bends)
            existing.control_changes.extend(instrument.control_changes)
            del self._buckets[old_key]
            return

        # Re-key in place so the bucket keeps its position.
        self._buckets = {
            (new_key if key == old_key else key): bucket
            for key, bucket in self._buckets.items()
        }


def extract_instruments(tracks: Sequence[Track], relative: bool = False) -> List[Instrument]:
    """Extract `Instrument`s from raw MIDI tracks.

    See `InstrumentExtractor.extract`.
    """
    return InstrumentExtractor().extract(tracks, relative=relative)
