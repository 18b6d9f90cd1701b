"""MIDI export functionality."""

import logging
from pathlib import Path
from typing import List

import mido
import pretty_midi

from ..core import NoteSequence
from ..input.events import (
    NoteOnEvent,
    NoteOffEvent,
    ProgramChangeEvent,
    ControlChangeEvent,
    PitchBendEvent,
    TimeSignatureEvent,
    KeySignatureEvent,
    SetTempoEvent,
    MIDIEvent,
    Track,
    ms_per_tick,
    to_relative_time,
)
from .tracks import note_sequence_to_tracks

logger = logging.getLogger(__name__)


class MIDIExporter:
    """Export NoteSequences to MIDI files and PrettyMIDI objects."""

    def __init__(self, instrument_name_format: str = "Instrument {instrument}"):
        """
        Initialize MIDIExporter.

        Args:
            instrument_name_format: Track name template, formatted with the
                `instrument` and `program` of each track
        """
        self.instrument_name_format = instrument_name_format

    def export(self, ns: NoteSequence, output_path: str) -> None:
        """
        Export a NoteSequence to a Standard MIDI File.

        Args:
            ns: Sequence to export
            output_path: Path to output MIDI file
        """
        midi = self.to_midi_file(ns)

        # Ensure output directory exists
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)

        midi.save(str(output_path))
        logger.debug("Wrote %d tracks to %s", len(midi.tracks), output_path)

    def to_midi_file(self, ns: NoteSequence) -> mido.MidiFile:
        """Convert a NoteSequence to a type 1 mido MidiFile without saving."""
        return tracks_to_midi_file(note_sequence_to_tracks(ns), ns.tpq)

    def to_pretty_midi(self, ns: NoteSequence) -> pretty_midi.PrettyMIDI:
        """
        Convert a NoteSequence to a PrettyMIDI object without saving.

        Times are converted to seconds at the sequence's single tempo, or
        through `steps_per_second` for a quantized sequence.

        Raises:
            MultipleTempoError: If the sequence changes tempo
        """
        qpm = ns.qpm
        tick_seconds = ms_per_tick(ns.tpq, qpm) / 1000.0
        step_seconds = 1.0 / ns.steps_per_second if ns.is_quantized else tick_seconds

        midi = pretty_midi.PrettyMIDI(resolution=ns.tpq, initial_tempo=qpm)
        for ts in ns.time_signatures:
            midi.time_signature_changes.append(
                pretty_midi.TimeSignature(ts.numerator, ts.denominator, ts.time * tick_seconds)
            )

        instruments = {}

        def get_instrument(instrument: int, program: int) -> pretty_midi.Instrument:
            key = (instrument, program)
            if key not in instruments:
                instruments[key] = pretty_midi.Instrument(
                    program=program,
                    name=self.instrument_name_format.format(
                        instrument=instrument, program=program
                    ),
                )
            return instruments[key]

        for note in ns.notes:
            get_instrument(note.instrument, note.program).notes.append(
                pretty_midi.Note(
                    velocity=note.velocity,
                    pitch=note.pitch,
                    start=note.start_time * step_seconds,
                    end=note.end_time * step_seconds,
                )
            )
        for cc in ns.control_changes:
            get_instrument(cc.instrument, cc.program).control_changes.append(
                pretty_midi.ControlChange(cc.controller, cc.value, cc.time * step_seconds)
            )
        for pb in ns.pitch_bends:
            get_instrument(pb.instrument, pb.program).pitch_bends.append(
                pretty_midi.PitchBend(pb.bend, pb.time * tick_seconds)
            )

        midi.instruments.extend(instruments[key] for key in sorted(instruments))
        return midi

    @staticmethod
    def _to_message(event: MIDIEvent):
        if isinstance(event, NoteOnEvent):
            return mido.Message(
                "note_on", channel=event.channel, note=event.pitch,
                velocity=event.velocity, time=event.time,
            )
        if isinstance(event, NoteOffEvent):
            return mido.Message(
                "note_off", channel=event.channel, note=event.pitch,
                velocity=event.velocity, time=event.time,
            )
        if isinstance(event, ProgramChangeEvent):
            return mido.Message(
                "program_change", channel=event.channel, program=event.program, time=event.time
            )
        if isinstance(event, ControlChangeEvent):
            return mido.Message(
                "control_change", channel=event.channel, control=event.controller,
                value=event.value, time=event.time,
            )
        if isinstance(event, PitchBendEvent):
            return mido.Message(
                "pitchwheel", channel=event.channel, pitch=event.value, time=event.time
            )
        if isinstance(event, SetTempoEvent):
            return mido.MetaMessage("set_tempo", tempo=event.tempo, time=event.time)
        if isinstance(event, TimeSignatureEvent):
            return mido.MetaMessage(
                "time_signature", numerator=event.numerator,
                denominator=event.denominator, time=event.time,
            )
        if isinstance(event, KeySignatureEvent):
            return mido.MetaMessage("key_signature", key=event.key, time=event.time)
        raise TypeError(f"Unsupported MIDI event: {event!r}")


def export_midi(ns: NoteSequence, output_path: str) -> None:
    """Write `ns` to a MIDI file with a default MIDIExporter."""
    MIDIExporter().export(ns, output_path)


def tracks_to_midi_file(tracks: List[Track], tpq: int) -> mido.MidiFile:
    """Build a mido MidiFile from absolute-time raw event tracks."""
    midi = mido.MidiFile(type=1, ticks_per_beat=tpq)
    for track in tracks:
        midi.tracks.append(
            mido.MidiTrack(MIDIExporter._to_message(e) for e in to_relative_time(track))
        )
    return midi
