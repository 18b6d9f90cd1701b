"""MIDI file loading with mido."""

from pathlib import Path
from typing import List, Optional, Tuple

import mido

from ..core import NoteSequence
from .builder import build_note_sequence
from .events import (
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
)


class MIDILoader:
    """Reads Standard MIDI Files into absolute-time raw event tracks."""

    SUPPORTED_FORMATS = {".mid", ".midi"}

    def load(self, path: str) -> Tuple[List[Track], int]:
        """
        Load a MIDI file.

        Args:
            path: Path to MIDI file

        Returns:
            Tuple of (tracks in absolute time, ticks per quarter note)

        Raises:
            ValueError: If file format not supported
            FileNotFoundError: If file doesn't exist
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"MIDI file not found: {path}")

        if path.suffix.lower() not in self.SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported format: {path.suffix}. "
                f"Supported: {self.SUPPORTED_FORMATS}"
            )

        return self.from_midi_file(mido.MidiFile(str(path)))

    def from_midi_file(self, midi: mido.MidiFile) -> Tuple[List[Track], int]:
        """Convert an already parsed mido MidiFile."""
        tracks = []
        for midi_track in midi.tracks:
            track = []
            abs_tick = 0
            for msg in midi_track:
                abs_tick += int(msg.time)
                event = self._convert(msg, abs_tick)
                if event is not None:
                    track.append(event)
            tracks.append(track)
        return tracks, int(midi.ticks_per_beat)

    def load_note_sequence(self, path: str) -> NoteSequence:
        """Load a MIDI file straight into an unquantized NoteSequence."""
        tracks, tpq = self.load(path)
        return build_note_sequence(tracks, tpq)

    @staticmethod
    def _convert(msg: mido.Message, time: int) -> Optional[MIDIEvent]:
        """Map a mido message to a raw event, or None for unused messages."""
        if msg.type == "note_on":
            return NoteOnEvent(time, msg.channel, msg.note, msg.velocity)
        if msg.type == "note_off":
            return NoteOffEvent(time, msg.channel, msg.note, msg.velocity)
        if msg.type == "program_change":
            return ProgramChangeEvent(time, msg.channel, msg.program)
        if msg.type == "control_change":
            return ControlChangeEvent(time, msg.channel, msg.control, msg.value)
        if msg.type == "pitchwheel":
            return PitchBendEvent(time, msg.channel, msg.pitch)
        if msg.type == "set_tempo":
            return SetTempoEvent(time, msg.tempo)
        if msg.type == "time_signature":
            return TimeSignatureEvent(time, msg.numerator, msg.denominator)
        if msg.type == "key_signature":
            return KeySignatureEvent(time, msg.key)
        return None
