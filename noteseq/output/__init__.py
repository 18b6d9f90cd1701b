"""Output layer - Export NoteSequences.

This layer handles exporting sequences to:
- Raw MIDI event tracks
- MIDI files (mido)
- PrettyMIDI objects
"""

from .tracks import note_sequence_to_tracks
from .midi import MIDIExporter, export_midi, tracks_to_midi_file

__all__ = [
    "note_sequence_to_tracks",
    "MIDIExporter",
    "export_midi",
    "tracks_to_midi_file",
]
