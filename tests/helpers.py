"""Shared helpers for building and inspecting NoteSequences in tests."""

from noteseq.core import SeqNote


def add_notes(ns, instrument, notes, program=0):
    """Append (pitch, velocity, start, end) tuples as notes of one instrument."""
    for pitch, velocity, start, end in notes:
        ns.notes.append(SeqNote(pitch, velocity, start, end, instrument, program))


def note_tuples(ns, instrument):
    """(pitch, velocity, start, end) of every note played by an instrument."""
    return [
        (n.pitch, n.velocity, n.start_time, n.end_time)
        for n in ns.notes
        if n.instrument == instrument
    ]
