"""Exception hierarchy for noteseq.

Every error raised by the package derives from NoteSequenceError and falls
into one of three families:

- ConstructionError: an entity was built with out-of-domain values.
- PreconditionError: an operation was given a sequence in the wrong state
  (quantized vs unquantized, tempo changes, missing time signature).
- StructuralError: a derived invariant could not be satisfied
  (polyphony, note ordering, negative times, unknown events).
"""


class NoteSequenceError(Exception):
    """Base class for all noteseq errors."""


class ConstructionError(NoteSequenceError, ValueError):
    """An entity was constructed with invalid values."""


class PreconditionError(NoteSequenceError):
    """An operation's input did not satisfy its precondition."""


class QuantizationStatusError(PreconditionError):
    """The sequence is quantized when it should not be, or vice versa."""


class MultipleTempoError(PreconditionError):
    """The sequence contains more than one distinct tempo."""


class MissingTimeSignatureError(PreconditionError):
    """The sequence has no time signature."""


class StructuralError(NoteSequenceError):
    """A structural invariant could not be satisfied."""


class PolyphonicMelodyError(StructuralError):
    """Two notes start on the same step of a monophonic melody."""


class NoteOrderError(StructuralError):
    """Notes were not supplied in ascending start order."""


class NegativeTimeError(StructuralError):
    """A time came out negative after conversion."""


class UnknownEventError(StructuralError):
    """An event of an unknown type was encountered."""
