"""Global constants for noteseq."""

# Pitch names
PITCH_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
NOTES_PER_OCTAVE = 12

# MIDI ranges
MIN_MIDI_PITCH = 0
MAX_MIDI_PITCH = 127
MIN_MIDI_VELOCITY = 1
MAX_MIDI_VELOCITY = 127
MIDI_CHANNELS = 16
DEFAULT_PROGRAM = 0

# Musical defaults
DEFAULT_QPM = 120.0  # Quarter notes per minute
DEFAULT_TPQ = 220  # Ticks per quarter note
DEFAULT_TIME_SIGNATURE = (4, 4)

# Quantization defaults
QUANTIZE_CUTOFF = 0.5
DEFAULT_STEPS_PER_SECOND = 100

# Sustain pedal
DEFAULT_SUSTAIN_CONTROL_NUMBER = 64
SUSTAIN_THRESHOLD = 64
MAX_CONTROL_VALUE = 127

# Melody events
MELODY_NOTE_OFF = -1
MELODY_NO_EVENT = -2
MIN_MELODY_EVENT = -2
MAX_MELODY_EVENT = 127
DEFAULT_STEPS_PER_BAR = 16
DEFAULT_STEPS_PER_QUARTER = 4

# Performance events
DEFAULT_MAX_SHIFT_STEPS = 100
