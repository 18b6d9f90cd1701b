"""Processing layer - NoteSequence transforms.

This layer edits a NoteSequence in time and pitch:
- Quantization (ticks to steps)
- Temporal stretch
- Transposition
- Sustain pedal application
"""

from .quantize import Quantizer, quantize
from .transforms import stretch, transpose
from .sustain import apply_sustain

__all__ = [
    "Quantizer",
    "quantize",
    "stretch",
    "transpose",
    "apply_sustain",
]
