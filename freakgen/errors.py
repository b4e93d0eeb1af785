"""
Exception hierarchy.

Generation never raises for bad style/intensity/engine tags: those are
normalized and logged. These cover the I/O collaborators.
"""


class FreakGenError(Exception):
    """Base class for FreakGEN errors."""
    pass


class PresetError(FreakGenError):
    """Raised when preset library operations fail."""
    pass


class PresetValidationError(PresetError):
    """Raised by strict preset validation."""
    pass


class MidiError(FreakGenError):
    """Raised when a MIDI port cannot be found, opened or written."""
    pass
