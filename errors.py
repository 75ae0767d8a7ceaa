"""Error types shared by the MIDI input path, the voice engine and the audio sink."""


class BendsynthError(Exception):
    """Base class for all application errors."""


class NoPortAvailable(BendsynthError):
    """No MIDI input port could be found."""


class PortOpenFailure(BendsynthError):
    """The selected MIDI input port could not be opened."""


class SinkUnavailable(BendsynthError):
    """The audio output cannot be opened or cannot allocate another tone."""


class InvalidEvent(BendsynthError):
    """A raw MIDI payload is malformed or too short for its status byte."""

    def __init__(self, message: str, data=None):
        super().__init__(message)
        self.data = list(data) if data is not None else []
