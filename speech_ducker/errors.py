"""Exception hierarchy for the ducker."""


class DuckerError(Exception):
    """Base class for all ducking failures."""


class ValidationError(DuckerError):
    """Malformed speech data or configuration. Raised before any I/O."""


class ProbeError(DuckerError):
    """The media probe could not read a duration from the music file."""


class TranscodeError(DuckerError):
    """The external engine failed while rendering the ducked track."""

    def __init__(self, message: str, stderr: str = "", returncode: int | None = None):
        super().__init__(message)
        self.stderr = stderr
        self.returncode = returncode


class ProcessingError(DuckerError):
    """Wraps any failure raised while running the full ducking pipeline."""
