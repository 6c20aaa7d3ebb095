class DisplayAgentError(Exception):
    """Unrecoverable failure of a display session."""


class ModelNotFoundError(DisplayAgentError):
    """Face detection weights are missing from the model directory."""


class CameraUnavailableError(DisplayAgentError):
    """No camera device found, or the selected one cannot be opened."""


class CameraPermissionError(DisplayAgentError):
    """The camera exists but access to it was refused."""
