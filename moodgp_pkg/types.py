"""Exception types shared across MoodGP."""


class MoodGPError(Exception):
    """Base class for all MoodGP errors."""


class DatasetError(MoodGPError):
    """Raised when the mood diary cannot be read or lacks required columns."""


class ValidationError(MoodGPError):
    """Raised when a parameter or input array is not usable."""


class NotFittedError(MoodGPError):
    """Raised when predicting with a model that has not been fitted."""
