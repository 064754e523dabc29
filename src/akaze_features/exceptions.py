"""
Exceptions raised by the AKAZE feature extraction driver.

Every error here is fatal for a run; the command-line entry point is the only
place that catches them.
"""


class AKAZEFeaturesError(Exception):
    """Base exception for all akaze_features errors."""

    pass


class ConfigurationError(AKAZEFeaturesError):
    """Raised when the command line cannot be turned into options."""

    pass


class UsageError(ConfigurationError):
    """Raised when no image path is given or help was requested.

    The usage text has already been printed when this is raised.
    """

    pass


class MissingArgumentError(ConfigurationError):
    """Raised when a value-taking flag is the last token on the command line."""

    def __init__(self, flag: str):
        super().__init__(f"Error introducing input options!! ({flag} expects a value)")
        self.flag = flag


class ImageLoadError(AKAZEFeaturesError):
    """Raised when the input path cannot be read as an image."""

    def __init__(self, path: str):
        super().__init__(f"cannot load image from file: {path}")
        self.path = path


class EngineError(AKAZEFeaturesError):
    """Raised when a scale space, detection or description stage fails.

    Examples:
        - Stages called out of order
        - Image size not matching the configured dimensions
        - OpenCV rejecting the configured parameters
    """

    pass


class SerializationError(AKAZEFeaturesError):
    """Raised when a keypoint file cannot be written or read back."""

    pass
