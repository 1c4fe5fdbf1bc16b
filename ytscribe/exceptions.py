"""Custom Exceptions for the ytscribe application."""

class YtScribeError(Exception):
    """Base class for exceptions in this package."""
    pass

class ConfigurationError(YtScribeError):
    """Exception raised for errors in configuration loading or validation."""
    pass

class ChannelListingError(YtScribeError):
    """Exception raised when a channel's video list cannot be retrieved."""
    pass

class CaptionFetchError(YtScribeError):
    """Exception raised when yt-dlp fails to download a caption track."""
    pass

class FormattingError(YtScribeError):
    """Exception raised when a transcript document cannot be written."""
    pass

class FileSystemError(YtScribeError):
    """Exception raised for file system related errors (permissions, not found etc)."""
    pass
