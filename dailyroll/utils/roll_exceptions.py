"""
Custom exceptions for the daily roll flow with chat-friendly error messages.
"""

class DailyRollException(Exception):
    """Base exception for daily roll errors."""
    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message

class IdentityLookupError(DailyRollException):
    """Raised when the chat bot context cannot be resolved for a token."""
    def __init__(self, details: str):
        super().__init__(
            f"Identity lookup failed: {details}",
            "Invalid or expired token"
        )

class SessionLookupError(DailyRollException):
    """Raised when the stream start time cannot be fetched."""
    def __init__(self, community_id: str, details: str = None):
        super().__init__(
            f"Stream lookup failed for {community_id}: {details}",
            "Could not determine the current stream"
        )

class StoreError(DailyRollException):
    """Raised when Redis operations fail."""
    def __init__(self, operation: str, details: str = None):
        super().__init__(
            f"Store error during {operation}: {details}",
            "Something broke, try again later"
        )

class ConfigurationError(DailyRollException):
    """Raised when startup configuration is invalid."""
    def __init__(self, details: str):
        super().__init__(
            f"Invalid configuration: {details}",
            "Service is misconfigured"
        )

class ChannelMismatchError(DailyRollException):
    """Raised when a command is used outside the configured channel."""
    def __init__(self, channel_name: str):
        super().__init__(
            f"Channel mismatch: {channel_name}",
            "This command is not available in this channel"
        )
