"""Failure kinds raised by the Direct Line adapter.

Each remote phase has exactly one error kind with a fixed message. Transport
exceptions and service-side rejections are not distinguished: both surface as
the phase's error, with the original exception chained when there is one.
"""


class DirectLineError(RuntimeError):
    """Base class for adapter failures."""


class TokenGenerationError(DirectLineError):
    """Credential exchange failed."""

    def __init__(self, message="Failed to generate Direct Line token."):
        super().__init__(message)


class ConversationStartError(DirectLineError):
    """Session establishment failed."""

    def __init__(self, message="Failed to start a conversation with Copilot Studio."):
        super().__init__(message)


class MessageRetrievalError(DirectLineError):
    """Listing conversation activities failed."""

    def __init__(self, message="Failed to retrieve messages from Copilot Studio."):
        super().__init__(message)


class ReplyTimeoutError(DirectLineError):
    """No bot reply appeared within the configured number of polls."""

    def __init__(self, polls: int):
        super().__init__(f"No reply from Copilot Studio after {polls} polls.")
        self.polls = polls


class NoEndpointConfiguredError(DirectLineError):
    """Endpoint selection was asked to choose from an empty list."""

    def __init__(self, message="No Copilot endpoint configured."):
        super().__init__(message)
