"""
Error taxonomy for MapChat.

Gateways raise these for failures they do not degrade; routes and the chat
orchestrator decide whether a failure ends the request.
"""


class MapChatError(Exception):
    """Base exception for all MapChat errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class MapsApiError(MapChatError):
    """Raised when a Google Maps web service call fails."""


class MapsAuthError(MapsApiError):
    """Raised when the Maps API key is rejected (HTTP 403 / REQUEST_DENIED)."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message or "Access denied (403). Check the Maps API key and its enabled APIs.",
            status_code=403,
        )


class MapsNotFoundError(MapsApiError):
    """Raised when the requested resource does not exist (HTTP 404 / NOT_FOUND)."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "Not found", status_code=404)


class LLMError(MapChatError):
    """Raised when the LLM endpoint fails or returns an unusable response."""


class ChatValidationError(MapChatError):
    """Raised when a chat request cannot start a turn."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=400)
