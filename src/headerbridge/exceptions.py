"""Exceptions raised by HeaderBridge."""


class HeaderBridgeError(Exception):
    """Base class for HeaderBridge errors."""

    pass


class AssistFailure(HeaderBridgeError):
    """Raised when the header assist fails, times out or is unavailable."""

    pass


class MalformedAssistResponse(AssistFailure):
    """Raised when the header assist returns output that cannot be trusted."""

    pass


class OutOfRangeEditError(HeaderBridgeError, IndexError):
    """Raised when an edit targets an entity or header index that does not exist."""

    def __init__(self, entity: str, index: int, size: int = 0):
        self.entity = entity
        self.index = index
        self.size = size
        super().__init__(
            f"Header index {index} is out of range for '{entity}' "
            f"({size} header(s) under review)"
        )


class PersistenceError(HeaderBridgeError):
    """Raised by storage backends when reading or writing state fails."""

    pass


class DatasetNotLoadedError(HeaderBridgeError):
    """Raised when reconciliation starts before clients, workers and tasks are all loaded."""

    pass


class SessionNotStartedError(HeaderBridgeError):
    """Raised when a session operation is requested with no active session."""

    pass


class SessionClosedError(HeaderBridgeError):
    """Raised when a committed session is edited or committed again."""

    pass
