"""Error taxonomy for registry operations."""

from typing import Optional


class RegistryError(Exception):
    """
    Base class for errors raised by registry operations.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class InvalidInput(RegistryError):
    """
    Raised when a registration or query violates its shape or range contract.
    Never reaches the document store.

    Attributes:
        message: Human-readable error description
        field: Dotted name of the offending field, when known
    """

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        self.field = field
        super().__init__(message)


class NotFound(RegistryError):
    """
    Raised when an agent id is absent from the document store.

    Attributes:
        agent_id: The id that was looked up
    """

    def __init__(self, agent_id: str) -> None:
        self.agent_id = agent_id
        super().__init__("Agent not found")


class StoreUnavailable(RegistryError):
    """
    Raised when the search engine fails at the transport or query level.

    Attributes:
        message: Human-readable error description
        cause: The underlying client exception
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        self.cause = cause
        super().__init__(message)


class CardUnavailable(RegistryError):
    """
    Raised when an agent's card could not be fetched from its origin.

    Attributes:
        agent_id: Agent whose card was requested
        url: Base URL the fetch was issued against
        cause: Short description of the failure (timeout, status code, ...)
    """

    def __init__(self, agent_id: str, url: str, cause: str) -> None:
        self.agent_id = agent_id
        self.url = url
        self.cause = cause
        super().__init__("Failed to fetch agent card")
