"""
Base interfaces and abstract classes for the domain layer.
"""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, Protocol, TypeVar

T = TypeVar('T')
TResult = TypeVar('TResult')
TRecord = TypeVar('TRecord')


class ILogger(Protocol):
    """Logger interface for dependency injection."""

    def debug(self, message: str, **kwargs: Any) -> None: ...
    def info(self, message: str, **kwargs: Any) -> None: ...
    def warning(self, message: str, **kwargs: Any) -> None: ...
    def error(self, message: str, **kwargs: Any) -> None: ...
    def critical(self, message: str, **kwargs: Any) -> None: ...


class IConfigurationManager(Protocol):
    """Configuration management interface."""

    def get(self, key: str, default: Any = None) -> Any: ...
    def set(self, key: str, value: Any) -> None: ...
    def validate(self) -> bool: ...
    def reload(self) -> bool: ...
    def get_all(self) -> Dict[str, Any]: ...


class IErrorHandler(Protocol):
    """Error handling interface."""

    def handle_error(self, error: BaseException, context: Dict[str, Any]) -> str: ...
    def log_error(self, error: BaseException, context: Dict[str, Any]) -> None: ...
    def create_user_message(self, error: BaseException) -> str: ...


class Repository(Generic[T], ABC):
    """Base repository interface for aggregates.

    Most repositories need insert/find/delete, so they share this interface.
    More specific queries belong on the concrete repository.
    """

    @abstractmethod
    async def insert(self, entity: T) -> None:
        """Persist a new aggregate."""

    @abstractmethod
    async def find_one_by_id(self, entity_id: str) -> Optional[T]: ...

    @abstractmethod
    async def delete(self, entity: T) -> bool:
        """Delete an aggregate. Returns False when nothing was deleted."""

    @abstractmethod
    async def transaction(self, handler: Callable[[], Awaitable[TResult]]) -> TResult:
        """Run ``handler`` inside a transaction and return its result."""


class Mapper(Generic[T, TRecord], ABC):
    """Translates between domain entities and persistence records."""

    @abstractmethod
    def to_persistence(self, entity: T) -> TRecord: ...

    @abstractmethod
    def to_domain(self, record: TRecord) -> T: ...
