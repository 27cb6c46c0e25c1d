"""One-time asynchronous initialization shared by concurrent callers.

The first caller of ``AsyncLazy.get()`` starts the factory in a task; every
concurrent and later caller awaits that same task. The outcome, value or
exception, is cached for the lifetime of the object and never retried.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Final, Generic, TypeVar

logger: Final = logging.getLogger(__name__)

T = TypeVar("T")


class AsyncLazy(Generic[T]):
    """Lazily computed value produced by a single asynchronous factory call.

    States: not started, running, ready (value cached) or failed (exception
    cached). Cancelling a waiting caller does not cancel the shared task.

    Attributes:
        name: Label used in log messages.

    Example:
        >>> lazy = AsyncLazy(connect, name="store")
        >>> client = await lazy.get()  # runs connect() once
        >>> client = await lazy.get()  # returns the cached client
    """

    def __init__(self, factory: Callable[[], Awaitable[T]], name: str = "value") -> None:
        """Initialize without running the factory.

        Args:
            factory: Coroutine function producing the value.
            name: Label used in log messages. Defaults to "value".
        """
        self.name = name
        self._factory = factory
        self._task: asyncio.Task[T] | None = None

    @property
    def is_started(self) -> bool:
        """Whether the factory has been started."""
        return self._task is not None

    @property
    def is_ready(self) -> bool:
        """Whether the factory completed successfully."""
        return (
            self._task is not None
            and self._task.done()
            and not self._task.cancelled()
            and self._task.exception() is None
        )

    @property
    def is_failed(self) -> bool:
        """Whether the factory completed with an error."""
        return (
            self._task is not None
            and self._task.done()
            and (self._task.cancelled() or self._task.exception() is not None)
        )

    async def get(self) -> T:
        """Return the value, running the factory on first use.

        Returns:
            The value produced by the factory.

        Raises:
            Exception: Whatever the factory raised, on every call.
        """
        # No await between the check and the assignment: only one task is created.
        if self._task is None:
            logger.debug(f"Starting one-time initialization of {self.name}")
            self._task = asyncio.ensure_future(self._run())

        return await asyncio.shield(self._task)

    async def _run(self) -> T:
        try:
            value = await self._factory()
        except Exception as e:
            logger.error(f"One-time initialization of {self.name} failed: {e}")
            raise
        logger.debug(f"One-time initialization of {self.name} completed")
        return value
