"""
Bounded conflict retry around ``IDocumentStore.run_atomic``.

Stores make a single attempt per ``run_atomic`` call and report concurrent
modification as ``WriteConflictError``. Use cases go through
``execute_atomic`` which re-runs the whole block (re-reading live documents)
with exponential backoff, then surfaces ``CommitConflictError``.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.config import get_logger, get_settings, operation_context
from src.core.exceptions import CommitConflictError, WriteConflictError
from src.core.interfaces.document_store import IAtomicHandle, IDocumentStore

logger = get_logger(__name__)

T = TypeVar("T")


def _get_retry_decorator(operation: str) -> Any:
    """Get tenacity retry decorator with current engine settings."""
    settings = get_settings()

    def log_retry(retry_state: RetryCallState) -> None:
        logger.warning(
            "atomic_retry",
            operation=operation,
            attempt=retry_state.attempt_number,
            error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
        )

    return retry(
        stop=stop_after_attempt(settings.engine.max_commit_attempts),
        wait=wait_exponential(
            multiplier=settings.engine.retry_delay,
            min=settings.engine.retry_delay,
            max=settings.engine.retry_max_delay,
        ),
        retry=retry_if_exception_type(WriteConflictError),
        before_sleep=log_retry,
        reraise=True,
    )


async def execute_atomic(
    store: IDocumentStore,
    fn: Callable[[IAtomicHandle], Awaitable[T]],
    operation: str,
) -> T:
    """
    Run ``fn`` atomically, retrying on write conflicts.

    Only ``WriteConflictError`` is retried. Validation and domain errors
    raised by ``fn`` abort immediately, as does ``StoreUnavailableError``.

    Raises:
        CommitConflictError: When attempts are exhausted, or with
            ``unknown_outcome=True`` when the store call timed out
    """
    settings = get_settings()
    timeout = settings.engine.atomic_timeout_seconds
    attempts = 0

    async def attempt() -> T:
        nonlocal attempts
        attempts += 1
        return await asyncio.wait_for(store.run_atomic(fn), timeout=timeout)

    try:
        with operation_context(operation):
            return await _get_retry_decorator(operation)(attempt)()
    except WriteConflictError as e:
        logger.error(
            "atomic_conflict_exhausted",
            operation=operation,
            attempts=attempts,
            error=str(e),
        )
        raise CommitConflictError(operation, attempts) from e
    except asyncio.TimeoutError as e:
        logger.error(
            "atomic_timeout",
            operation=operation,
            attempts=attempts,
            timeout_seconds=timeout,
        )
        raise CommitConflictError(operation, attempts, unknown_outcome=True) from e
