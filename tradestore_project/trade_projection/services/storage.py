import logging
from contextlib import contextmanager

from django.db import DatabaseError

from ..instrumentation import STORAGE_FAILURES

logger = logging.getLogger(__name__)


class TransientStorageFailure(Exception):
    """A storage call failed or timed out; the candidate was not consumed and may be retried."""

    def __init__(self, operation: str, message: str):
        super().__init__(f"{operation}: {message}")
        self.operation = operation


@contextmanager
def storage_guard(operation: str, **context):
    try:
        yield
    except DatabaseError as exc:
        STORAGE_FAILURES.labels(operation=operation).inc()
        logger.warning(
            "storage failure operation=%s error=%s %s",
            operation,
            exc,
            " ".join(f"{k}={v}" for k, v in context.items()),
        )
        raise TransientStorageFailure(operation, str(exc)) from exc
