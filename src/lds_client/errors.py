"""
Custom exceptions for the Legislative Data Store client.

Store writes raise one of these instead of returning raw driver errors, so the
sync engine can classify failures structurally (retry, escalate, resolve).
"""

from enum import Enum


class LDSOperationalError(Exception):
    """Base operational error for LDS client. Treated as fatal."""

    pass


class RetryableError(LDSOperationalError):
    """Temporary errors that should be retried with backoff."""

    pass


class TimeoutExceeded(RetryableError):
    """Query or connection timeout errors."""

    pass


class ConflictViolation(LDSOperationalError):
    """A row with the same unique key already exists."""

    pass


class CardinalityViolation(ConflictViolation):
    """A single multi-row upsert hit the same target row twice.

    PostgreSQL: "ON CONFLICT DO UPDATE command cannot affect row a second time".
    """

    pass


class WriteOutcome(str, Enum):
    """Structural classification of a store write."""

    OK = "ok"
    CONFLICT_VIOLATION = "conflict_violation"
    CARDINALITY_VIOLATION = "cardinality_violation"
    TRANSIENT_ERROR = "transient_error"
    FATAL_ERROR = "fatal_error"


def classify(exc: BaseException | None) -> WriteOutcome:
    if exc is None:
        return WriteOutcome.OK
    if isinstance(exc, CardinalityViolation):
        return WriteOutcome.CARDINALITY_VIOLATION
    if isinstance(exc, ConflictViolation):
        return WriteOutcome.CONFLICT_VIOLATION
    if isinstance(exc, (RetryableError, TimeoutError, ConnectionError)):
        return WriteOutcome.TRANSIENT_ERROR
    return WriteOutcome.FATAL_ERROR


def map_db_error(e: Exception) -> LDSOperationalError:
    import psycopg
    import psycopg.errors as E

    if isinstance(e, LDSOperationalError):
        return e
    if isinstance(e, E.CardinalityViolation) or "cannot affect row a second time" in str(e):
        return CardinalityViolation(str(e))
    if isinstance(e, (E.UniqueViolation, E.ExclusionViolation)):
        return ConflictViolation(str(e))
    if isinstance(e, E.QueryCanceled):
        return TimeoutExceeded(str(e))
    if isinstance(e, (E.SerializationFailure, E.DeadlockDetected, psycopg.OperationalError)):
        return RetryableError(str(e))
    return LDSOperationalError(str(e))
