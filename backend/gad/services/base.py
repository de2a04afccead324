"""
GAD Backend — Shared Service Helpers
=====================================

What:  Database error translation and uniqueness checks used by every service.

Error Handling Strategy:
    GadError subclasses raised inside a service block pass through as-is.
    IntegrityError (a unique index caught a race the pre-check missed)
    becomes ConflictError. Any other SQLAlchemyError is logged with its
    traceback and replaced by a generic DatabaseError so no SQL reaches
    the client.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Mapping, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from gad.exceptions import ConflictError, DatabaseError
from gad.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


@contextmanager
def database_errors(action: str, **context: Any) -> Iterator[None]:
    """
    Wrap a block of repository calls.

    Args:
        action: Short verb phrase for logs and messages, e.g. "create student"
        context: Extra identifiers attached to the DatabaseError
    """
    try:
        yield
    except IntegrityError as e:
        logger.warning("Integrity violation during %s: %s", action, e.orig)
        raise ConflictError(
            field="record",
            message=f"Could not {action}: a unique value is already in use",
            context={k: str(v) for k, v in context.items()},
        )
    except SQLAlchemyError as e:
        logger.error("Database error during %s: %s", action, str(e), exc_info=True)
        raise DatabaseError(
            message=f"Could not {action}. Please try again.",
            context={"error_type": type(e).__name__, **{k: str(v) for k, v in context.items()}},
        )


async def ensure_unique(
    repo: BaseRepository,
    values: Mapping[str, Any],
    exclude_id: Optional[int] = None,
    current: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Raise ConflictError for the first field whose value another row holds.

    Args:
        values: field → candidate value; None values are skipped
        exclude_id: id of the record being updated
        current: field → stored value; unchanged fields are skipped
    """
    for field, value in values.items():
        if value is None:
            continue
        if current is not None and current.get(field) == value:
            continue
        if await repo.exists_by(field, value, exclude_id=exclude_id):
            logger.warning("Duplicate %s rejected: %s", field, value)
            raise ConflictError(field=field, value=value)
