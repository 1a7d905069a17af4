"""Unit of work over a single SQLAlchemy session.

Every store taking part in one coordinator call shares ``uow.session``, so a
multi-store change is a single database transaction. ``transaction()``
drives the transaction to an end on every exit path: commit when the block
completes, rollback on any exception (cancellation included) before the
error propagates.

Usage:
    uow = UnitOfWork(SessionLocal())
    with uow.transaction():
        feedback_store.insert(...)
        target_store.insert_many(...)
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.services.errors import FeedbackError, InternalError, PersistenceError

logger = logging.getLogger(__name__)


class UnitOfWork:
    """Explicit begin/commit/rollback over one session."""

    def __init__(self, session: Session):
        self.session = session

    @property
    def active(self) -> bool:
        return self.session.in_transaction()

    def begin(self) -> None:
        # Reads issued earlier may already have autobegun a transaction.
        if not self.session.in_transaction():
            self.session.begin()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        try:
            self.session.rollback()
        except SQLAlchemyError as exc:
            # The connection may already be gone; the database discards the
            # open transaction on its side.
            logger.error("Rollback failed: %s", exc)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Run the enclosed block as one atomic change."""
        self.begin()
        try:
            yield self.session
            self.commit()
        except FeedbackError:
            self.rollback()
            raise
        except SQLAlchemyError as exc:
            self.rollback()
            logger.warning("Transaction rolled back after store failure: %s", exc)
            raise PersistenceError() from exc
        except Exception as exc:
            self.rollback()
            logger.exception("Transaction rolled back after unexpected error")
            raise InternalError() from exc
        except BaseException:
            self.rollback()
            raise

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "UnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self.session.in_transaction():
            self.rollback()
        self.close()
