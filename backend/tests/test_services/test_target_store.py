"""Tests for the target store."""
import pytest
from sqlalchemy.exc import IntegrityError
from app.models import FeedbackTarget
from app.services.feedback_store import FeedbackStore
from app.services.target_store import TargetStore


@pytest.fixture
def store(db_session):
    return TargetStore(db_session)


@pytest.fixture
def feedback_id(db_session):
    fid = FeedbackStore(db_session).insert(
        1, {"type": "group", "date": "2024.04.22", "link": "", "content": "Nice"}
    )
    db_session.commit()
    return fid


def _row_count(db_session, feedback_id):
    return db_session.query(FeedbackTarget).filter(FeedbackTarget.feedback_id == feedback_id).count()


class TestInsertMany:
    def test_one_row_per_pair(self, store, db_session, feedback_id):
        inserted = store.insert_many(feedback_id, [(1, (2, 3)), (2, (4, 5, 13))])
        db_session.commit()
        assert inserted == 5
        assert _row_count(db_session, feedback_id) == 5

    def test_unknown_feedback_violates_foreign_key(self, store, db_session):
        with pytest.raises(IntegrityError):
            store.insert_many(999, [(1, (2,))])
        db_session.rollback()

    def test_batch_is_all_or_nothing(self, store, db_session, feedback_id):
        # The repeated pair breaks the unique constraint for the whole flush
        with pytest.raises(IntegrityError):
            store.insert_many(feedback_id, [(1, (2, 3)), (1, (3,))])
        db_session.rollback()
        assert _row_count(db_session, feedback_id) == 0


class TestFind:
    def test_groups_rows(self, store, db_session, feedback_id):
        store.insert_many(feedback_id, [(1, (2, 3)), (2, (4,))])
        db_session.commit()
        assert store.find_by_feedback_id(feedback_id) == {1: {2, 3}, 2: {4}}

    def test_no_rows(self, store, feedback_id):
        assert store.find_by_feedback_id(feedback_id) == {}

    def test_batched_lookup(self, store, db_session, feedback_id):
        other = FeedbackStore(db_session).insert(
            1, {"type": "personal", "date": "2024.04.23", "link": "", "content": "Other"}
        )
        store.insert_many(feedback_id, [(1, (2,))])
        store.insert_many(other, [(3, (4, 5))])
        db_session.commit()
        assert store.find_by_feedback_ids([feedback_id, other]) == {
            feedback_id: {1: {2}},
            other: {3: {4, 5}},
        }
        assert store.find_by_feedback_ids([]) == {}

    def test_row_ids(self, store, db_session, feedback_id):
        store.insert_many(feedback_id, [(1, (2, 3))])
        db_session.commit()
        ids = store.row_ids(feedback_id)
        assert len(ids) == 2
        assert ids == sorted(ids)


class TestDeleteByFeedbackId:
    def test_removes_all_rows(self, store, db_session, feedback_id):
        store.insert_many(feedback_id, [(1, (2, 3)), (2, (4,))])
        db_session.commit()
        assert store.delete_by_feedback_id(feedback_id) == 3
        db_session.commit()
        assert _row_count(db_session, feedback_id) == 0

    def test_idempotent(self, store, db_session, feedback_id):
        assert store.delete_by_feedback_id(feedback_id) == 0
        assert store.delete_by_feedback_id(feedback_id) == 0
