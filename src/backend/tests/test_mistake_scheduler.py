"""
错题调度器测试

覆盖：首次答错建档、再次答错重置阶段、阶梯前进、已掌握推迟、
到期查询（排序、用户隔离、失效题目过滤）、写入失败
"""
from datetime import timedelta

import pytest
from sqlalchemy.exc import SQLAlchemyError

from pinyin_review.core.errors import PersistenceError
from pinyin_review.models import MistakeRecord, Question
from pinyin_review.services import MistakeScheduler

from conftest import make_question


@pytest.fixture
def scheduler(db):
    return MistakeScheduler(db)


class TestRecordMiss:
    """测试记录答错"""

    def test_first_miss_creates_record(self, scheduler, sample_questions, now):
        record = scheduler.record_miss("u1", "q-tian", "tián", now)

        assert record.id is not None
        assert record.review_stage == 0
        assert record.error_count == 1
        assert record.wrong_pinyin == "tián"
        assert record.last_reviewed_at is None
        assert record.next_review_at == now + timedelta(minutes=5)

    @pytest.mark.parametrize("prior_stage", [0, 3, 7, 8])
    def test_miss_resets_stage_regardless_of_progress(self, scheduler, db, sample_questions, now, prior_stage):
        record = scheduler.record_miss("u1", "q-tian", "tián", now)
        record.review_stage = prior_stage
        db.commit()

        later = now + timedelta(days=2)
        record = scheduler.record_miss("u1", "q-tian", "tiǎn", later)

        assert record.review_stage == 0
        assert record.error_count == 2
        assert record.wrong_pinyin == "tiǎn"
        assert record.last_reviewed_at == later
        assert record.next_review_at == later + timedelta(minutes=5)

    def test_miss_never_duplicates_record(self, scheduler, db, sample_questions, now):
        scheduler.record_miss("u1", "q-tian", "a", now)
        scheduler.record_miss("u1", "q-tian", "b", now)

        assert db.query(MistakeRecord).count() == 1

    def test_commit_failure_raises_persistence_error(self, scheduler, db, sample_questions, now, monkeypatch):
        def broken_commit():
            raise SQLAlchemyError("disk I/O error")

        monkeypatch.setattr(db, "commit", broken_commit)
        with pytest.raises(PersistenceError):
            scheduler.record_miss("u1", "q-tian", "tián", now)


class TestRecordSuccess:
    """测试记录复习答对"""

    @pytest.mark.parametrize("stage,minutes", [
        (0, 30), (1, 720), (2, 1440), (3, 2880), (4, 5760), (5, 10080), (6, 21600),
    ])
    def test_ladder_advances_one_stage(self, scheduler, sample_questions, now, stage, minutes):
        record = scheduler.record_miss("u1", "q-tian", "tián", now)

        record = scheduler.record_success(record.id, stage, now)

        assert record.review_stage == stage + 1
        assert record.last_reviewed_at == now
        assert record.next_review_at == now + timedelta(minutes=minutes)

    def test_last_stage_parks_for_thirty_days(self, scheduler, sample_questions, now):
        record = scheduler.record_miss("u1", "q-tian", "tián", now)

        record = scheduler.record_success(record.id, 7, now)

        assert record.review_stage == 8
        assert record.next_review_at == now + timedelta(days=30)

    def test_three_successful_reviews(self, scheduler, sample_questions, now):
        record = scheduler.record_miss("u1", "q-tian", "tián", now)

        t = record.next_review_at
        record = scheduler.record_success(record.id, record.review_stage, t)
        t = record.next_review_at
        record = scheduler.record_success(record.id, record.review_stage, t)
        t3 = record.next_review_at
        record = scheduler.record_success(record.id, record.review_stage, t3)

        assert record.review_stage == 3
        assert record.next_review_at == t3 + timedelta(minutes=1440)

    def test_repeated_call_with_same_stage_is_idempotent(self, scheduler, sample_questions, now):
        record = scheduler.record_miss("u1", "q-tian", "tián", now)

        first = scheduler.record_success(record.id, 2, now).next_review_at
        second = scheduler.record_success(record.id, 2, now)

        assert second.review_stage == 3
        assert second.next_review_at == first

    def test_unknown_mistake_returns_none(self, scheduler, now):
        assert scheduler.record_success(9999, 0, now) is None


class TestDueMistakes:
    """测试到期查询"""

    def test_only_due_records_sorted_ascending(self, scheduler, db, sample_questions, now):
        a = scheduler.record_miss("u1", "q-tian", "x", now - timedelta(hours=1))
        b = scheduler.record_miss("u1", "q-di", "x", now - timedelta(days=3))
        c = scheduler.record_miss("u1", "q-nihao", "x", now)

        due = scheduler.due_mistakes("u1", now)

        # c 的到期时间是 now + 5分钟，不在其中
        assert [d.mistake_id for d in due] == [b.id, a.id]
        assert c.id not in [d.mistake_id for d in due]

    def test_boundary_is_inclusive(self, scheduler, sample_questions, now):
        record = scheduler.record_miss("u1", "q-tian", "x", now)

        due = scheduler.due_mistakes("u1", record.next_review_at)

        assert [d.mistake_id for d in due] == [record.id]

    def test_long_overdue_still_included(self, scheduler, sample_questions, now):
        scheduler.record_miss("u1", "q-tian", "x", now - timedelta(days=365))

        assert len(scheduler.due_mistakes("u1", now)) == 1

    def test_excludes_other_users(self, scheduler, sample_questions, now):
        past = now - timedelta(hours=1)
        scheduler.record_miss("u1", "q-tian", "x", past)
        scheduler.record_miss("u2", "q-di", "x", past)

        due = scheduler.due_mistakes("u1", now)

        assert [d.question_id for d in due] == ["q-tian"]

    def test_joined_with_question_content(self, scheduler, sample_questions, now):
        scheduler.record_miss("u1", "q-nihao", "ni hao", now - timedelta(hours=1))

        due = scheduler.due_mistakes("u1", now)[0]

        assert due.content == "你好"
        assert due.pinyin == "nǐ hǎo"
        assert due.wrong_pinyin == "ni hao"

    def test_deleted_question_is_filtered(self, scheduler, db, sample_questions, now):
        make_question(db, "q-gone", "走", "zǒu", is_deleted=True)
        scheduler.record_miss("u1", "q-gone", "x", now - timedelta(hours=1))
        scheduler.record_miss("u1", "q-tian", "x", now - timedelta(hours=1))

        due = scheduler.due_mistakes("u1", now)

        assert [d.question_id for d in due] == ["q-tian"]

    def test_question_requires_is_deleted_flag(self, db):
        from sqlalchemy.exc import IntegrityError

        db.add(Question(id="q-null", question_type="character", content="人",
                        pinyin="rén", is_deleted=None))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()

    def test_missing_question_is_filtered(self, scheduler, db, sample_questions, now):
        db.add(MistakeRecord(
            user_id="u1",
            question_id="q-missing",
            wrong_pinyin="x",
            error_count=1,
            review_stage=0,
            next_review_at=now - timedelta(hours=1),
        ))
        db.commit()

        assert scheduler.due_mistakes("u1", now) == []

    def test_empty_due_set(self, scheduler, now):
        assert scheduler.due_mistakes("nobody", now) == []


class TestStatsAndOutcome:
    """测试统计与通用调度接口"""

    def test_stats(self, scheduler, sample_questions, now):
        a = scheduler.record_miss("u1", "q-tian", "x", now - timedelta(hours=1))
        scheduler.record_miss("u1", "q-di", "x", now)
        scheduler.record_success(a.id, 7, now - timedelta(hours=1))

        stats = scheduler.stats("u1", now)

        assert stats == {"total": 2, "due": 0, "mastered": 1}

    def test_record_outcome_miss_and_success(self, scheduler, sample_questions, now):
        scheduler.record_outcome("u1", "q-tian", False, now, answer="tián")
        record = scheduler.record_outcome("u1", "q-tian", True, now)

        assert record.review_stage == 1
        assert record.error_count == 1

    def test_record_outcome_success_without_record_is_noop(self, scheduler, sample_questions, now):
        assert scheduler.record_outcome("u1", "q-tian", True, now) is None

    def test_due_items_matches_due_mistakes(self, scheduler, sample_questions, now):
        scheduler.record_miss("u1", "q-tian", "x", now - timedelta(hours=1))

        assert [d.mistake_id for d in scheduler.due_items("u1", now)] == \
            [d.mistake_id for d in scheduler.due_mistakes("u1", now)]
