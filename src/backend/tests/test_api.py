"""
HTTP 接口测试

使用 TestClient + dependency_overrides 把数据库切换到内存 SQLite
"""
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from pinyin_review.api import review as review_api
from pinyin_review.core.clock import utcnow
from pinyin_review.core.config import ReviewSettings
from pinyin_review.core.database import get_db
from pinyin_review.llm import LLMConfig
from pinyin_review.models import MistakeRecord
from pinyin_review.services import AIAugmenter, MistakeScheduler, ReviewSessionBuilder

from conftest import MockLLMClient


@pytest.fixture
def app(session_factory):
    from main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[review_api.get_settings] = lambda: ReviewSettings()
    review_api.reset_sessions()
    yield app
    app.dependency_overrides.clear()
    review_api.reset_sessions()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def overdue(db, sample_questions):
    """两道已到期错题"""
    scheduler = MistakeScheduler(db)
    past = utcnow() - timedelta(hours=2)
    return [
        scheduler.record_miss("u1", "q-tian", "tián", past),
        scheduler.record_miss("u1", "q-di", "dí", past + timedelta(minutes=1)),
    ]


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestMistakesAPI:
    """测试错题本接口"""

    def test_record_miss_and_list(self, client, sample_questions):
        response = client.post("/api/mistakes", json={
            "user_id": "u1", "question_id": "q-tian", "wrong_pinyin": "tián"
        })

        assert response.status_code == 201
        body = response.json()
        assert body["review_stage"] == 0
        assert body["content"] == "天"

        mistakes = client.get("/api/mistakes", params={"user_id": "u1"}).json()
        assert [m["question_id"] for m in mistakes] == ["q-tian"]

    def test_record_miss_unknown_question(self, client, sample_questions):
        response = client.post("/api/mistakes", json={
            "user_id": "u1", "question_id": "missing", "wrong_pinyin": "x"
        })

        assert response.status_code == 404

    def test_due_and_stats(self, client, overdue):
        due = client.get("/api/mistakes/due", params={"user_id": "u1"}).json()
        stats = client.get("/api/mistakes/stats", params={"user_id": "u1"}).json()

        assert [m["content"] for m in due] == ["天", "地"]
        assert stats == {"total": 2, "due": 2, "mastered": 0}

    def test_record_success(self, client, overdue):
        response = client.post(f"/api/mistakes/{overdue[0].id}/success", json={"current_stage": 0})

        assert response.status_code == 200
        assert response.json()["review_stage"] == 1

    def test_record_success_unknown(self, client):
        response = client.post("/api/mistakes/999/success", json={"current_stage": 0})

        assert response.status_code == 404


class TestPinyinAPI:
    """测试拼音学习接口"""

    def test_list_symbols(self, client, sample_symbols):
        symbols = client.get("/api/pinyin/symbols", params={"category": "initial"}).json()

        assert [s["id"] for s in symbols] == ["b", "p"]

    def test_record_progress_and_review(self, client, sample_symbols):
        response = client.post("/api/pinyin/progress", json={
            "user_id": "u1", "symbol_id": "b", "is_mastered": False
        })
        assert response.status_code == 200

        review = client.get("/api/pinyin/review", params={"user_id": "u1"}).json()
        assert [r["id"] for r in review] == ["b"]
        assert review[0]["study_count"] == 1

        progress = client.get("/api/pinyin/progress", params={"user_id": "u1"}).json()
        assert progress["total_symbols"] == 3
        assert progress["studied"] == 1
        assert progress["mastered"] == 0

    def test_record_progress_unknown_symbol(self, client, sample_symbols):
        response = client.post("/api/pinyin/progress", json={
            "user_id": "u1", "symbol_id": "zz", "is_mastered": True
        })

        assert response.status_code == 404

    @pytest.mark.parametrize("limit", [-1, 0, 101])
    def test_review_limit_out_of_range(self, client, sample_symbols, limit):
        response = client.get("/api/pinyin/review", params={"user_id": "u1", "limit": limit})

        assert response.status_code == 422


class TestReviewAPI:
    """测试复习会话接口"""

    def test_full_session(self, client, db, overdue):
        started = client.post("/api/review/sessions", json={"user_id": "u1"})
        assert started.status_code == 201
        state = started.json()
        session_id = state["session_id"]
        assert state["total"] == 2
        assert state["current"]["content"] == "天"
        assert "pinyin" not in state["current"]

        answer = client.post(f"/api/review/sessions/{session_id}/answer", json={"answer": "tiān"}).json()
        assert answer == {
            "correct": True, "correct_pinyin": "tiān", "persisted": True, "error": None, "has_next": True
        }

        again = client.post(f"/api/review/sessions/{session_id}/answer", json={"answer": "tiān"})
        assert again.status_code == 409

        state = client.post(f"/api/review/sessions/{session_id}/advance").json()
        assert state["current"]["content"] == "地"

        answer = client.post(f"/api/review/sessions/{session_id}/answer", json={"answer": "de"}).json()
        assert answer["correct"] is False
        assert answer["has_next"] is False

        state = client.post(f"/api/review/sessions/{session_id}/advance").json()
        assert state["finished"] is True
        assert state["correct_count"] == 1
        assert client.get(f"/api/review/sessions/{session_id}").status_code == 404

        db.expire_all()
        records = {r.question_id: r for r in db.query(MistakeRecord).all()}
        assert records["q-tian"].review_stage == 1
        assert records["q-di"].review_stage == 0
        assert records["q-di"].error_count == 2

    def test_empty_session(self, client, sample_questions):
        state = client.post("/api/review/sessions", json={"user_id": "u1"}).json()

        assert state["total"] == 0
        assert state["finished"] is True
        assert state["current"] is None

    def test_unknown_session(self, client):
        assert client.get("/api/review/sessions/nope").status_code == 404

    def test_session_with_ai_items(self, app, client, session_factory, overdue):
        llm = MockLLMClient(content='[{"content": "天空", "pinyin": "tian1 kong1"}]')
        settings = ReviewSettings(llm=LLMConfig(api_key="sk-test"))

        def override_builder():
            return ReviewSessionBuilder(session_factory(), settings, augmenter=AIAugmenter(llm))

        app.dependency_overrides[review_api.get_session_builder] = override_builder

        state = client.post("/api/review/sessions", json={"user_id": "u1"}).json()

        assert state["total"] == 3
        assert len(llm.calls) == 1

    def test_new_session_replaces_previous(self, client, overdue):
        first = client.post("/api/review/sessions", json={"user_id": "u1"}).json()["session_id"]
        second = client.post("/api/review/sessions", json={"user_id": "u1"}).json()["session_id"]

        assert first != second
        assert client.get(f"/api/review/sessions/{first}").status_code == 404
        assert client.get(f"/api/review/sessions/{second}").status_code == 200
        assert list(review_api._sessions) == [second]

    def test_repeated_starts_keep_one_session_per_user(self, client, overdue):
        for _ in range(20):
            client.post("/api/review/sessions", json={"user_id": "u1"})

        assert len(review_api._sessions) == 1
        assert len(review_api._user_sessions) == 1

    def test_expired_session_is_gone(self, client, overdue):
        session_id = client.post("/api/review/sessions", json={"user_id": "u1"}).json()["session_id"]
        review_api._sessions[session_id].created_at -= review_api.SESSION_TTL + timedelta(minutes=1)

        assert client.get(f"/api/review/sessions/{session_id}").status_code == 404
        assert session_id not in review_api._sessions
        assert "u1" not in review_api._user_sessions

    def test_prune_sessions(self, client, overdue):
        client.post("/api/review/sessions", json={"user_id": "u1"})

        assert review_api.prune_sessions(utcnow()) == 0
        assert review_api.prune_sessions(utcnow() + review_api.SESSION_TTL + timedelta(minutes=1)) == 1
        assert review_api._sessions == {}


class TestLevelsAPI:
    """测试关卡成绩接口"""

    def test_save_and_list(self, client):
        client.post("/api/levels/progress", json={"user_id": "u1", "level_id": 2, "stars": 2, "score": 80})
        client.post("/api/levels/progress", json={"user_id": "u1", "level_id": 1, "stars": 3, "score": 100})
        response = client.post("/api/levels/progress", json={
            "user_id": "u1", "level_id": 2, "stars": 1, "score": 50
        })

        assert response.status_code == 200
        assert response.json()["stars"] == 2
        assert response.json()["score"] == 80

        body = client.get("/api/levels/progress", params={"user_id": "u1"}).json()
        assert body["total_score"] == 180
        assert [level["level_id"] for level in body["levels"]] == [1, 2]

    def test_empty_progress(self, client):
        body = client.get("/api/levels/progress", params={"user_id": "nobody"}).json()

        assert body == {"total_score": 0, "levels": []}

    @pytest.mark.parametrize("stars,score", [(4, 10), (-1, 10), (2, -5)])
    def test_invalid_result_rejected(self, client, stars, score):
        response = client.post("/api/levels/progress", json={
            "user_id": "u1", "level_id": 1, "stars": stars, "score": score
        })

        assert response.status_code == 422
