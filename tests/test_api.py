from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from sawasdee.config import Settings
from sawasdee.main import create_app
from sawasdee.srs import ReviewScheduler
from sawasdee.store import InMemoryKeyValueStore, StoreError


class _BrokenWriteStore(InMemoryKeyValueStore):
    def set(self, key: str, value: str) -> None:
        raise StoreError("disk full")


def _client(scheduler: ReviewScheduler, **overrides) -> TestClient:
    cfg = Settings(_env_file=None, srs_store_backend="memory", **overrides)
    return TestClient(create_app(scheduler, cfg=cfg))


@pytest.fixture()
def client(scheduler: ReviewScheduler) -> TestClient:
    return _client(scheduler, srs_max_due=3)


def test_health(client: TestClient):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_due_is_capped_by_setting_and_query(client: TestClient):
    body = client.get("/api/review/due").json()
    assert body["total"] == 40
    assert [card["id"] for card in body["items"]] == ["v1", "v2", "v3"]
    assert body["items"][0] == {
        "id": "v1",
        "text": "สวัสดี",
        "translation": "Hello / Goodbye",
        "difficulty": "beginner",
        "romanization": "sa-wat-dee",
    }

    body = client.get("/api/review/due", params={"limit": 5}).json()
    assert len(body["items"]) == 5


def test_grade_updates_schedule_and_stats(client: TestClient, clock):
    resp = client.post("/api/review/grade", json={"item_id": "v1", "quality": 5})
    assert resp.status_code == 200
    body = resp.json()
    assert body["ok"] is True
    assert body["interval"] == 1
    assert body["repetitions"] == 1
    assert body["ease_factor"] == pytest.approx(2.6)
    assert datetime.fromisoformat(body["next_due"]) == clock.now + timedelta(days=1)

    stats = client.get("/api/review/stats").json()
    assert stats == {
        "total_words_learned": 1,
        "words_for_review": 39,
        "mastered_words": 0,
        "review_streak": 1,
    }

    state = client.get("/api/review/items/v1").json()
    assert state["wordId"] == "v1"
    assert state["totalReviews"] == 1
    assert state["correctReviews"] == 1


@pytest.mark.parametrize("payload", [{"item_id": "v1", "quality": 6}, {"item_id": "v1", "quality": -1}, {"item_id": "", "quality": 3}])
def test_grade_validates_input(client: TestClient, payload: dict):
    assert client.post("/api/review/grade", json=payload).status_code == 422


def test_new_items_skip_tracked_words(client: TestClient):
    client.post("/api/review/grade", json={"item_id": "v1", "quality": 3})

    body = client.get("/api/review/new", params={"count": 2}).json()
    assert [card["id"] for card in body["items"]] == ["v2", "v3"]


def test_save_is_idempotent(client: TestClient):
    payload = {"item_id": "story-word-2-5", "text": "แมว", "translation": "Cat"}
    assert client.post("/api/review/save", json=payload).json() == {"ok": True, "created": True}
    assert client.post("/api/review/save", json=payload).json() == {"ok": True, "created": False}

    assert client.get("/api/review/saved/story-word-2-5").json() == {"item_id": "story-word-2-5", "saved": True}
    assert client.get("/api/review/saved/v9").json()["saved"] is False


def test_reset_clears_progress(client: TestClient):
    client.post("/api/review/grade", json={"item_id": "v1", "quality": 4})

    assert client.delete("/api/review/state").json() == {"ok": True}
    stats = client.get("/api/review/stats").json()
    assert stats["total_words_learned"] == 0
    assert stats["words_for_review"] == 40


def test_strict_mode_returns_404_for_unknown_items(memory_store, clock):
    scheduler = ReviewScheduler(memory_store, clock=clock, strict_item_ids=True)
    client = _client(scheduler)

    assert client.post("/api/review/grade", json={"item_id": "zz", "quality": 4}).status_code == 404
    assert client.post("/api/review/save", json={"item_id": "zz"}).status_code == 404


def test_surfaced_write_failure_maps_to_503(clock):
    scheduler = ReviewScheduler(_BrokenWriteStore(), clock=clock, raise_on_write_error=True)
    client = _client(scheduler)

    assert client.post("/api/review/grade", json={"item_id": "v1", "quality": 4}).status_code == 503
    assert client.post("/api/review/save", json={"item_id": "v1"}).status_code == 503


def test_request_id_header(client: TestClient):
    resp = client.get("/healthz")
    assert resp.headers.get("X-Request-ID")

    resp = client.get("/healthz", headers={"X-Request-ID": "req-fixed"})
    assert resp.headers["X-Request-ID"] == "req-fixed"


@pytest.mark.parametrize("header", ["x" * 65, "req id with spaces", "../etc/passwd", "<script>"])
def test_malformed_request_id_is_replaced(client: TestClient, header: str):
    resp = client.get("/healthz", headers={"X-Request-ID": header})

    echoed = resp.headers["X-Request-ID"]
    assert echoed != header
    assert len(echoed) == 36  # uuid4


@pytest.mark.parametrize("quality", [3.9, True, "3"])
def test_grade_rejects_non_integer_quality(client: TestClient, quality):
    resp = client.post("/api/review/grade", json={"item_id": "v1", "quality": quality})

    assert resp.status_code == 422
    assert client.get("/api/review/saved/v1").json()["saved"] is False


def test_repeated_perfect_grades_never_fail(client: TestClient, clock):
    for _ in range(30):
        resp = client.post("/api/review/grade", json={"item_id": "v1", "quality": 5})
        assert resp.status_code == 200
        clock.advance(days=1)
    assert resp.json()["interval"] == 36500
