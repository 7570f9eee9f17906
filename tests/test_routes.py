"""
HTTP tests for the routers, backed by the in-memory adapter.
"""

import random

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from conftest import FakeAdapter
from wordbank.routes.challenge import router as challenge_router
from wordbank.routes.quiz import router as quiz_router
from wordbank.routes.session import router as session_router
from wordbank.routes.stats import router as stats_router
from wordbank.routes.vocab import router as vocab_router
from wordbank.services.registry import SchedulerRegistry, get_registry

HEADERS = {"X-User-Id": "learner-1"}
PAST = "2020-01-01T00:00:00Z"


def _word(item_id, source, target, example=None):
    doc = {"id": item_id, "sourceText": source, "targetText": target}
    if example:
        doc["example"] = {"sentence": example[0], "translation": example[1]}
    return doc


def _progress(item_id, status="New", interval=0, repetitions=0, next_review=PAST):
    return {
        "itemId": item_id,
        "status": status,
        "easiness": 2.5,
        "interval": interval,
        "repetitions": repetitions,
        "nextReviewDate": next_review,
        "lastCorrect": None,
    }


@pytest.fixture
def adapter():
    return FakeAdapter(
        items=[
            _word("w1", "alma", "りんご"),
            _word("w2", "kutya", "犬", example=("A kutya ugat.", "犬が吠える。")),
            _word("w3", "ház", "家"),
            _word("w4", "víz", "水"),
        ],
        progress=[
            _progress("w1"),
            _progress("w2", next_review="2020-01-02T00:00:00Z"),
            _progress("w3", status="Learning", interval=6, repetitions=2, next_review="2999-01-01T00:00:00Z"),
            _progress("w4", status="Learning", interval=1, repetitions=1, next_review="2999-01-01T00:00:00Z"),
        ],
    )


@pytest.fixture
def client(adapter):
    registry = SchedulerRegistry(
        adapter_factory=lambda: adapter,
        seed_starter=False,
        rng_factory=lambda: random.Random(0),
    )
    app = FastAPI()
    for router in (vocab_router, session_router, quiz_router, stats_router, challenge_router):
        app.include_router(router)
    app.dependency_overrides[get_registry] = lambda: registry

    with TestClient(app) as test_client:
        yield test_client


def test_requests_need_a_learner_id(client):
    assert client.get("/vocab").status_code == 400


class TestVocabRoutes:
    def test_list_and_get(self, client):
        res = client.get("/vocab", headers=HEADERS)
        assert res.status_code == 200
        assert [row["id"] for row in res.json()] == ["w1", "w2", "w3", "w4"]

        learning = client.get("/vocab", params={"status": "learning"}, headers=HEADERS).json()
        assert {row["id"] for row in learning} == {"w3", "w4"}

        found = client.get("/vocab", params={"search": "KUTY"}, headers=HEADERS).json()
        assert [row["id"] for row in found] == ["w2"]

        one = client.get("/vocab/w2", headers=HEADERS).json()
        assert one["example"] == {"sentence": "A kutya ugat.", "translation": "犬が吠える。"}

        assert client.get("/vocab/nope", headers=HEADERS).status_code == 404

    def test_create_is_idempotent(self, client):
        payload = {"sourceText": "Szia", "targetText": "やあ"}
        first = client.post("/vocab", json=payload, headers=HEADERS).json()
        second = client.post("/vocab", json=payload, headers=HEADERS).json()

        assert first["applied"] is True
        assert first["vocab"]["status"] == "New"
        assert first["vocab"]["contextTag"] == "seen in chat"
        assert second == {"applied": False, "vocab": None}

        rows = client.get("/vocab", params={"search": "szia"}, headers=HEADERS).json()
        assert len(rows) == 1

    def test_update_and_delete(self, client):
        res = client.put(
            "/vocab/w1",
            json={"targetText": "林檎", "example": {"sentence": "Eszem egy almát.", "translation": "りんごを食べる。"}},
            headers=HEADERS,
        ).json()
        assert res["applied"] is True
        assert res["vocab"]["targetText"] == "林檎"
        assert res["vocab"]["example"]["sentence"] == "Eszem egy almát."

        assert client.delete("/vocab/w1", headers=HEADERS).json() == {"deleted": True}
        assert client.get("/vocab/w1", headers=HEADERS).status_code == 404
        assert client.delete("/vocab/w1", headers=HEADERS).json() == {"deleted": False}
        assert client.put("/vocab/w1", json={"targetText": "x"}, headers=HEADERS).json()["applied"] is False

    def test_status_overrides_and_stats(self, client):
        assert client.get("/stats", headers=HEADERS).json() == {"newCount": 2, "learningCount": 2, "masteredCount": 0}

        mastered = client.post("/vocab/w1/mastered", headers=HEADERS).json()
        assert mastered["vocab"]["status"] == "Mastered"
        assert mastered["vocab"]["interval"] == 365

        learning = client.post("/vocab/w3/learning", headers=HEADERS).json()
        assert learning["vocab"]["interval"] == 0

        assert client.get("/stats", headers=HEADERS).json() == {"newCount": 1, "learningCount": 2, "masteredCount": 1}
        assert client.post("/vocab/nope/mastered", headers=HEADERS).json() == {"applied": False, "vocab": None}


class TestSessionAndQuiz:
    def test_due_words_respect_limit(self, client):
        due = client.get("/session/due", params={"limit": 1}, headers=HEADERS).json()
        assert [row["id"] for row in due] == ["w1"]

        due = client.get("/session/due", headers=HEADERS).json()
        assert sorted(row["id"] for row in due) == ["w1", "w2"]

    def test_quiz_session_puts_example_first(self, client):
        body = client.get("/session/quiz", headers=HEADERS).json()
        assert body["empty"] is False
        variants = [(row["itemId"], row["variant"]) for row in body["items"]]
        assert len(variants) == 3
        assert variants.index(("w2", "withExample")) < variants.index(("w2", "plain"))
        for row in body["items"]:
            assert row["answer"] in row["options"]
            if row["variant"] == "plain":
                assert row["example"] is None

    def test_submit_answer_by_flag_and_by_text(self, client):
        first = client.post("/quiz/answer", json={"itemId": "w1", "correct": True}, headers=HEADERS).json()
        assert first["applied"] is True
        assert first["vocab"]["interval"] == 1
        assert first["vocab"]["repetitions"] == 1

        typed = client.post(
            "/quiz/answer",
            json={"itemId": "w2", "answer": "kutya", "direction": "targetToSource"},
            headers=HEADERS,
        ).json()
        assert typed["result"] == "correct"
        assert typed["vocab"]["lastCorrect"] is True

        wrong = client.post(
            "/quiz/answer",
            json={"itemId": "w1", "answer": "犬", "direction": "sourceToTarget"},
            headers=HEADERS,
        ).json()
        assert wrong["result"] == "incorrect"
        assert wrong["vocab"]["interval"] == 0

    def test_typed_answer_needs_a_direction(self, client):
        res = client.post("/quiz/answer", json={"itemId": "w2", "answer": "kutya"}, headers=HEADERS)
        assert res.status_code == 422
        assert client.get("/vocab/w2", headers=HEADERS).json()["repetitions"] == 0

    def test_unknown_item_answer_is_not_applied(self, client):
        res = client.post("/quiz/answer", json={"itemId": "nope", "correct": True}, headers=HEADERS)
        assert res.status_code == 200
        assert res.json()["applied"] is False

    def test_answer_needs_an_outcome(self, client):
        res = client.post("/quiz/answer", json={"itemId": "w1"}, headers=HEADERS)
        assert res.status_code == 422


class TestChallengeRoutes:
    def test_full_run(self, client):
        working_set = client.get("/challenge/set", headers=HEADERS).json()
        assert sorted(row["id"] for row in working_set) == ["w3", "w4"]

        status = client.get("/challenge", headers=HEADERS).json()
        assert status["state"] == "NotStarted"

        status = client.post("/challenge/start", headers=HEADERS).json()
        assert status["state"] == "InProgress"
        assert status["total"] == 2
        assert status["options"] == []

        first = status["currentItemId"]
        status = client.post("/challenge/answer", json={"itemId": first, "correct": False}, headers=HEADERS).json()
        assert status["incorrectCount"] == 1

        reset = client.get(f"/vocab/{first}", headers=HEADERS).json()
        assert reset["interval"] == 0
        assert reset["easiness"] == 2.5

        second = status["currentItemId"]
        status = client.post("/challenge/answer", json={"itemId": second, "correct": True}, headers=HEADERS).json()
        assert status["state"] == "Finished"
        assert status["summary"] == {"total": 2, "correctCount": 1, "incorrectCount": 1, "accuracy": 50}

    def test_manual_reset_endpoint(self, client):
        res = client.post("/challenge/w3/reset", headers=HEADERS).json()
        assert res["applied"] is True
        assert res["vocab"]["interval"] == 0
        assert res["vocab"]["repetitions"] == 0
        assert res["vocab"]["easiness"] == 2.5
        assert client.post("/challenge/nope/reset", headers=HEADERS).json()["applied"] is False


def test_health_endpoint():
    from wordbank.main import app

    assert TestClient(app).get("/health").json() == {"status": "ok"}
