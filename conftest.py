"""
Shared pytest setup: a throwaway SQLite database, no network, and fakes for
the OpenAI client and the Chroma collection.
"""

import os
import sys
import uuid
import tempfile

import pytest

ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, ROOT)

# must be set before db.py is imported anywhere
_DB_DIR = tempfile.mkdtemp(prefix="riasec-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["OPENAI_API_KEY"] = ""
os.environ["SIMILAR_CASES_ENABLED"] = "false"
os.environ["JWT_SECRET"] = "test-secret"


VALID_RECOMMENDATION = {
    "recommendations": [
        {"major": "Software Engineering", "matchRate": 82, "reason": "Strong investigative and conventional interests."},
        {"major": "Computer Engineering", "matchRate": 90, "reason": "Enjoys logical problem solving and building systems."},
        {"major": "Information Statistics", "matchRate": 75, "reason": "Likes data and careful analysis."},
    ],
    "explanation": "Your profile leans towards investigative work with a structured style.",
}


class FakeLLM:
    """
    Stand-in for LLMClient.

    json_responses are returned in order by complete_json (an Exception
    instance in the list is raised instead). `error` makes every call raise.
    """

    def __init__(self, json_responses=None, text="Happy to help you explore majors.",
                 error=None, configured=True, embed_error=None):
        self.json_responses = list(json_responses or [])
        self.text = text
        self.error = error
        self.embed_error = embed_error
        self.is_configured = configured
        self.calls = []

    def complete_json(self, user, system=None, temperature=0.3, max_tokens=None):
        self.calls.append({"kind": "json", "user": user, "system": system, "temperature": temperature})
        if self.error:
            raise self.error
        if not self.json_responses:
            return {}
        item = self.json_responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def complete_text(self, user, system=None, temperature=0.7, max_tokens=None):
        self.calls.append({"kind": "text", "user": user, "system": system,
                           "temperature": temperature, "max_tokens": max_tokens})
        if self.error:
            raise self.error
        return self.text

    def embed(self, text):
        self.calls.append({"kind": "embed", "user": text})
        if self.embed_error:
            raise self.embed_error
        return [float(len(text) % 7), 1.0, 0.5]


class FakeCollection:
    """Minimal in-memory Chroma collection: count, upsert and query."""

    def __init__(self, fail_query=False):
        self.records = {}
        self.upsert_calls = 0
        self.fail_query = fail_query

    def count(self):
        return len(self.records)

    def upsert(self, ids, embeddings, metadatas, documents=None):
        self.upsert_calls += 1
        for i, record_id in enumerate(ids):
            self.records[record_id] = {
                "embedding": embeddings[i],
                "metadata": metadatas[i],
                "document": documents[i] if documents else None,
            }

    def query(self, query_embeddings, n_results, include=None):
        if self.fail_query:
            raise RuntimeError("index unavailable")
        ids = list(self.records)[:n_results]
        return {
            "ids": [ids],
            "metadatas": [[self.records[i]["metadata"] for i in ids]],
            "distances": [[0.1 * (rank + 1) for rank in range(len(ids))]],
        }


@pytest.fixture
def fake_llm():
    return FakeLLM(json_responses=[VALID_RECOMMENDATION])


@pytest.fixture
def fake_collection():
    return FakeCollection()


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from main import app

    app.dependency_overrides.clear()
    # no `with`: the lifespan (index initialization) is skipped
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


def _student_id() -> str:
    return "2022" + f"{uuid.uuid4().int % 100000:05d}"


@pytest.fixture
def auth_headers(client):
    """Register a fresh user and return bearer headers for it."""
    def _register():
        for _ in range(5):
            response = client.post("/auth/register", json={
                "student_id": _student_id(),
                "username": f"user_{uuid.uuid4().hex[:10]}",
                "password": "secret123",
            })
            if response.status_code == 201:
                return {"Authorization": f"Bearer {response.json()['access_token']}"}
        raise AssertionError(f"could not register a test user: {response.text}")
    return _register
