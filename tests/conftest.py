# tests/conftest.py
import json

import httpx
import mongomock
import pytest
import pytest_asyncio

from journey.services.ai import AIService, ChatCompletionClient
from journey.services.auth import AuthProvider
from journey.services.store import DocumentStore


class FakeCompletions:
    """MockTransport handler that replays canned replies and keeps request bodies"""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append({
            "url": str(request.url),
            "headers": dict(request.headers),
            "body": json.loads(request.content),
        })
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, httpx.Response):
            return reply
        return httpx.Response(200, json={
            "id": "chatcmpl-test",
            "choices": [{"index": 0, "message": {"role": "assistant", "content": reply}}],
        })


@pytest.fixture
def fake_completions():
    return FakeCompletions


@pytest.fixture
def make_ai():
    def build(handler) -> AIService:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return AIService(ChatCompletionClient(api_key="test-key", http_client=http_client))
    return build


@pytest.fixture
def database():
    return mongomock.MongoClient()["journey_test"]


@pytest.fixture
def auth(database):
    return AuthProvider(database, rounds=4)


@pytest.fixture
def store(database, auth):
    return DocumentStore(database, auth)


@pytest_asyncio.fixture
async def student(auth):
    return await auth.sign_up("Ada@Example.com", "secret", "Ada Lovelace")


@pytest.fixture
def recommendations_reply():
    return """Here are my suggestions:
```json
{
  "recommendations": [
    {
      "title": "Take AP Biology",
      "description": "Build a science foundation",
      "gradeLevel": 11,
      "category": "Academic",
      "dueDate": "2025-05-01",
      "resources": [
        {"title": "Khan Academy", "description": "Free biology course", "url": "https://khanacademy.org", "type": "online"},
        {"title": "Mystery", "description": "Unknown", "url": "", "type": "podcast"}
      ]
    },
    {
      "title": "Volunteer at a clinic",
      "description": "Get patient exposure",
      "gradeLevel": 10,
      "category": "extracurricular",
      "resources": []
    }
  ]
}
```
Good luck!"""
