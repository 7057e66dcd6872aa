# tests/test_ai.py
import httpx
import pytest

from journey.config import AI_TIMEOUT
from journey.errors import AINetworkError, InvalidAIResponseError, UnknownAIError
from journey.models.roadmap import Milestone, MilestoneCategory, ResourceType
from journey.models.user import User
from journey.services.ai import ChatCompletionClient
from journey.utils.prompts import COUNSELOR_SYSTEM_PROMPT


@pytest.fixture
def user():
    return User(id="uid-1", name="Ada", email="ada@example.com", grade=10,
                career_goal="Software Engineer", school="Lincoln High",
                interests=["math", "robotics"])


async def test_request_shape(make_ai, fake_completions, user):
    handler = fake_completions('{"recommendations": []}')
    ai = make_ai(handler)

    result = await ai.generate_career_recommendations(user, [])

    assert result == []
    assert len(handler.requests) == 1
    request = handler.requests[0]
    assert request["url"] == "https://api.openai.com/v1/chat/completions"
    assert request["headers"]["authorization"] == "Bearer test-key"
    body = request["body"]
    assert body["model"] == "gpt-4"
    assert body["temperature"] == 0.7
    assert body["max_tokens"] == 700
    assert body["messages"][0] == {"role": "system", "content": COUNSELOR_SYSTEM_PROMPT}
    assert body["messages"][1]["role"] == "user"
    prompt = body["messages"][1]["content"]
    assert "Current Grade: 10" in prompt
    assert "Interests: math, robotics" in prompt
    assert "No milestones completed yet." in prompt


async def test_prompt_lists_completed_milestones(make_ai, fake_completions, user):
    handler = fake_completions('{"recommendations": []}')
    done = Milestone(title="Algebra II", grade_level=9, category=MilestoneCategory.ACADEMIC, is_completed=True)

    await make_ai(handler).generate_career_recommendations(user, [done])

    assert "- Algebra II (Grade 9, academic)" in handler.requests[0]["body"]["messages"][1]["content"]


async def test_recommendations_are_parsed(make_ai, fake_completions, user, recommendations_reply):
    ai = make_ai(fake_completions(recommendations_reply))

    recommendations = await ai.generate_career_recommendations(user, [])

    assert [r.title for r in recommendations] == ["Take AP Biology", "Volunteer at a clinic"]


async def test_non_200_is_invalid_response(make_ai, fake_completions):
    ai = make_ai(fake_completions(httpx.Response(429, json={"error": {"message": "rate limited"}})))

    with pytest.raises(InvalidAIResponseError):
        await ai.client.complete("hello")


@pytest.mark.parametrize("payload", [
    {"choices": []},
    {"choices": [{"message": {}}]},
    {"choices": [{"message": {"content": None}}]},
    {"error": "nope"},
])
async def test_bad_envelope_is_invalid_response(make_ai, fake_completions, payload):
    ai = make_ai(fake_completions(httpx.Response(200, json=payload)))

    with pytest.raises(InvalidAIResponseError):
        await ai.client.complete("hello")


async def test_non_json_body_is_invalid_response(make_ai, fake_completions):
    ai = make_ai(fake_completions(httpx.Response(200, text="<html>oops</html>")))

    with pytest.raises(InvalidAIResponseError):
        await ai.client.complete("hello")


async def test_transport_failure_is_network_error(make_ai, fake_completions):
    ai = make_ai(fake_completions(httpx.ConnectError("connection refused")))

    with pytest.raises(AINetworkError):
        await ai.client.complete("hello")


@pytest.mark.parametrize("error", [
    httpx.DecodingError("malformed gzip body"),
    httpx.TooManyRedirects("redirect loop"),
])
async def test_other_http_errors_are_unknown(make_ai, fake_completions, error):
    ai = make_ai(fake_completions(error))

    with pytest.raises(UnknownAIError) as excinfo:
        await ai.client.complete("hello")
    assert excinfo.value.message == "An unknown error occurred"


async def test_default_client_waits_for_slow_replies():
    client = ChatCompletionClient(api_key="k")
    try:
        timeout = client.http_client.timeout
        assert AI_TIMEOUT == 60
        assert timeout.read == AI_TIMEOUT
        assert timeout.connect == AI_TIMEOUT
    finally:
        await client.aclose()


async def test_reply_without_json_is_invalid(make_ai, fake_completions, user):
    ai = make_ai(fake_completions("Sorry, I can't do that right now."))

    with pytest.raises(InvalidAIResponseError):
        await ai.generate_career_recommendations(user, [])


async def test_generate_career_roadmap(make_ai, fake_completions, user):
    outline = """ACADEMIC
- [Grade 11] AP Computer Science: Core programming course

RESOURCES
- [Course] CS50: Intro to CS https://cs50.harvard.edu
- [Podcast] Ignored: not a known type
"""
    handler = fake_completions(outline)

    roadmap = await make_ai(handler).generate_career_roadmap(user, roadmap_id="rm-existing")

    assert roadmap.id == "rm-existing"
    assert roadmap.user_id == "uid-1"
    assert roadmap.career_goal == "Software Engineer"
    assert roadmap.grade == 10
    assert [(m.title, m.grade_level) for m in roadmap.milestones] == [("AP Computer Science", 11)]
    assert [(r.title, r.type, r.grade_level) for r in roadmap.resources] == [("CS50", ResourceType.COURSE, 10)]
    assert "grade 10 student interested in becoming a Software Engineer" in \
        handler.requests[0]["body"]["messages"][1]["content"]
