# journey/services/ai.py
from typing import List, Optional

import httpx
from pydantic import BaseModel, Field, StrictStr, ValidationError

from journey.config import (
    AI_MAX_TOKENS,
    AI_TEMPERATURE,
    AI_TIMEOUT,
    OPENAI_BASE_URL,
    OPENAI_MODEL,
    require_openai_api_key,
)
from journey.errors import AINetworkError, InvalidAIResponseError, UnknownAIError
from journey.models.roadmap import AIRecommendation, CareerRoadmap, Milestone
from journey.models.user import User
from journey.services.parser import parse_recommendations, parse_roadmap_outline
from journey.utils.logger import get_logger
from journey.utils.prompts import (
    COUNSELOR_SYSTEM_PROMPT,
    RECOMMENDATIONS_PROMPT,
    ROADMAP_PROMPT,
    format_completed_milestones,
)

logger = get_logger(__name__)


# Chat completion envelope; only choices[0].message.content is read

class CompletionMessage(BaseModel):
    content: StrictStr


class CompletionChoice(BaseModel):
    message: CompletionMessage


class CompletionEnvelope(BaseModel):
    choices: List[CompletionChoice] = Field(min_length=1)


class ChatCompletionClient:
    """Single-shot chat completion call: no retries, no streaming, no history"""

    def __init__(self,
                 api_key: str,
                 http_client: Optional[httpx.AsyncClient] = None,
                 base_url: str = OPENAI_BASE_URL,
                 model: str = OPENAI_MODEL,
                 temperature: float = AI_TEMPERATURE,
                 max_tokens: int = AI_MAX_TOKENS):
        self.api_key = api_key
        self.http_client = http_client or httpx.AsyncClient(timeout=AI_TIMEOUT)
        self.base_url = base_url
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    def build_request_body(self, prompt: str) -> dict:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": COUNSELOR_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    async def complete(self, prompt: str) -> str:
        """Send one prompt and return the assistant's raw text"""
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = await self.http_client.post(
                self.base_url,
                json=self.build_request_body(prompt),
                headers=headers,
            )
        except httpx.TransportError as e:
            logger.error(f"AI request failed: {e}", extra={"error_type": type(e).__name__})
            raise AINetworkError() from e
        except httpx.HTTPError as e:
            logger.error(f"AI request failed: {e}", extra={"error_type": type(e).__name__})
            raise UnknownAIError() from e

        if response.status_code != 200:
            logger.error(f"AI endpoint returned {response.status_code}",
                         extra={"status": response.status_code})
            raise InvalidAIResponseError()

        try:
            envelope = CompletionEnvelope.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Unexpected AI response envelope: {e}")
            raise InvalidAIResponseError() from e

        return envelope.choices[0].message.content

    async def aclose(self) -> None:
        await self.http_client.aclose()


class AIService:
    def __init__(self, client: ChatCompletionClient):
        self.client = client

    @classmethod
    def from_config(cls) -> "AIService":
        return cls(ChatCompletionClient(api_key=require_openai_api_key()))

    async def generate_career_recommendations(self,
                                              user: User,
                                              completed_milestones: List[Milestone]) -> List[AIRecommendation]:
        """Ask for 3-5 JSON recommendations building on what the student already finished"""
        prompt = RECOMMENDATIONS_PROMPT.format(
            grade=user.grade,
            career_goal=user.career_goal,
            school=user.school,
            interests=", ".join(user.interests),
            completed_milestones=format_completed_milestones(completed_milestones),
        )

        logger.info("Requesting career recommendations", extra={"user_id": user.id})
        response = await self.client.complete(prompt)
        recommendations = parse_recommendations(response)
        logger.info(f"Parsed {len(recommendations)} recommendations", extra={"user_id": user.id})
        return recommendations

    async def generate_career_roadmap(self, user: User, roadmap_id: Optional[str] = None) -> CareerRoadmap:
        """Ask for a full outline roadmap and build a fresh CareerRoadmap from it"""
        prompt = ROADMAP_PROMPT.format(grade=user.grade, career_goal=user.career_goal)

        logger.info("Requesting career roadmap", extra={"user_id": user.id})
        response = await self.client.complete(prompt)
        milestones, resources = parse_roadmap_outline(response, grade=user.grade)

        roadmap = CareerRoadmap(user_id=user.id, career_goal=user.career_goal, grade=user.grade)
        if roadmap_id:
            roadmap.id = roadmap_id
        for milestone in milestones:
            roadmap.add_milestone(milestone)
        for resource in resources:
            roadmap.add_resource(resource)
        return roadmap
