"""Room analysis via the Anthropic Messages API."""

import json
import logging
from typing import Optional

from anthropic import AsyncAnthropic, APIError
from pydantic import ValidationError as SchemaError

from backend import config
from backend.ai.prompts import ROOM_ANALYSIS_SYSTEM, build_analysis_content
from backend.models import AnalysisResult

logger = logging.getLogger(__name__)


class AnalysisError(Exception):
    """The AI call failed or returned something unusable."""


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        text = text.split("```")[1]
        if text.startswith("json"):
            text = text[4:]
        text = text.strip()
    return text


def parse_analysis(response_text: str) -> AnalysisResult:
    """Parse the model's JSON reply into an AnalysisResult."""
    try:
        parsed = json.loads(_strip_code_fence(response_text))
        return AnalysisResult.model_validate(parsed)
    except json.JSONDecodeError as e:
        raise AnalysisError("AI response could not be parsed") from e
    except SchemaError as e:
        raise AnalysisError("AI response was missing required fields") from e


class RoomAnalyzer:
    """Wraps the AI client; the client is created on first use."""

    def __init__(self, client: Optional[AsyncAnthropic] = None, model: str = ""):
        self._client = client
        self.model = model or config.ANALYSIS_MODEL

    def _get_client(self) -> AsyncAnthropic:
        if self._client is None:
            if not config.ANTHROPIC_API_KEY:
                raise AnalysisError("ANTHROPIC_API_KEY not configured")
            self._client = AsyncAnthropic(api_key=config.ANTHROPIC_API_KEY)
        return self._client

    async def analyze(
        self,
        image_base64: str,
        media_type: str,
        mode: str,
        plan: str,
        instructions: Optional[str] = None,
    ) -> AnalysisResult:
        client = self._get_client()
        try:
            response = await client.messages.create(
                model=self.model,
                max_tokens=config.ANALYSIS_MAX_TOKENS,
                system=ROOM_ANALYSIS_SYSTEM,
                messages=[{
                    "role": "user",
                    "content": build_analysis_content(image_base64, media_type, mode, plan, instructions),
                }],
            )
        except APIError as e:
            logger.warning("Room analysis request failed: %s", e, exc_info=True)
            raise AnalysisError("AI request failed") from e

        if not response.content:
            raise AnalysisError("AI response was empty")
        return parse_analysis(response.content[0].text)
