"""
Generation Collaborator - Provider-agnostic interface and Gemini REST client.

The collaborator is a black box: given a structured request it returns a
structured result or raises GenerationError.
"""

import json
from typing import Any, Protocol, TypeVar

import httpx
from pydantic import BaseModel, ValidationError
from structlog import get_logger

from app.exceptions import GenerationError
from app.models.generation import (
    ChannelRequest,
    ChannelSetup,
    ContentLength,
    ContentStrategy,
    CreatorBrief,
    FullScript,
    ScriptRequest,
    ThumbnailImage,
    ThumbnailRequest,
)

logger = get_logger(__name__)

ResultT = TypeVar("ResultT", bound=BaseModel)


class GenerationClient(Protocol):
    """
    Generation collaborator protocol.

    Any content generation backend must implement this interface.
    """

    async def generate_strategy(self, request: CreatorBrief) -> ContentStrategy:
        """
        Generate content ideas, a 7-day calendar and trends.

        Raises:
            GenerationError: If generation fails or output is unusable
        """
        ...

    async def generate_script(self, request: ScriptRequest) -> FullScript:
        """
        Generate a full script for one idea.

        Raises:
            GenerationError: If generation fails or output is unusable
        """
        ...

    async def generate_channel_setup(self, request: ChannelRequest) -> ChannelSetup:
        """
        Generate channel branding and monetization tips.

        Raises:
            GenerationError: If generation fails or output is unusable
        """
        ...

    async def generate_thumbnail(self, request: ThumbnailRequest) -> ThumbnailImage:
        """
        Generate a 16:9 thumbnail image.

        Raises:
            GenerationError: If generation fails or no image is returned
        """
        ...


# ============================================================================
# Response schemas sent to the model
# ============================================================================

_STRING = {"type": "STRING"}
_STRING_LIST = {"type": "ARRAY", "items": _STRING}

STRATEGY_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "strategySummary": _STRING,
        "trends": _STRING_LIST,
        "ideas": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "title": _STRING,
                    "seoTitle": _STRING,
                    "description": _STRING,
                    "thumbnailSuggestion": _STRING,
                    "hashtags": _STRING_LIST,
                },
            },
        },
        "calendar": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {"day": _STRING, "contentTitle": _STRING, "type": _STRING},
            },
        },
    },
}

SCRIPT_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "sections": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "label": _STRING,
                    "content": _STRING,
                    "visualCue": _STRING,
                    "audioCue": _STRING,
                },
            },
        },
        "analytics": {
            "type": "OBJECT",
            "properties": {
                "estimatedEngagement": _STRING,
                "retentionScore": {"type": "INTEGER"},
                "keywordDensity": _STRING,
            },
        },
    },
}

CHANNEL_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "name": _STRING,
        "handle": _STRING,
        "description": _STRING,
        "avatarIdea": _STRING,
        "bannerIdea": _STRING,
        "initialTips": _STRING_LIST,
        "monetizationTips": _STRING_LIST,
    },
}


def build_strategy_prompt(brief: CreatorBrief) -> str:
    """Prompt for a content strategy."""
    if brief.content_length == ContentLength.LONG:
        video_format = "Long-form video (YouTube, lessons)"
        thumbnail_line = "A descriptive thumbnail suggestion."
    else:
        video_format = "Short-form video (TikTok, Reels)"
        thumbnail_line = "Skip thumbnails for short-form content."

    return f"""
Act as a senior digital content strategist.

# PROJECT
- Niche: "{brief.niche}"
- Platform: "{brief.platform}"
- Objective: "{brief.objective}"
- Style / tone of voice: "{brief.style}"
- Format: {video_format}

# TASK
Produce a professional content strategy as JSON containing:
1. IDEAS (4 ideas): SEO title, internal title, description of the episode,
   {thumbnail_line} Optimized hashtags.
2. CALENDAR: a 7-day plan with the ideal content mix.
3. TRENDS: 3 rising trends for the niche.

Do not write full scripts yet. Return valid JSON only, following the schema.
"""


def build_script_prompt(request: ScriptRequest) -> str:
    """Prompt for a full script."""
    return f"""
Write a COMPLETE, PROFESSIONAL video script.

# VIDEO
- Title: "{request.idea.title}"
- Description: "{request.idea.description}"
- Platform: "{request.brief.platform}"
- Tone of voice: "{request.brief.style}"

# TASK
1. Write 3 to 5 script sections. Each section has the spoken text, a detailed
   visual suggestion (B-roll / action) and an audio suggestion (music or effects).
2. Produce a simulated analysis of the video's potential.

Return JSON following the schema.
"""


def build_channel_prompt(request: ChannelRequest) -> str:
    """Prompt for channel identity."""
    return f"""
Create a visual identity, strategy and monetization plan for a new channel.

- Niche: {request.niche}
- Platform: {request.platform}
- Style: {request.style}

Return JSON with: name, handle, optimized bio, avatar idea, banner idea,
3 growth tips, and 3 monetization strategies specific to this niche.
"""


class GeminiGenerationClient:
    """Gemini REST API implementation of the generation collaborator."""

    def __init__(
        self,
        api_key: str,
        base_url: str,
        text_model: str,
        image_model: str,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.text_model = text_model
        self.image_model = image_model
        self._http_client = http_client

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Get HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient()
        return self._http_client

    async def generate_strategy(self, request: CreatorBrief) -> ContentStrategy:
        text = await self._generate_json(build_strategy_prompt(request), STRATEGY_SCHEMA)
        return self._parse(text, ContentStrategy)

    async def generate_script(self, request: ScriptRequest) -> FullScript:
        text = await self._generate_json(build_script_prompt(request), SCRIPT_SCHEMA)
        return self._parse(text, FullScript)

    async def generate_channel_setup(self, request: ChannelRequest) -> ChannelSetup:
        text = await self._generate_json(build_channel_prompt(request), CHANNEL_SCHEMA)
        return self._parse(text, ChannelSetup)

    async def generate_thumbnail(self, request: ThumbnailRequest) -> ThumbnailImage:
        body = {
            "contents": [{"parts": [{"text": request.prompt}]}],
            "generationConfig": {"imageConfig": {"aspectRatio": "16:9"}},
        }
        data = await self._post(self.image_model, body)

        for part in self._first_candidate_parts(data):
            inline = part.get("inlineData") or {}
            if inline.get("data"):
                mime_type = inline.get("mimeType", "image/png")
                return ThumbnailImage(data_url=f"data:{mime_type};base64,{inline['data']}")

        raise GenerationError("no image returned")

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()

    # ========================================================================
    # Private Helper Methods
    # ========================================================================

    async def _generate_json(self, prompt: str, schema: dict[str, Any]) -> str:
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": schema,
            },
        }
        data = await self._post(self.text_model, body)
        texts = [part["text"] for part in self._first_candidate_parts(data) if "text" in part]
        if not texts:
            raise GenerationError("empty response")
        return "".join(texts)

    async def _post(self, model: str, body: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base_url}/models/{model}:generateContent"
        try:
            response = await self.http_client.post(
                url, json=body, headers={"x-goog-api-key": self.api_key}
            )
            response.raise_for_status()
            return response.json()  # type: ignore[no-any-return]
        except httpx.HTTPStatusError as e:
            logger.error(
                "generation_request_failed",
                model=model,
                status=e.response.status_code,
                text=e.response.text[:500],
            )
            raise GenerationError(f"provider returned {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("generation_request_error", model=model, error=str(e))
            raise GenerationError("provider request failed") from e

    @staticmethod
    def _first_candidate_parts(data: dict[str, Any]) -> list[dict[str, Any]]:
        candidates = data.get("candidates") or []
        if not candidates:
            return []
        return (candidates[0].get("content") or {}).get("parts") or []

    @staticmethod
    def _parse(text: str, model: type[ResultT]) -> ResultT:
        try:
            return model.model_validate(json.loads(text))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error("generation_output_invalid", result_type=model.__name__, error=str(e))
            raise GenerationError("unparseable model output") from e
