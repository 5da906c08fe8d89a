"""
Generation Models - Requests to and results from the content generation collaborator.

Results are validated with pydantic so malformed model output surfaces as a
GenerationError instead of a half-filled artifact. Wire format is camelCase.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Accepts camelCase (model output) or snake_case (Python callers)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ContentLength(str, Enum):
    """Video format."""

    SHORT = "SHORT"
    LONG = "LONG"


# ============================================================================
# Requests
# ============================================================================


class CreatorBrief(_CamelModel):
    """Creator context shared by strategy and script requests."""

    niche: str = Field(..., min_length=1, max_length=255)
    platform: str = Field(..., min_length=1, max_length=100)
    objective: str = Field(..., min_length=1, max_length=255)
    content_length: ContentLength = ContentLength.SHORT
    style: str = Field(..., min_length=1, max_length=100)


class ChannelRequest(_CamelModel):
    """Channel identity request."""

    niche: str = Field(..., min_length=1, max_length=255)
    platform: str = Field(..., min_length=1, max_length=100)
    style: str = Field(..., min_length=1, max_length=100)


class ThumbnailRequest(_CamelModel):
    """Free-text thumbnail image prompt."""

    prompt: str = Field(..., min_length=1, max_length=2000)


# ============================================================================
# Results
# ============================================================================


class ContentIdea(_CamelModel):
    title: str
    seo_title: str = ""
    description: str = ""
    thumbnail_suggestion: str | None = None
    hashtags: list[str] = Field(default_factory=list)


class CalendarEntry(_CamelModel):
    day: str
    content_title: str
    type: str = ""


class ContentStrategy(_CamelModel):
    """Ideas, a 7-day calendar and trends for a niche."""

    strategy_summary: str = ""
    trends: list[str] = Field(default_factory=list)
    ideas: list[ContentIdea] = Field(default_factory=list)
    calendar: list[CalendarEntry] = Field(default_factory=list)


class ScriptRequest(_CamelModel):
    """Full script request: one idea plus the creator context."""

    idea: ContentIdea
    brief: CreatorBrief


class ScriptSection(_CamelModel):
    label: str
    content: str
    visual_cue: str | None = None
    audio_cue: str | None = None


class ScriptAnalytics(_CamelModel):
    estimated_engagement: str = ""
    retention_score: int = Field(default=0, ge=0, le=100)
    keyword_density: str = ""


class FullScript(_CamelModel):
    """Script sections with simulated performance analytics."""

    sections: list[ScriptSection] = Field(default_factory=list)
    analytics: ScriptAnalytics = Field(default_factory=ScriptAnalytics)


class ChannelSetup(_CamelModel):
    """Channel branding and monetization plan."""

    name: str
    handle: str = ""
    description: str = ""
    avatar_idea: str = ""
    banner_idea: str = ""
    initial_tips: list[str] = Field(default_factory=list)
    monetization_tips: list[str] = Field(default_factory=list)


class ThumbnailImage(_CamelModel):
    """Generated image as a data URL."""

    data_url: str
