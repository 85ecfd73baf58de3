"""
Database Schemas for DevLinker

Each Pydantic model corresponds to a MongoDB collection.
Collection name is the lowercase class name (e.g., Community -> "community").
Request bodies live at the bottom of the module.
"""
from datetime import datetime
from typing import Any, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator

PLATFORMS = (
    "Discord",
    "Slack",
    "Reddit",
    "Forum",
    "Telegram",
    "WhatsApp",
    "GitHub",
    "Twitter",
    "Meetup",
    "LinkedIn",
    "Blog",
    "Community",
    "Guide",
)
LOCATION_MODES = (
    "Global/Online",
    "Global/Online & Offline",
    "Offline",
    "Hybrid",
    "India/Online",
)
ACTIVITY_LEVELS = ("Low", "Medium", "High", "Very Active", "High (Seasonal)")
DEFAULT_ACTIVITY_LEVEL = "Medium"

Platform = Literal[PLATFORMS]
LocationMode = Literal[LOCATION_MODES]
ActivityLevel = Literal[ACTIVITY_LEVELS]


class User(BaseModel):
    name: str = Field(..., description="Display name")
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., description="Hashed password")
    saved_communities: List[str] = Field(default_factory=list, description="Saved community IDs as strings")


class Community(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, description="Community name")
    description: str = Field(..., min_length=1, description="Short description shown on cards")
    full_description: str = Field("", description="Long description for the detail page")
    tech_stack: str = Field(..., min_length=1, description="Primary technology label, e.g. React")
    platform: Platform = Field(..., description="Where the community lives")
    location_mode: LocationMode = Field(..., description="Online / offline participation mode")
    tags: List[str] = Field(default_factory=list, description="Ordered list of topic tags")
    community_page: str = Field("", description="Homepage of the community")
    joining_link: str = Field(..., min_length=1, description="Invite or signup URL")
    logo_url: str = Field("", description="Logo image URL")
    member_count: int = Field(0, ge=0, description="Approximate member count")
    activity_level: ActivityLevel = Field(DEFAULT_ACTIVITY_LEVEL, description="Engagement tier")
    rules: str = Field("", description="House rules as free text")

    @field_validator("activity_level", mode="before")
    @classmethod
    def default_activity_level(cls, value: Any) -> str:
        if isinstance(value, str) and value.strip() in ACTIVITY_LEVELS:
            return value.strip()
        return DEFAULT_ACTIVITY_LEVEL


class Membership(BaseModel):
    """
    Join record between a user and a community
    Collection name: "membership"
    """
    user_id: str = Field(..., description="ID of the joining user")
    community_id: str = Field(..., description="ID of the joined community")
    joined_at: datetime = Field(..., description="When the user joined")


# Request bodies

class CommunitySubmission(BaseModel):
    """Loose shape of a user submission; normalized by communities.normalize_submission."""
    title: Optional[str] = None
    description: Optional[str] = None
    full_description: Optional[str] = Field(
        None, validation_alias=AliasChoices("full_description", "fullDescription")
    )
    tech_stack: Optional[str] = None
    platform: Optional[str] = None
    location_mode: Optional[str] = None
    tags: Union[List[str], str, None] = None
    community_page: Optional[str] = None
    joining_link: Optional[str] = None
    logo_url: Optional[str] = None
    member_count: Any = None
    activity_level: Optional[str] = None
    rules: Optional[str] = None


class SignUpBody(BaseModel):
    name: str
    email: EmailStr
    password: str = Field(..., min_length=6)


class LoginBody(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class MatchAnswers(BaseModel):
    skill_level: str = Field("", validation_alias=AliasChoices("skill_level", "skillLevel"))
    goals: List[str] = Field(default_factory=list)
    preferred_format: str = Field("", validation_alias=AliasChoices("preferred_format", "preferredFormat"))
    tech_stack: List[str] = Field(default_factory=list, validation_alias=AliasChoices("tech_stack", "techStack"))
