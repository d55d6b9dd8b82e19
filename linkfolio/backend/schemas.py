"""
Pydantic schemas for the HTTP API.

Request bodies use camelCase keys on the wire, matching the web client.
"""

from __future__ import annotations

from typing import Any, Literal, Optional, Union

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from linkfolio.shared.profile_types import Focus, Length, Tone

SUBDOMAIN_PATTERN = r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$"
DOMAIN_PATTERN = r"^([a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+[a-zA-Z]{2,63}$"


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid"
    )


class ApiResponse(BaseModel):
    success: bool
    message: str
    data: Optional[Any] = None


class WaitlistRequest(CamelModel):
    email: EmailStr
    linkedin_url: Optional[Union[AnyHttpUrl, Literal[""]]] = None
    profession: str = Field(..., min_length=1)


class CreateProfileRequest(CamelModel):
    linkedin_url: AnyHttpUrl
    user_id: Optional[int] = None


class EnhancementSettingsRequest(CamelModel):
    tone: Optional[Tone] = None
    focus: Optional[Focus] = None
    length: Optional[Length] = None
    highlight_achievements: Optional[bool] = None
    emphasize_skills: Optional[bool] = None
    include_metrics: Optional[bool] = None


class CreateWebsiteRequest(CamelModel):
    profile_id: int
    template_id: str = Field(..., min_length=1, max_length=64)
    subdomain: Optional[str] = Field(default=None, pattern=SUBDOMAIN_PATTERN)
    custom_domain: Optional[str] = Field(
        default=None, max_length=253, pattern=DOMAIN_PATTERN
    )
    settings: Optional[dict] = None


class UpdateWebsiteRequest(CamelModel):
    template_id: Optional[str] = Field(default=None, min_length=1, max_length=64)
    subdomain: Optional[str] = Field(default=None, pattern=SUBDOMAIN_PATTERN)
    custom_domain: Optional[str] = Field(
        default=None, max_length=253, pattern=DOMAIN_PATTERN
    )
    settings: Optional[dict] = None
    published: Optional[bool] = None
