# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

"""Typed shapes for imported professional profiles.

Profiles travel over the wire and into storage as camelCase JSON objects.
These models validate that JSON at the boundaries and keep any keys we do
not model explicitly so nothing a profile source sends is dropped.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ProfileSection(BaseModel):
    """Base for every profile shape: camelCase aliases, extra keys kept."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Location(ProfileSection):
    country: Optional[str] = None
    city: Optional[str] = None


class Experience(ProfileSection):
    title: str = ""
    company: str = ""
    description: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    current: Optional[bool] = None
    location: Optional[str] = None


class Education(ProfileSection):
    school: str = ""
    degree: Optional[str] = None
    field_of_study: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    description: Optional[str] = None


class Certification(ProfileSection):
    name: str
    authority: Optional[str] = None
    date: Optional[str] = None


class Language(ProfileSection):
    language: str
    proficiency: Optional[str] = None


class Project(ProfileSection):
    name: str
    description: Optional[str] = None
    url: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class LinkedInProfile(ProfileSection):
    """A full professional profile, either as fetched or as enhanced."""

    id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    headline: Optional[str] = None
    summary: Optional[str] = None
    profile_picture_url: Optional[str] = None
    location: Optional[Location] = None
    experiences: Optional[List[Experience]] = None
    education: Optional[List[Education]] = None
    skills: Optional[List[str]] = None
    certifications: Optional[List[Certification]] = None
    languages: Optional[List[Language]] = None
    projects: Optional[List[Project]] = None


class Recommendations(BaseModel):
    """Per-section suggestions returned by the recommendation prompt."""

    model_config = ConfigDict(extra="forbid")

    summary: List[str] = Field(default_factory=list)
    headline: List[str] = Field(default_factory=list)
    experiences: List[str] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    general: List[str] = Field(default_factory=list)


Tone = Literal["professional", "conversational", "enthusiastic"]
Focus = Literal["technical", "leadership", "creative", "balanced"]
Length = Literal["concise", "detailed", "comprehensive"]


class EnhancementOptions(BaseModel):
    """How a profile section should be rewritten."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    tone: Tone = "professional"
    focus: Focus = "balanced"
    length: Length = "detailed"
    highlight_achievements: bool = True
    emphasize_skills: bool = True
    include_metrics: bool = False
