"""
Record types returned by every storage implementation.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current UTC time at millisecond precision (what MongoDB can store)."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def advance(previous: Optional[datetime]) -> datetime:
    """Return a timestamp that never moves backwards from ``previous``."""
    now = utcnow()
    if previous is not None and previous > now:
        return previous
    return now


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class UserRecord:
    id: int
    username: str
    password: str
    email: Optional[str] = None
    name: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)

    def as_dict(self) -> dict:
        # The password never leaves the storage layer.
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "name": self.name,
            "createdAt": _iso(self.created_at),
        }


@dataclass
class WaitlistEntryRecord:
    id: int
    email: str
    linkedin_url: Optional[str] = None
    profession: Optional[str] = None
    created_at: str = field(default_factory=lambda: utcnow().isoformat())

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "linkedinUrl": self.linkedin_url,
            "profession": self.profession,
            "createdAt": self.created_at,
        }


@dataclass
class ProfileRecord:
    id: int
    user_id: Optional[int] = None
    linkedin_url: Optional[str] = None
    original_data: dict = field(default_factory=dict)
    enhanced_data: Optional[dict] = None
    last_updated: datetime = field(default_factory=utcnow)

    @property
    def has_original_data(self) -> bool:
        return bool(self.original_data)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "linkedinUrl": self.linkedin_url,
            "originalData": self.original_data,
            "enhancedData": self.enhanced_data,
            "lastUpdated": _iso(self.last_updated),
        }


@dataclass
class EnhancementSettingsRecord:
    id: int
    profile_id: int
    user_id: Optional[int] = None
    tone: str = "professional"
    focus: str = "balanced"
    length: str = "detailed"
    highlight_achievements: bool = True
    emphasize_skills: bool = True
    include_metrics: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "profileId": self.profile_id,
            "tone": self.tone,
            "focus": self.focus,
            "length": self.length,
            "highlightAchievements": self.highlight_achievements,
            "emphasizeSkills": self.emphasize_skills,
            "includeMetrics": self.include_metrics,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


@dataclass
class WebsiteRecord:
    id: int
    profile_id: int
    template_id: str
    user_id: Optional[int] = None
    subdomain: Optional[str] = None
    custom_domain: Optional[str] = None
    settings: dict = field(default_factory=dict)
    published: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "profileId": self.profile_id,
            "templateId": self.template_id,
            "subdomain": self.subdomain,
            "customDomain": self.custom_domain,
            "settings": self.settings,
            "published": self.published,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


PROFILE_UPDATE_FIELDS = frozenset(
    {"user_id", "linkedin_url", "original_data", "enhanced_data"}
)
SETTINGS_UPDATE_FIELDS = frozenset(
    {
        "tone",
        "focus",
        "length",
        "highlight_achievements",
        "emphasize_skills",
        "include_metrics",
    }
)
WEBSITE_UPDATE_FIELDS = frozenset(
    {"template_id", "subdomain", "custom_domain", "settings", "published"}
)


def check_update_fields(allowed: frozenset, data: dict) -> None:
    unknown = set(data) - allowed
    if unknown:
        raise ValueError(f"Unsupported update fields: {sorted(unknown)}")


def record_field_names(record_type) -> list[str]:
    return [f.name for f in fields(record_type)]
