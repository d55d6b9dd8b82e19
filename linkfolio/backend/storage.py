"""
Storage abstraction with an in-memory implementation for development and tests.

The MongoDB implementation lives in ``linkfolio.backend.document_store`` and
satisfies the same ``Storage`` protocol.
"""

from __future__ import annotations

import threading
from copy import deepcopy
from dataclasses import replace
from typing import Dict, List, Optional, Protocol, TypeVar

import pydantic

from linkfolio.backend.errors import ConflictError, NotFoundError, ValidationError
from linkfolio.backend.records import (
    PROFILE_UPDATE_FIELDS,
    SETTINGS_UPDATE_FIELDS,
    WEBSITE_UPDATE_FIELDS,
    EnhancementSettingsRecord,
    ProfileRecord,
    UserRecord,
    WaitlistEntryRecord,
    WebsiteRecord,
    advance,
    check_update_fields,
)
from linkfolio.shared.profile_types import LinkedInProfile

DUPLICATE_WAITLIST_MESSAGE = "This email is already on our waitlist."

R = TypeVar("R")


class Storage(Protocol):
    """Interface for persistence of users, waitlist entries, profiles,
    enhancement settings and websites."""

    def describe(self) -> str:
        ...

    def create_user(
        self,
        username: str,
        password: str,
        email: Optional[str] = None,
        name: Optional[str] = None,
    ) -> UserRecord:
        ...

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        ...

    def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        ...

    def create_waitlist_entry(
        self,
        email: str,
        linkedin_url: Optional[str] = None,
        profession: Optional[str] = None,
    ) -> WaitlistEntryRecord:
        ...

    def get_waitlist_entry_by_email(self, email: str) -> Optional[WaitlistEntryRecord]:
        ...

    def create_profile(
        self, linkedin_url: Optional[str] = None, user_id: Optional[int] = None
    ) -> ProfileRecord:
        ...

    def get_profile(self, profile_id: int) -> Optional[ProfileRecord]:
        ...

    def get_profile_by_user_id(self, user_id: int) -> Optional[ProfileRecord]:
        ...

    def update_profile(self, profile_id: int, **data) -> ProfileRecord:
        ...

    def create_enhancement_settings(
        self, profile_id: int, user_id: Optional[int] = None, **options
    ) -> EnhancementSettingsRecord:
        ...

    def get_enhancement_settings(
        self, settings_id: int
    ) -> Optional[EnhancementSettingsRecord]:
        ...

    def get_enhancement_settings_by_profile(
        self, profile_id: int
    ) -> Optional[EnhancementSettingsRecord]:
        ...

    def update_enhancement_settings(
        self, settings_id: int, **data
    ) -> EnhancementSettingsRecord:
        ...

    def create_website(
        self,
        profile_id: int,
        template_id: str,
        user_id: Optional[int] = None,
        subdomain: Optional[str] = None,
        custom_domain: Optional[str] = None,
        settings: Optional[dict] = None,
    ) -> WebsiteRecord:
        ...

    def get_website(self, website_id: int) -> Optional[WebsiteRecord]:
        ...

    def get_websites_by_user_id(self, user_id: int) -> List[WebsiteRecord]:
        ...

    def update_website(self, website_id: int, **data) -> WebsiteRecord:
        ...


def normalize_profile_data(data: Optional[dict]) -> Optional[dict]:
    """Validate a profile blob against ``LinkedInProfile`` before it is stored."""
    if data is None:
        return None
    if not data:
        return {}
    try:
        return LinkedInProfile.model_validate(data).to_json()
    except pydantic.ValidationError as exc:
        raise ValidationError(
            errors=[
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in exc.errors()
            ]
        ) from exc


def normalize_profile_update(data: dict) -> dict:
    check_update_fields(PROFILE_UPDATE_FIELDS, data)
    data = dict(data)
    if "original_data" in data:
        data["original_data"] = normalize_profile_data(data["original_data"]) or {}
    if "enhanced_data" in data:
        data["enhanced_data"] = normalize_profile_data(data["enhanced_data"])
    return data


def settings_defaults(**options) -> dict:
    """Fill unspecified enhancement options with the stored defaults."""
    check_update_fields(SETTINGS_UPDATE_FIELDS, options)
    defaults = EnhancementSettingsRecord(id=0, profile_id=0)
    return {
        name: options[name] if options.get(name) is not None else getattr(defaults, name)
        for name in sorted(SETTINGS_UPDATE_FIELDS)
    }


class InMemoryStorage:
    """
    Process-lifetime keyed tables with per-kind integer counters.

    Every read and write holds the lock, and records cross the boundary as
    copies, so callers never share mutable state with the tables.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self.users: Dict[int, UserRecord] = {}
        self.waitlist_entries: Dict[int, WaitlistEntryRecord] = {}
        self.profiles: Dict[int, ProfileRecord] = {}
        self.enhancement_settings: Dict[int, EnhancementSettingsRecord] = {}
        self.websites: Dict[int, WebsiteRecord] = {}
        self._counters: Dict[str, int] = {}

    def describe(self) -> str:
        return "memory"

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        with self._lock:
            self.users.clear()
            self.waitlist_entries.clear()
            self.profiles.clear()
            self.enhancement_settings.clear()
            self.websites.clear()
            self._counters.clear()

    def _next_id(self, kind: str) -> int:
        self._counters[kind] = self._counters.get(kind, 0) + 1
        return self._counters[kind]

    def _put(self, table: Dict[int, R], record: R) -> R:
        table[record.id] = deepcopy(record)
        return record

    def _get(self, table: Dict[int, R], record_id) -> Optional[R]:
        with self._lock:
            return deepcopy(table.get(record_id))

    def _find(self, table: Dict[int, R], **match) -> Optional[R]:
        with self._lock:
            for record in table.values():
                if all(getattr(record, key) == value for key, value in match.items()):
                    return deepcopy(record)
        return None

    # Users

    def create_user(
        self,
        username: str,
        password: str,
        email: Optional[str] = None,
        name: Optional[str] = None,
    ) -> UserRecord:
        with self._lock:
            record = UserRecord(
                id=self._next_id("users"),
                username=username,
                password=password,
                email=email or None,
                name=name or None,
            )
            return self._put(self.users, record)

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        return self._get(self.users, user_id)

    def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        return self._find(self.users, username=username)

    # Waitlist

    def create_waitlist_entry(
        self,
        email: str,
        linkedin_url: Optional[str] = None,
        profession: Optional[str] = None,
    ) -> WaitlistEntryRecord:
        with self._lock:
            if self._find(self.waitlist_entries, email=email):
                raise ConflictError(DUPLICATE_WAITLIST_MESSAGE)
            record = WaitlistEntryRecord(
                id=self._next_id("waitlist_entries"),
                email=email,
                linkedin_url=linkedin_url or None,
                profession=profession or None,
            )
            return self._put(self.waitlist_entries, record)

    def get_waitlist_entry_by_email(self, email: str) -> Optional[WaitlistEntryRecord]:
        return self._find(self.waitlist_entries, email=email)

    # Profiles

    def create_profile(
        self, linkedin_url: Optional[str] = None, user_id: Optional[int] = None
    ) -> ProfileRecord:
        with self._lock:
            record = ProfileRecord(
                id=self._next_id("profiles"),
                user_id=user_id,
                linkedin_url=linkedin_url,
            )
            return self._put(self.profiles, record)

    def get_profile(self, profile_id: int) -> Optional[ProfileRecord]:
        return self._get(self.profiles, profile_id)

    def get_profile_by_user_id(self, user_id: int) -> Optional[ProfileRecord]:
        return self._find(self.profiles, user_id=user_id)

    def update_profile(self, profile_id: int, **data) -> ProfileRecord:
        data = normalize_profile_update(data)
        with self._lock:
            profile = self.profiles.get(profile_id)
            if not profile:
                raise NotFoundError(f"Profile with ID {profile_id} not found")
            updated = replace(profile, **data, last_updated=advance(profile.last_updated))
            return self._put(self.profiles, updated)

    # Enhancement settings

    def create_enhancement_settings(
        self, profile_id: int, user_id: Optional[int] = None, **options
    ) -> EnhancementSettingsRecord:
        values = settings_defaults(**options)
        with self._lock:
            record = EnhancementSettingsRecord(
                id=self._next_id("enhancement_settings"),
                profile_id=profile_id,
                user_id=user_id,
                **values,
            )
            return self._put(self.enhancement_settings, record)

    def get_enhancement_settings(
        self, settings_id: int
    ) -> Optional[EnhancementSettingsRecord]:
        return self._get(self.enhancement_settings, settings_id)

    def get_enhancement_settings_by_profile(
        self, profile_id: int
    ) -> Optional[EnhancementSettingsRecord]:
        return self._find(self.enhancement_settings, profile_id=profile_id)

    def update_enhancement_settings(
        self, settings_id: int, **data
    ) -> EnhancementSettingsRecord:
        check_update_fields(SETTINGS_UPDATE_FIELDS, data)
        with self._lock:
            settings = self.enhancement_settings.get(settings_id)
            if not settings:
                raise NotFoundError(
                    f"Enhancement settings with ID {settings_id} not found"
                )
            updated = replace(settings, **data, updated_at=advance(settings.updated_at))
            return self._put(self.enhancement_settings, updated)

    # Websites

    def _check_domains(
        self,
        subdomain: Optional[str],
        custom_domain: Optional[str],
        exclude_id: Optional[int] = None,
    ) -> None:
        with self._lock:
            for website in self.websites.values():
                if website.id == exclude_id:
                    continue
                if subdomain and website.subdomain == subdomain:
                    raise ConflictError(f"The subdomain '{subdomain}' is already taken.")
                if custom_domain and website.custom_domain == custom_domain:
                    raise ConflictError(
                        f"The custom domain '{custom_domain}' is already in use."
                    )

    def create_website(
        self,
        profile_id: int,
        template_id: str,
        user_id: Optional[int] = None,
        subdomain: Optional[str] = None,
        custom_domain: Optional[str] = None,
        settings: Optional[dict] = None,
    ) -> WebsiteRecord:
        with self._lock:
            self._check_domains(subdomain, custom_domain)
            record = WebsiteRecord(
                id=self._next_id("websites"),
                profile_id=profile_id,
                template_id=template_id,
                user_id=user_id,
                subdomain=subdomain or None,
                custom_domain=custom_domain or None,
                settings=dict(settings or {}),
            )
            return self._put(self.websites, record)

    def get_website(self, website_id: int) -> Optional[WebsiteRecord]:
        return self._get(self.websites, website_id)

    def get_websites_by_user_id(self, user_id: int) -> List[WebsiteRecord]:
        with self._lock:
            return [
                deepcopy(w) for w in self.websites.values() if w.user_id == user_id
            ]

    def update_website(self, website_id: int, **data) -> WebsiteRecord:
        check_update_fields(WEBSITE_UPDATE_FIELDS, data)
        with self._lock:
            website = self.websites.get(website_id)
            if not website:
                raise NotFoundError(f"Website with ID {website_id} not found")
            self._check_domains(
                data.get("subdomain"), data.get("custom_domain"), exclude_id=website_id
            )
            updated = replace(website, **data, updated_at=advance(website.updated_at))
            return self._put(self.websites, updated)
