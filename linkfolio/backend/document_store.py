"""
MongoDB-backed implementation of the ``Storage`` protocol.

Documents use the same integer identifiers as the in-memory store: each
collection draws ids from an atomic counter in the ``counters`` collection
and stores the integer directly as ``_id``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional, Type, TypeVar

from pymongo import ASCENDING, MongoClient, ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from linkfolio.backend.errors import (
    ConflictError,
    NotFoundError,
    StorageUnavailableError,
)
from linkfolio.backend.records import (
    SETTINGS_UPDATE_FIELDS,
    WEBSITE_UPDATE_FIELDS,
    EnhancementSettingsRecord,
    ProfileRecord,
    UserRecord,
    WaitlistEntryRecord,
    WebsiteRecord,
    advance,
    check_update_fields,
    record_field_names,
    utcnow,
)
from linkfolio.backend.storage import (
    DUPLICATE_WAITLIST_MESSAGE,
    normalize_profile_update,
    settings_defaults,
)

logger = logging.getLogger(__name__)

DEFAULT_DATABASE = "linkedin-website-generator"

R = TypeVar("R")


def _to_record(record_type: Type[R], doc: Optional[dict]) -> Optional[R]:
    if not doc:
        return None
    values = {
        name: doc[name] for name in record_field_names(record_type) if name in doc
    }
    for name, value in values.items():
        if isinstance(value, datetime) and value.tzinfo is None:
            values[name] = value.replace(tzinfo=timezone.utc)
    values["id"] = doc["_id"]
    return record_type(**values)


def _to_doc(record) -> dict:
    doc = {name: getattr(record, name) for name in record_field_names(type(record))}
    doc["_id"] = doc.pop("id")
    return doc


def _domain_conflict(exc: DuplicateKeyError) -> ConflictError:
    key = (exc.details or {}).get("keyPattern") or {}
    if "custom_domain" in key or "custom_domain" in str(exc):
        return ConflictError("That custom domain is already in use.")
    return ConflictError("That subdomain is already taken.")


class MongoStorage:
    """
    pymongo-backed storage. Accepts a connection URI or a ready client
    (``mongomock.MongoClient`` in tests).
    """

    def __init__(
        self,
        uri: Optional[str] = None,
        *,
        database: Optional[str] = None,
        timeout_seconds: float = 5.0,
        client: Optional[MongoClient] = None,
    ):
        if client is None:
            if not uri:
                raise ValueError("MONGODB_URI is required for MongoStorage")
            client = MongoClient(
                uri,
                serverSelectionTimeoutMS=int(timeout_seconds * 1000),
                connectTimeoutMS=int(timeout_seconds * 1000),
                tz_aware=True,
            )
        self.client = client
        if database:
            self.db: Database = client[database]
        else:
            self.db = client.get_default_database(default=DEFAULT_DATABASE)

    def describe(self) -> str:
        return "mongodb"

    def ping(self) -> None:
        """Raise ``StorageUnavailableError`` unless the server answers."""
        try:
            self.client.admin.command("ping")
        except PyMongoError as exc:
            raise StorageUnavailableError() from exc

    def ensure_indexes(self) -> None:
        self.db.users.create_index([("username", ASCENDING)])
        self.db.waitlist_entries.create_index([("email", ASCENDING)], unique=True)
        self.db.profiles.create_index([("user_id", ASCENDING)])
        self.db.enhancement_settings.create_index([("profile_id", ASCENDING)])
        self.db.websites.create_index([("user_id", ASCENDING)])
        for key in ("subdomain", "custom_domain"):
            self.db.websites.create_index(
                [(key, ASCENDING)],
                unique=True,
                partialFilterExpression={key: {"$type": "string"}},
            )
        logger.info("Ensured MongoDB indexes on %s", self.db.name)

    def _next_id(self, kind: str) -> int:
        counter = self.db.counters.find_one_and_update(
            {"_id": kind},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return counter["seq"]

    def _find(self, collection: str, record_type: Type[R], query: dict) -> Optional[R]:
        return _to_record(record_type, self.db[collection].find_one(query))

    def _get(self, collection: str, record_type: Type[R], record_id) -> Optional[R]:
        if not isinstance(record_id, int) or isinstance(record_id, bool):
            return None
        return self._find(collection, record_type, {"_id": record_id})

    def _update(
        self, collection: str, record_type: Type[R], record_id: int, data: dict, stamp: str
    ) -> Optional[R]:
        current = self._get(collection, record_type, record_id)
        if current is None:
            return None
        data = dict(data)
        data[stamp] = advance(getattr(current, stamp))
        doc = self.db[collection].find_one_and_update(
            {"_id": record_id},
            {"$set": data},
            return_document=ReturnDocument.AFTER,
        )
        return _to_record(record_type, doc)

    # Users

    def create_user(
        self,
        username: str,
        password: str,
        email: Optional[str] = None,
        name: Optional[str] = None,
    ) -> UserRecord:
        record = UserRecord(
            id=self._next_id("users"),
            username=username,
            password=password,
            email=email or None,
            name=name or None,
        )
        self.db.users.insert_one(_to_doc(record))
        return record

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        return self._get("users", UserRecord, user_id)

    def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        return self._find("users", UserRecord, {"username": username})

    # Waitlist

    def create_waitlist_entry(
        self,
        email: str,
        linkedin_url: Optional[str] = None,
        profession: Optional[str] = None,
    ) -> WaitlistEntryRecord:
        if self.get_waitlist_entry_by_email(email):
            raise ConflictError(DUPLICATE_WAITLIST_MESSAGE)
        record = WaitlistEntryRecord(
            id=self._next_id("waitlist_entries"),
            email=email,
            linkedin_url=linkedin_url or None,
            profession=profession or None,
        )
        try:
            self.db.waitlist_entries.insert_one(_to_doc(record))
        except DuplicateKeyError as exc:
            raise ConflictError(DUPLICATE_WAITLIST_MESSAGE) from exc
        return record

    def get_waitlist_entry_by_email(self, email: str) -> Optional[WaitlistEntryRecord]:
        return self._find("waitlist_entries", WaitlistEntryRecord, {"email": email})

    # Profiles

    def create_profile(
        self, linkedin_url: Optional[str] = None, user_id: Optional[int] = None
    ) -> ProfileRecord:
        record = ProfileRecord(
            id=self._next_id("profiles"),
            user_id=user_id,
            linkedin_url=linkedin_url,
        )
        self.db.profiles.insert_one(_to_doc(record))
        return record

    def get_profile(self, profile_id: int) -> Optional[ProfileRecord]:
        return self._get("profiles", ProfileRecord, profile_id)

    def get_profile_by_user_id(self, user_id: int) -> Optional[ProfileRecord]:
        return self._find("profiles", ProfileRecord, {"user_id": user_id})

    def update_profile(self, profile_id: int, **data) -> ProfileRecord:
        data = normalize_profile_update(data)
        updated = self._update("profiles", ProfileRecord, profile_id, data, "last_updated")
        if updated is None:
            raise NotFoundError(f"Profile with ID {profile_id} not found")
        return updated

    # Enhancement settings

    def create_enhancement_settings(
        self, profile_id: int, user_id: Optional[int] = None, **options
    ) -> EnhancementSettingsRecord:
        record = EnhancementSettingsRecord(
            id=self._next_id("enhancement_settings"),
            profile_id=profile_id,
            user_id=user_id,
            **settings_defaults(**options),
        )
        self.db.enhancement_settings.insert_one(_to_doc(record))
        return record

    def get_enhancement_settings(
        self, settings_id: int
    ) -> Optional[EnhancementSettingsRecord]:
        return self._get("enhancement_settings", EnhancementSettingsRecord, settings_id)

    def get_enhancement_settings_by_profile(
        self, profile_id: int
    ) -> Optional[EnhancementSettingsRecord]:
        return self._find(
            "enhancement_settings", EnhancementSettingsRecord, {"profile_id": profile_id}
        )

    def update_enhancement_settings(
        self, settings_id: int, **data
    ) -> EnhancementSettingsRecord:
        check_update_fields(SETTINGS_UPDATE_FIELDS, data)
        updated = self._update(
            "enhancement_settings",
            EnhancementSettingsRecord,
            settings_id,
            data,
            "updated_at",
        )
        if updated is None:
            raise NotFoundError(f"Enhancement settings with ID {settings_id} not found")
        return updated

    # Websites

    def create_website(
        self,
        profile_id: int,
        template_id: str,
        user_id: Optional[int] = None,
        subdomain: Optional[str] = None,
        custom_domain: Optional[str] = None,
        settings: Optional[dict] = None,
    ) -> WebsiteRecord:
        self._check_domains(subdomain, custom_domain)
        now = utcnow()
        record = WebsiteRecord(
            id=self._next_id("websites"),
            profile_id=profile_id,
            template_id=template_id,
            user_id=user_id,
            subdomain=subdomain or None,
            custom_domain=custom_domain or None,
            settings=dict(settings or {}),
            created_at=now,
            updated_at=now,
        )
        try:
            self.db.websites.insert_one(_to_doc(record))
        except DuplicateKeyError as exc:
            raise _domain_conflict(exc) from exc
        return record

    def _check_domains(
        self,
        subdomain: Optional[str],
        custom_domain: Optional[str],
        exclude_id: Optional[int] = None,
    ) -> None:
        not_self = {"_id": {"$ne": exclude_id}} if exclude_id is not None else {}
        if subdomain and self.db.websites.find_one({"subdomain": subdomain, **not_self}):
            raise ConflictError(f"The subdomain '{subdomain}' is already taken.")
        if custom_domain and self.db.websites.find_one(
            {"custom_domain": custom_domain, **not_self}
        ):
            raise ConflictError(f"The custom domain '{custom_domain}' is already in use.")

    def get_website(self, website_id: int) -> Optional[WebsiteRecord]:
        return self._get("websites", WebsiteRecord, website_id)

    def get_websites_by_user_id(self, user_id: int) -> List[WebsiteRecord]:
        return [
            _to_record(WebsiteRecord, doc)
            for doc in self.db.websites.find({"user_id": user_id}).sort("_id", ASCENDING)
        ]

    def update_website(self, website_id: int, **data) -> WebsiteRecord:
        check_update_fields(WEBSITE_UPDATE_FIELDS, data)
        self._check_domains(
            data.get("subdomain"), data.get("custom_domain"), exclude_id=website_id
        )
        try:
            updated = self._update("websites", WebsiteRecord, website_id, data, "updated_at")
        except DuplicateKeyError as exc:
            raise _domain_conflict(exc) from exc
        if updated is None:
            raise NotFoundError(f"Website with ID {website_id} not found")
        return updated
