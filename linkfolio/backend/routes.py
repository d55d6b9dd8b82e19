"""
HTTP routes for the backend API.

Every handler answers with the ``{success, message, data}`` envelope; errors
raised here are translated by the exception handlers registered in
``linkfolio.backend.app``.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response

from linkfolio.backend.dependencies import (
    get_enhancement_service,
    get_profile_service,
    get_storage,
)
from linkfolio.backend.enhancement import EnhancementService, as_profile
from linkfolio.backend.errors import ConflictError, NotFoundError, ValidationError
from linkfolio.backend.profiles import ProfileService, format_profile_for_template
from linkfolio.backend.records import EnhancementSettingsRecord, ProfileRecord
from linkfolio.backend.schemas import (
    ApiResponse,
    CreateProfileRequest,
    CreateWebsiteRequest,
    EnhancementSettingsRequest,
    UpdateWebsiteRequest,
    WaitlistRequest,
)
from linkfolio.backend.storage import DUPLICATE_WAITLIST_MESSAGE, Storage
from linkfolio.shared.profile_types import EnhancementOptions

logger = logging.getLogger(__name__)

router = APIRouter()

NOT_FETCHED_MESSAGE = "Profile data has not been fetched yet. Fetch the profile first."


def _require_profile(storage: Storage, profile_id: int) -> ProfileRecord:
    profile = storage.get_profile(profile_id)
    if not profile:
        raise NotFoundError("Profile not found.")
    return profile


def _options_from_settings(
    settings: EnhancementSettingsRecord | None,
) -> EnhancementOptions:
    if settings is None:
        return EnhancementOptions()
    return EnhancementOptions(
        tone=settings.tone,
        focus=settings.focus,
        length=settings.length,
        highlight_achievements=settings.highlight_achievements,
        emphasize_skills=settings.emphasize_skills,
        include_metrics=settings.include_metrics,
    )


@router.get("/health", response_model=ApiResponse)
def health(storage: Storage = Depends(get_storage)):
    return ApiResponse(success=True, message="ok", data={"storage": storage.describe()})


@router.post("/waitlist", response_model=ApiResponse, status_code=201)
def join_waitlist(payload: WaitlistRequest, storage: Storage = Depends(get_storage)):
    if storage.get_waitlist_entry_by_email(payload.email):
        raise ConflictError(DUPLICATE_WAITLIST_MESSAGE)
    entry = storage.create_waitlist_entry(
        email=payload.email,
        linkedin_url=str(payload.linkedin_url) if payload.linkedin_url else None,
        profession=payload.profession,
    )
    logger.info("Waitlist entry %s created", entry.id)
    return ApiResponse(
        success=True,
        message="Thank you for joining our waitlist!",
        data={"id": entry.id},
    )


@router.post("/profiles", response_model=ApiResponse, status_code=201)
def create_profile(payload: CreateProfileRequest, storage: Storage = Depends(get_storage)):
    profile = storage.create_profile(
        linkedin_url=str(payload.linkedin_url), user_id=payload.user_id
    )
    return ApiResponse(success=True, message="Profile created.", data=profile.as_dict())


@router.get("/profiles/{profile_id}", response_model=ApiResponse)
def get_profile(profile_id: int, storage: Storage = Depends(get_storage)):
    profile = _require_profile(storage, profile_id)
    return ApiResponse(success=True, message="Profile found.", data=profile.as_dict())


@router.post("/profiles/{profile_id}/fetch", response_model=ApiResponse)
def fetch_profile(
    profile_id: int,
    storage: Storage = Depends(get_storage),
    profiles: ProfileService = Depends(get_profile_service),
):
    profile = _require_profile(storage, profile_id)
    if not profile.linkedin_url:
        raise ValidationError("Profile has no LinkedIn URL to fetch.")
    fetched = profiles.fetch_profile(profile.linkedin_url)
    updated = storage.update_profile(profile_id, original_data=fetched.to_json())
    return ApiResponse(
        success=True,
        message="Profile data fetched successfully.",
        data=updated.as_dict(),
    )


@router.post("/profiles/{profile_id}/settings", response_model=ApiResponse)
def save_enhancement_settings(
    profile_id: int,
    response: Response,
    payload: EnhancementSettingsRequest | None = None,
    storage: Storage = Depends(get_storage),
):
    """Creates the profile's enhancement settings, or updates them if present."""
    profile = _require_profile(storage, profile_id)
    options = payload.model_dump(exclude_none=True) if payload else {}
    existing = storage.get_enhancement_settings_by_profile(profile_id)
    if existing:
        settings = storage.update_enhancement_settings(existing.id, **options)
        message = "Enhancement settings updated."
    else:
        settings = storage.create_enhancement_settings(
            profile_id, user_id=profile.user_id, **options
        )
        response.status_code = 201
        message = "Enhancement settings created."
    return ApiResponse(success=True, message=message, data=settings.as_dict())


@router.post("/profiles/{profile_id}/enhance", response_model=ApiResponse)
def enhance_profile(
    profile_id: int,
    storage: Storage = Depends(get_storage),
    enhancer: EnhancementService = Depends(get_enhancement_service),
):
    profile = _require_profile(storage, profile_id)
    if not profile.has_original_data:
        raise ValidationError(NOT_FETCHED_MESSAGE)
    options = _options_from_settings(
        storage.get_enhancement_settings_by_profile(profile_id)
    )
    enhanced = enhancer.enhance_full_profile(profile.original_data, options)
    updated = storage.update_profile(profile_id, enhanced_data=enhanced.to_json())
    return ApiResponse(
        success=True, message="Profile enhanced successfully.", data=updated.as_dict()
    )


@router.get("/profiles/{profile_id}/recommendations", response_model=ApiResponse)
def get_recommendations(
    profile_id: int,
    storage: Storage = Depends(get_storage),
    enhancer: EnhancementService = Depends(get_enhancement_service),
):
    profile = _require_profile(storage, profile_id)
    if not profile.has_original_data:
        raise ValidationError(NOT_FETCHED_MESSAGE)
    recommendations = enhancer.generate_recommendations(profile.original_data)
    return ApiResponse(
        success=True,
        message="Recommendations generated successfully.",
        data=recommendations,
    )


@router.post("/websites", response_model=ApiResponse, status_code=201)
def create_website(payload: CreateWebsiteRequest, storage: Storage = Depends(get_storage)):
    profile = _require_profile(storage, payload.profile_id)
    website = storage.create_website(
        profile_id=profile.id,
        template_id=payload.template_id,
        user_id=profile.user_id,
        subdomain=payload.subdomain,
        custom_domain=payload.custom_domain,
        settings=payload.settings,
    )
    return ApiResponse(success=True, message="Website created.", data=website.as_dict())


@router.patch("/websites/{website_id}", response_model=ApiResponse)
def update_website(
    website_id: int,
    payload: UpdateWebsiteRequest,
    storage: Storage = Depends(get_storage),
):
    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("No website fields to update.")
    nulls = [
        f"{field}: may not be null"
        for field in ("template_id", "settings", "published")
        if field in changes and changes[field] is None
    ]
    if nulls:
        raise ValidationError(errors=nulls)
    if not storage.get_website(website_id):
        raise NotFoundError("Website not found.")
    website = storage.update_website(website_id, **changes)
    return ApiResponse(success=True, message="Website updated.", data=website.as_dict())


@router.get("/websites/{website_id}/preview", response_model=ApiResponse)
def preview_website(website_id: int, storage: Storage = Depends(get_storage)):
    website = storage.get_website(website_id)
    if not website:
        raise NotFoundError("Website not found.")
    profile = _require_profile(storage, website.profile_id)
    source = profile.enhanced_data or profile.original_data
    if not source:
        raise ValidationError(NOT_FETCHED_MESSAGE)
    return ApiResponse(
        success=True,
        message="Website preview generated.",
        data=format_profile_for_template(as_profile(source), website.template_id),
    )


@router.get("/users/{user_id}/websites", response_model=ApiResponse)
def list_user_websites(user_id: int, storage: Storage = Depends(get_storage)):
    websites = storage.get_websites_by_user_id(user_id)
    return ApiResponse(
        success=True,
        message=f"Found {len(websites)} websites.",
        data=[website.as_dict() for website in websites],
    )
