"""
Profile import: fetching a professional profile and running it through the
enhancement pipeline.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Protocol, Union

import pydantic
import requests

from linkfolio.backend.enhancement import EnhancementService, as_profile
from linkfolio.backend.errors import (
    FetchTimeoutError,
    NetworkError,
    ParseError,
)
from linkfolio.shared.profile_types import (
    EnhancementOptions,
    LinkedInProfile,
)

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30  # seconds

USERNAME_PATTERN = re.compile(r"linkedin\.com/in/([^/?#]+)")


def extract_username_from_url(url: str) -> str:
    match = USERNAME_PATTERN.search(url or "")
    return match.group(1) if match else "unknown"


def looks_like_profile_url(value: str) -> bool:
    return value.startswith("http") or "linkedin.com" in value


SAMPLE_PROFILE = {
    "firstName": "Sample",
    "lastName": "User",
    "headline": "Software Engineer",
    "summary": "Experienced software engineer with a passion for building scalable applications.",
    "skills": ["JavaScript", "React", "Node.js", "TypeScript", "AWS"],
    "experiences": [
        {
            "title": "Senior Software Engineer",
            "company": "Tech Company",
            "description": "Led development of cloud-based applications. Implemented CI/CD pipelines and microservices architecture.",
            "startDate": "2020-01",
            "endDate": "2023-01",
            "location": "San Francisco, CA",
        },
        {
            "title": "Software Developer",
            "company": "Startup Inc",
            "description": "Developed front-end components using React and TypeScript. Collaborated with UX designers to implement responsive designs.",
            "startDate": "2018-03",
            "endDate": "2019-12",
            "location": "New York, NY",
        },
    ],
    "education": [
        {
            "school": "University of Technology",
            "degree": "Bachelor of Science",
            "fieldOfStudy": "Computer Science",
            "startDate": "2014-09",
            "endDate": "2018-05",
        }
    ],
}


class ProfileFetcher(Protocol):
    def fetch(self, url: str) -> LinkedInProfile:
        ...


class MockProfileFetcher:
    """Returns a fixed sample profile after an artificial delay."""

    def __init__(self, delay_seconds: float = 1.0):
        self.delay_seconds = delay_seconds

    def fetch(self, url: str) -> LinkedInProfile:
        logger.info("Fetching LinkedIn profile for: %s", extract_username_from_url(url))
        if self.delay_seconds > 0:
            time.sleep(self.delay_seconds)
        return LinkedInProfile.model_validate(SAMPLE_PROFILE)


class HttpProfileFetcher:
    """
    Fetches profiles from an HTTP profile API that answers
    ``GET <api_url>?url=<profile url>`` with a profile JSON object.
    """

    def __init__(self, api_url: str, timeout_seconds: float = REQUEST_TIMEOUT):
        self.api_url = api_url
        self.timeout_seconds = timeout_seconds

    def fetch(self, url: str) -> LinkedInProfile:
        logger.info("Fetching LinkedIn profile for: %s", extract_username_from_url(url))
        try:
            response = requests.get(
                self.api_url, params={"url": url}, timeout=self.timeout_seconds
            )
            response.raise_for_status()
        except requests.Timeout as exc:
            raise FetchTimeoutError() from exc
        except requests.RequestException as exc:
            logger.error("Profile fetch failed for %s: %s", url, exc)
            raise NetworkError() from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise ParseError("The profile source returned a malformed response.") from exc
        if not isinstance(payload, dict):
            raise ParseError("The profile source returned a malformed response.")
        try:
            return LinkedInProfile.model_validate(payload)
        except pydantic.ValidationError as exc:
            raise ParseError("The profile source returned an unexpected profile shape.") from exc


@dataclass
class ProcessedProfile:
    original: LinkedInProfile
    enhanced: LinkedInProfile
    recommendations: Dict[str, List[str]]

    def as_dict(self) -> dict:
        return {
            "originalProfile": self.original.to_json(),
            "enhancedProfile": self.enhanced.to_json(),
            "recommendations": self.recommendations,
        }


class ProfileService:
    def __init__(self, fetcher: ProfileFetcher, enhancer: EnhancementService):
        self.fetcher = fetcher
        self.enhancer = enhancer

    def fetch_profile(self, url: str) -> LinkedInProfile:
        return self.fetcher.fetch(url)

    def process_profile(
        self,
        profile_data: Union[str, Mapping, LinkedInProfile],
        options: Optional[EnhancementOptions] = None,
    ) -> ProcessedProfile:
        """
        Runs a profile through enhancement and recommendation generation.

        ``profile_data`` may be a profile URL, a JSON-encoded profile or a
        structured record. Missing name fields are filled with placeholders.
        """
        if isinstance(profile_data, str) and looks_like_profile_url(profile_data):
            original = self.fetch_profile(profile_data)
        else:
            original = as_profile(profile_data).model_copy(deep=True)

        if not original.first_name:
            original.first_name = "Unknown"
        if not original.last_name:
            original.last_name = "User"

        enhanced = self.enhancer.enhance_full_profile(original, options)
        recommendations = self.enhancer.generate_recommendations(original)
        return ProcessedProfile(
            original=original, enhanced=enhanced, recommendations=recommendations
        )


def format_profile_for_template(
    profile: LinkedInProfile, template_id: str
) -> Dict[str, object]:
    """Shapes a profile into the payload website templates render."""
    location = ""
    if profile.location:
        location = f"{profile.location.city or ''}, {profile.location.country or ''}"

    def dump(items) -> list:
        return [item.to_json() for item in items or []]

    return {
        "templateId": template_id,
        "personal": {
            "name": " ".join(filter(None, [profile.first_name, profile.last_name])),
            "title": profile.headline or "",
            "summary": profile.summary or "",
            "image": profile.profile_picture_url or "",
            "location": location,
        },
        "experience": dump(profile.experiences),
        "education": dump(profile.education),
        "skills": list(profile.skills or []),
        "certifications": dump(profile.certifications),
        "languages": dump(profile.languages),
        "projects": dump(profile.projects),
    }
