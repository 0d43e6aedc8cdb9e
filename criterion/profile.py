"""
profile.py

Criterion ProfileResolver

Turns the profile argument of an evaluation into a concrete profile value.
The argument is either the profile itself (inline) or a string id looked
up in a ProfileRegistry. Failures are returned, not raised: the engine
reports them as INVALID_INPUT.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union

from criterion.registry import ProfileRegistry
from criterion.validation import MISSING


@dataclass(frozen=True)
class ResolvedProfile:
    """A profile value, with the registry id it came from (if any)."""
    value: Any
    profile_id: Optional[str] = None


@dataclass(frozen=True)
class ProfileResolutionError:
    """Why a profile argument could not be resolved."""
    reason: str
    profile_id: Optional[str] = None


def resolve_profile(
    profile: Any,
    registry: Optional[ProfileRegistry] = None,
) -> Union[ResolvedProfile, ProfileResolutionError]:
    """
    Resolve an inline profile or a registry id.

    Strings are always treated as registry ids. Any other value, including
    None and falsy values, is an inline profile passed through unchanged.
    """
    if profile is MISSING:
        return ProfileResolutionError("No profile supplied")

    if not isinstance(profile, str):
        return ResolvedProfile(value=profile)

    if registry is None:
        return ProfileResolutionError(
            f"Profile ID '{profile}' provided but no registry supplied",
            profile_id=profile,
        )
    if not registry.has(profile):
        return ProfileResolutionError(f"Profile not found: {profile}", profile_id=profile)

    return ResolvedProfile(value=registry.get(profile), profile_id=profile)
