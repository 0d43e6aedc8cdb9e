"""
registry.py

Criterion ProfileRegistry: named profile lookup table

Maps profile ids to profile values so callers can evaluate a decision
with {"profile": "us"} instead of passing the profile inline.

The registry is the only shared-mutable component of the system. It is
not internally synchronized: hosts that register profiles concurrently
with evaluations must serialize access themselves.

Re-registering an existing id replaces the previous value.
"""

from typing import Any, Dict, Iterator, Optional, Tuple


class RegistryError(Exception):
    """Raised when the registry is used with an invalid profile id."""

    def __init__(self, message: str, *, error_code: str = "R000"):
        self.message = message
        self.error_code = error_code
        super().__init__(self.format())

    def format(self) -> str:
        """Format as human-readable error message."""
        return f"[{self.error_code}] Profile registry error: {self.message}"


class InvalidProfileIdError(RegistryError):
    """Raised when a profile id is not a non-empty string."""

    def __init__(self, profile_id: Any):
        if isinstance(profile_id, str):
            message = "Profile id cannot be empty"
        else:
            message = f"Profile id must be str, got {type(profile_id).__name__}"
        super().__init__(message, error_code="R001")
        self.profile_id = profile_id


def _check_id(profile_id: Any) -> str:
    if not isinstance(profile_id, str) or not profile_id.strip():
        raise InvalidProfileIdError(profile_id)
    return profile_id


class ProfileRegistry:
    """
    In-memory mapping of profile id -> profile value.

    Example:
        registry = ProfileRegistry()
        registry.register("us", {"threshold": 10000})
        registry.get("us")      # {"threshold": 10000}
        "eu" in registry        # False
    """

    __slots__ = ('_profiles',)

    def __init__(self, profiles: Optional[Dict[str, Any]] = None):
        self._profiles: Dict[str, Any] = {}
        for profile_id, value in (profiles or {}).items():
            self.register(profile_id, value)

    def register(self, profile_id: str, profile: Any) -> None:
        """Register (or replace) the profile stored under profile_id."""
        self._profiles[_check_id(profile_id)] = profile

    def get(self, profile_id: str) -> Optional[Any]:
        """Return the profile stored under profile_id, or None."""
        return self._profiles.get(profile_id)

    def has(self, profile_id: str) -> bool:
        return profile_id in self._profiles

    def ids(self) -> Tuple[str, ...]:
        """Registered ids, sorted."""
        return tuple(sorted(self._profiles))

    def __contains__(self, profile_id: object) -> bool:
        return profile_id in self._profiles

    def __len__(self) -> int:
        return len(self._profiles)

    def __iter__(self) -> Iterator[str]:
        return iter(self.ids())

    def __repr__(self) -> str:
        return f"ProfileRegistry(ids={list(self.ids())!r})"


def create_profile_registry(profiles: Optional[Dict[str, Any]] = None) -> ProfileRegistry:
    """Create an in-memory ProfileRegistry, optionally pre-populated."""
    return ProfileRegistry(profiles)
