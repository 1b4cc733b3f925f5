"""Profile persistence."""
import json
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from finn.utils.exceptions import ProfileStoreError
from finn.utils.logger import get_logger

logger = get_logger()

Profile = Dict[str, Any]

SAFE_ID = re.compile(r"^[\w.-]+$")


class ProfileStore(ABC):
    """Key-value store for user memory profiles."""

    @abstractmethod
    def get(self, profile_id: str) -> Optional[Profile]:
        """Return the stored profile or None."""

    @abstractmethod
    def put(self, profile_id: str, profile: Profile) -> None:
        """Store a profile, replacing any previous one."""

    @abstractmethod
    def delete(self, profile_id: str) -> bool:
        """Delete a profile; return True if one existed."""

    def list_ids(self) -> List[str]:
        """Known profile ids."""
        return []


class InMemoryProfileStore(ProfileStore):
    """Process-local profile store."""

    def __init__(self):
        self._profiles: Dict[str, Profile] = {}

    def get(self, profile_id: str) -> Optional[Profile]:
        return self._profiles.get(profile_id)

    def put(self, profile_id: str, profile: Profile) -> None:
        self._profiles[profile_id] = profile

    def delete(self, profile_id: str) -> bool:
        return self._profiles.pop(profile_id, None) is not None

    def list_ids(self) -> List[str]:
        return sorted(self._profiles)


class JsonProfileStore(ProfileStore):
    """One JSON file per profile under a directory."""

    def __init__(self, profiles_dir: Path):
        """
        Initialize store.

        Args:
            profiles_dir: Directory for ``<profile_id>.json`` files
        """
        self.profiles_dir = Path(profiles_dir)

    def get(self, profile_id: str) -> Optional[Profile]:
        path = self._path(profile_id)
        if not path.exists():
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ProfileStoreError(f"Failed to load profile {profile_id}: {e}")

    def put(self, profile_id: str, profile: Profile) -> None:
        path = self._path(profile_id)
        tmp_path = path.with_suffix(".json.tmp")

        try:
            self.profiles_dir.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(profile, f, ensure_ascii=False, indent=2)
            tmp_path.replace(path)
        except OSError as e:
            raise ProfileStoreError(f"Failed to save profile {profile_id}: {e}")

        logger.debug(f"Saved profile {profile_id} to {path}")

    def delete(self, profile_id: str) -> bool:
        path = self._path(profile_id)
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError as e:
            raise ProfileStoreError(f"Failed to delete profile {profile_id}: {e}")
        return True

    def list_ids(self) -> List[str]:
        if not self.profiles_dir.exists():
            return []
        return sorted(p.stem for p in self.profiles_dir.glob("*.json"))

    def _path(self, profile_id: str) -> Path:
        if not SAFE_ID.match(profile_id or ""):
            raise ProfileStoreError(f"Invalid profile id: {profile_id!r}")
        return self.profiles_dir / f"{profile_id}.json"
