"""Merchant-to-category mapping cache."""
import json
from pathlib import Path
from typing import Dict, Optional

import Levenshtein

from finn.utils.logger import get_logger, finn_home

logger = get_logger()


class VendorCache:
    """Learned merchant categories per profile, with fuzzy matching."""

    def __init__(self, cache_dir: Optional[Path] = None, fuzzy_threshold: int = 3):
        """
        Initialize vendor cache.

        Args:
            cache_dir: Directory holding one JSON file per profile
            fuzzy_threshold: Maximum Levenshtein distance for fuzzy match
        """
        self.fuzzy_threshold = fuzzy_threshold
        self.cache_dir = cache_dir or finn_home() / "vendors"

    def lookup(self, profile_id: str, vendor: str) -> Optional[str]:
        """
        Look up category for vendor.

        Args:
            profile_id: Profile identifier
            vendor: Merchant name or description

        Returns:
            Category name or None if not found
        """
        mappings = self._load_mappings(profile_id)
        normalized_vendor = self._normalize_vendor(vendor)

        if normalized_vendor in mappings:
            logger.debug(f"Exact vendor match: {vendor} -> {mappings[normalized_vendor]}")
            return mappings[normalized_vendor]

        for cached_vendor, category in mappings.items():
            distance = Levenshtein.distance(normalized_vendor, cached_vendor)
            if distance <= self.fuzzy_threshold:
                logger.debug(
                    f"Fuzzy vendor match: {vendor} -> {cached_vendor} "
                    f"(distance: {distance}) -> {category}"
                )
                return category

        return None

    def add_mapping(self, profile_id: str, vendor: str, category: str) -> None:
        """Remember a merchant's category; existing entries are kept."""
        mappings = self._load_mappings(profile_id)
        normalized_vendor = self._normalize_vendor(vendor)

        if normalized_vendor not in mappings:
            mappings[normalized_vendor] = category
            self._save_mappings(profile_id, mappings)
            logger.debug(f"Added vendor mapping: {vendor} -> {category}")

    def get_all_mappings(self, profile_id: str) -> Dict[str, str]:
        """All vendor mappings for a profile."""
        return self._load_mappings(profile_id)

    def clear(self, profile_id: Optional[str] = None) -> int:
        """
        Delete learned mappings.

        Args:
            profile_id: Profile to clear, or None for every profile

        Returns:
            Number of cache files removed
        """
        if not self.cache_dir.exists():
            return 0

        pattern = f"{profile_id}.json" if profile_id else "*.json"
        removed = 0
        for cache_file in self.cache_dir.glob(pattern):
            cache_file.unlink()
            removed += 1
        return removed

    def _cache_file(self, profile_id: str) -> Path:
        return self.cache_dir / f"{profile_id}.json"

    def _load_mappings(self, profile_id: str) -> Dict[str, str]:
        """Load mappings from file."""
        cache_file = self._cache_file(profile_id)

        if not cache_file.exists():
            return {}

        try:
            with open(cache_file, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load vendor cache for {profile_id}: {e}")
            return {}

    def _save_mappings(self, profile_id: str, mappings: Dict[str, str]) -> None:
        """Save mappings to file."""
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            with open(self._cache_file(profile_id), "w", encoding="utf-8") as f:
                json.dump(mappings, f, ensure_ascii=False, indent=2)
        except OSError as e:
            logger.error(f"Failed to save vendor cache for {profile_id}: {e}")

    @staticmethod
    def _normalize_vendor(vendor: str) -> str:
        """Normalize vendor name for matching."""
        return vendor.strip().lower()
