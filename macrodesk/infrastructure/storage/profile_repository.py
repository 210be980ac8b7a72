"""
Profile Repository
One JSON file per profile under the profiles directory
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

from macrodesk.domain.exceptions import (
    InvalidProfileIdError,
    ProfileExistsError,
    ProfileFileNotFoundError,
    ProfileNotFoundError,
)
from macrodesk.domain.models import Profile, ProfileFile

logger = logging.getLogger(__name__)

_ID_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")


def profile_id_from_name(name: str) -> str:
    """Filesystem-safe id: every non-alphanumeric character becomes "_"."""
    return re.sub(r"[^a-zA-Z0-9]", "_", name)


class ProfileRepository:
    def __init__(self, profiles_dir: Path):
        self.profiles_dir = Path(profiles_dir)

    def ensure_dir(self) -> None:
        self.profiles_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, profile_id: str) -> Path:
        if not profile_id or not _ID_PATTERN.match(profile_id):
            raise InvalidProfileIdError(f"Invalid profile id: {profile_id!r}")
        return self.profiles_dir / f"{profile_id}.json"

    def _read(self, path: Path) -> Profile:
        with open(path, "r", encoding="utf-8") as f:
            return Profile.from_dict(json.load(f))

    def _write(self, profile: Profile) -> None:
        """Write via temp file + rename so readers never see a partial file."""
        self.ensure_dir()
        path = self._path(profile.id)
        fd, tmp_name = tempfile.mkstemp(prefix=f"{profile.id}_", suffix=".tmp", dir=self.profiles_dir)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(profile.to_dict(), f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    # ------------------------------------------------------------------
    # PROFILES
    # ------------------------------------------------------------------

    def create(self, name: str) -> Profile:
        profile_id = profile_id_from_name(name)
        path = self._path(profile_id)
        if path.exists():
            raise ProfileExistsError(f"Profile already exists: {profile_id}")
        profile = Profile(id=profile_id, name=name, files=[])
        self._write(profile)
        logger.info("Created profile %s", profile_id)
        return profile

    def get(self, profile_id: str) -> Profile:
        path = self._path(profile_id)
        if not path.exists():
            raise ProfileNotFoundError(f"Profile not found: {profile_id}")
        return self._read(path)

    def list_profiles(self) -> List[Dict[str, str]]:
        """Id and name of every readable profile, sorted by file name."""
        if not self.profiles_dir.exists():
            return []
        summaries = []
        for path in sorted(self.profiles_dir.glob("*.json")):
            try:
                profile = self._read(path)
            except (OSError, ValueError, KeyError) as exc:
                logger.error("Failed to read profile %s: %s", path.name, exc)
                continue
            summaries.append({"id": profile.id, "name": profile.name})
        return summaries

    # ------------------------------------------------------------------
    # FILES
    # ------------------------------------------------------------------

    def add_files(self, profile_id: str, files: List[ProfileFile]) -> Profile:
        profile = self.get(profile_id)
        profile.files.extend(files)
        self._write(profile)
        logger.info("Added %d file(s) to profile %s", len(files), profile_id)
        return profile

    def _file_at(self, profile: Profile, index: int) -> ProfileFile:
        if index < 0 or index >= len(profile.files):
            raise ProfileFileNotFoundError(f"File {index} not found in profile {profile.id}")
        return profile.files[index]

    def update_file(
        self,
        profile_id: str,
        index: int,
        date: Optional[str] = None,
        tags: Optional[List[str]] = None,
        title: Optional[str] = None,
    ) -> ProfileFile:
        """
        Edit date, tags and title of one file.

        Empty date/title are ignored; an empty tag list clears the tags.
        """
        profile = self.get(profile_id)
        entry = self._file_at(profile, index)
        if date:
            entry.date = date
        if tags is not None:
            entry.tags = list(tags)
        if title:
            entry.title = title
        self._write(profile)
        return entry

    def delete_file(self, profile_id: str, index: int) -> None:
        profile = self.get(profile_id)
        self._file_at(profile, index)
        del profile.files[index]
        self._write(profile)
        logger.info("Deleted file %d from profile %s", index, profile_id)
