#!/usr/bin/env python3
"""
Importer settings, persisted as YAML

Example config.yaml:

    tmdb_api_key: 0123456789abcdef
    output_folder: Movies
    image_size: w185          # w92 | w154 | w185 | w342 | w500 | original
    duplicate_handling: append  # append | update | skip
    tags: movie, watched
"""

import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import List

import yaml

from filmlog.constants import (
    DEFAULT_IMAGE_SIZE, DEFAULT_OUTPUT_FOLDER, DUPLICATE_POLICIES, IMAGE_SIZES, POLICY_APPEND,
)
from filmlog.normalization import split_tags

logger = logging.getLogger(__name__)


class SettingsError(ValueError):
    """Settings file is unreadable or holds an invalid value"""


class MissingConfigError(SettingsError):
    """A setting required to run an import is not set"""


@dataclass
class ImportSettings:
    """Settings for one import run, passed explicitly to the importer"""
    tmdb_api_key: str = ''
    output_folder: str = DEFAULT_OUTPUT_FOLDER
    image_size: str = DEFAULT_IMAGE_SIZE
    duplicate_handling: str = POLICY_APPEND
    tags: str = ''

    def tag_list(self) -> List[str]:
        return split_tags(self.tags)

    def validate(self):
        """Raise SettingsError for values outside the allowed choices"""
        if self.image_size not in IMAGE_SIZES:
            raise SettingsError(
                f"image_size must be one of {', '.join(IMAGE_SIZES)} (got {self.image_size!r})"
            )
        if self.duplicate_handling not in DUPLICATE_POLICIES:
            raise SettingsError(
                f"duplicate_handling must be one of {', '.join(DUPLICATE_POLICIES)} "
                f"(got {self.duplicate_handling!r})"
            )

    def require_api_key(self):
        if not self.tmdb_api_key or not self.tmdb_api_key.strip():
            raise MissingConfigError(
                'Please set your TMDB API key first (tmdb_api_key in the config file '
                'or --api-key). Get a free key at https://www.themoviedb.org/settings/api'
            )

    @classmethod
    def from_dict(cls, data: dict) -> 'ImportSettings':
        """Build settings from a mapping, ignoring unknown keys; None means default"""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown settings: {', '.join(unknown)}")

        values = {}
        for key in known:
            value = data.get(key)
            if value is None:
                continue
            if key == 'tags' and isinstance(value, (list, tuple)):
                # tags: [movie, watched] is accepted as well as 'movie, watched'
                value = ', '.join(str(item).strip() for item in value if item is not None)
            elif isinstance(value, (dict, list, tuple)):
                raise SettingsError(f"{key} must be a single value, not a {type(value).__name__}")
            values[key] = str(value).strip()

        settings = cls(**values)
        settings.validate()
        return settings

    def to_dict(self) -> dict:
        return asdict(self)


def load_settings(path: Path) -> ImportSettings:
    """
    Load settings from YAML, filling in defaults

    A missing file gives the defaults, so a first run can start from flags.

    Raises:
        SettingsError: If the file is not valid YAML, not a mapping, or has a bad value
    """
    if not path.exists():
        logger.debug(f"No settings file at {path}, using defaults")
        return ImportSettings()

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise SettingsError(f"invalid yaml in {path}: {e}") from e

    if not isinstance(data, dict):
        raise SettingsError(f"{path} must contain a mapping of settings")

    return ImportSettings.from_dict(data)


def save_settings(settings: ImportSettings, path: Path):
    """Persist settings as YAML (creates parent directories)"""
    settings.validate()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(settings.to_dict(), f, default_flow_style=False, sort_keys=False)
    logger.info(f"Saved settings to {path}")
