"""Loader for the static state-directory dataset.

The dataset is read from disk on every call; nothing is cached between
requests.
"""

import json
import logging
import re
from typing import Optional

from pydantic import ValidationError

from ..models.directory import StateDirectory

logger = logging.getLogger(__name__)


class DataUnavailable(Exception):
    """Raised when the state-directory dataset is missing or unparseable."""


def load_state_directory(path: str) -> StateDirectory:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            raw = json.load(fh)
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Error loading state data from %s: %s", path, exc)
        raise DataUnavailable(f"Failed to load state data from {path}") from exc

    try:
        return StateDirectory.model_validate(raw)
    except ValidationError as exc:
        logger.error("State data at %s has an unexpected shape: %s", path, exc)
        raise DataUnavailable(f"State data at {path} has an unexpected shape") from exc


def state_slug(state_name: str) -> str:
    """'New Mexico' -> 'new-mexico'"""
    return re.sub(r"[^a-z0-9]+", "-", state_name.lower()).strip("-")


def find_state_by_slug(directory: StateDirectory, slug: str) -> Optional[str]:
    wanted = state_slug(slug)
    for name in directory.states:
        if state_slug(name) == wanted:
            return name
    return None
