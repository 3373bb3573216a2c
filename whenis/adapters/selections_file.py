"""
Loads participant selections from a YAML file.

Expected layout::

    alice:
      - "2021-11-11T12:00:00.000Z"
      - "2021-11-11T13:00:00.000Z"
    bob: []
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import List

import pendulum
import yaml

from ..domain.grid import slot_id_for
from ..domain.models import SelectionEvent

logger = logging.getLogger(__name__)


class SelectionsFile:
    """Reads a mapping of user id -> selected slot ids."""

    def __init__(self, path: Path):
        self.path = path

    def load(self) -> List[SelectionEvent]:
        """
        Parse the file into selection events, one per participant.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the content is not a mapping of lists of strings
        """
        if not self.path.exists():
            raise FileNotFoundError(f"Selections file not found: {self.path}")

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {self.path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Selections file must contain a mapping at the root level.")

        events: List[SelectionEvent] = []

        for user_id, slots in data.items():
            slots = slots or []
            if not isinstance(slots, list):
                raise ValueError(f"Selections of '{user_id}' must be a list of slot ids")
            events.append(SelectionEvent.of(str(user_id), [self._slot_id(user_id, s) for s in slots]))

        logger.debug("Loaded selections of %d participant(s) from %s", len(events), self.path)
        return events

    @staticmethod
    def _slot_id(user_id: str, value) -> str:
        # Unquoted ISO timestamps come back from YAML as datetimes
        if isinstance(value, datetime):
            return slot_id_for(pendulum.instance(value))
        if isinstance(value, str):
            return value
        raise ValueError(f"Selections of '{user_id}' contain an invalid slot id: {value!r}")
