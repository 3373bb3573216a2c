"""
Owner of the active grid configuration.
"""

import logging
from typing import Any, Callable, List, Optional

from pydantic import ValidationError

from .configuration import Configuration, RangeChange
from .exceptions import InvalidConfigurationError

logger = logging.getLogger(__name__)

SettingsListener = Callable[[str, Configuration], None]


class Settings:
    """
    Shared settings model.

    Every mutation goes through one of the ``*_change`` methods. A change is
    validated as a whole new Configuration; if that fails the previous
    configuration stays active and InvalidConfigurationError is raised.
    """

    def __init__(self, configuration: Optional[Configuration] = None):
        self._configuration = configuration or Configuration()
        self._listeners: List[SettingsListener] = []

    @property
    def configuration(self) -> Configuration:
        return self._configuration

    def subscribe(self, listener: SettingsListener) -> None:
        """Register a callback receiving ``(change_name, configuration)``."""
        self._listeners.append(listener)

    def days_range_change(self, values: RangeChange) -> Configuration:
        return self._apply("days-range", days_range=values.as_tuple())

    def time_range_change(self, values: RangeChange) -> Configuration:
        return self._apply("time-range", time_range=values.as_tuple())

    def allow_weekends_change(self, value: bool) -> Configuration:
        return self._apply("allow-weekends", allow_weekends=value)

    def half_hours_change(self, value: bool) -> Configuration:
        return self._apply("half-hours", half_hour_intervals=value)

    def duration_change(self, value: int) -> Configuration:
        return self._apply("duration", duration=value)

    def _apply(self, change: str, **updates: Any) -> Configuration:
        candidate = {**self._configuration.model_dump(), **updates}

        try:
            configuration = Configuration.model_validate(candidate)
        except ValidationError as exc:
            logger.warning("Rejected %s change %s: %s", change, updates, exc)
            raise InvalidConfigurationError(
                f"Invalid {change} change {updates}: {exc}"
            ) from exc

        self._configuration = configuration
        logger.info("Applied %s change: %s", change, updates)

        for listener in self._listeners:
            listener(change, configuration)

        return configuration
