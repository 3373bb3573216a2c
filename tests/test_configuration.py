"""
Tests for the grid configuration and the settings model.
"""

import pytest
from pydantic import ValidationError

from whenis.domain.configuration import Configuration, RangeChange
from whenis.domain.exceptions import InvalidConfigurationError
from whenis.domain.settings import Settings


class TestConfiguration:
    """Tests for Configuration model."""

    def test_defaults(self):
        """Defaults match the stock settings panel."""
        config = Configuration()

        assert config.days_range == (0, 4)
        assert config.time_range == (9, 18)
        assert config.allow_weekends is False
        assert config.half_hour_intervals is False
        assert config.duration == 60
        assert config.day_count() == 5
        assert list(config.hours()) == list(range(9, 19))

    def test_lists_are_accepted_for_ranges(self):
        """YAML gives lists; they become tuples."""
        config = Configuration(days_range=[1, 3], time_range=[8, 12])

        assert config.days_range == (1, 3)
        assert config.time_range == (8, 12)

    def test_inverted_days_range_raises_error(self):
        with pytest.raises(ValidationError, match="must not exceed"):
            Configuration(days_range=(3, 1))

    def test_inverted_time_range_raises_error(self):
        with pytest.raises(ValidationError, match="must not exceed"):
            Configuration(time_range=(18, 9))

    @pytest.mark.parametrize("days_range", [(-1, 2), (0, 15)])
    def test_days_range_limits(self, days_range):
        with pytest.raises(ValidationError, match="must be within"):
            Configuration(days_range=days_range)

    @pytest.mark.parametrize("time_range", [(-1, 9), (9, 24)])
    def test_time_range_limits(self, time_range):
        with pytest.raises(ValidationError, match="must be within"):
            Configuration(time_range=time_range)

    def test_duration_must_be_positive(self):
        with pytest.raises(ValidationError, match="greater than zero"):
            Configuration(duration=0)

    def test_configuration_is_immutable(self):
        config = Configuration()

        with pytest.raises(ValidationError):
            config.duration = 30


class TestSettings:
    """Tests for the Settings model."""

    def test_days_range_change(self):
        """A valid change replaces the configuration and notifies listeners."""
        settings = Settings()
        changes = []
        settings.subscribe(lambda change, config: changes.append((change, config.days_range)))

        settings.days_range_change(RangeChange(lower=1, upper=2))

        assert settings.configuration.days_range == (1, 2)
        assert changes == [("days-range", (1, 2))]

    def test_every_change_kind(self):
        settings = Settings()

        settings.time_range_change(RangeChange(lower=8, upper=10))
        settings.allow_weekends_change(True)
        settings.half_hours_change(True)
        settings.duration_change(30)

        assert settings.configuration == Configuration(
            time_range=(8, 10),
            allow_weekends=True,
            half_hour_intervals=True,
            duration=30,
        )

    def test_invalid_change_keeps_prior_configuration(self):
        """An inverted range is rejected and nothing is published."""
        settings = Settings(Configuration(days_range=(0, 2)))
        changes = []
        settings.subscribe(lambda change, config: changes.append(change))

        with pytest.raises(InvalidConfigurationError, match="days-range"):
            settings.days_range_change(RangeChange(lower=5, upper=1))

        assert settings.configuration.days_range == (0, 2)
        assert changes == []

    def test_invalid_duration_rejected(self):
        settings = Settings()

        with pytest.raises(InvalidConfigurationError):
            settings.duration_change(-15)

        assert settings.configuration.duration == 60
