"""
Exception taxonomy for the analytics engine.

Configuration errors abort a whole analysis run. Data-quality conditions
(empty teachers, unscored students, standards without attempts) are never
raised; components absorb them and reflect them in the bundle's shape.
"""


class AnalyticsError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(AnalyticsError):
    """A resolution step failed and no report can be produced."""

    def __init__(self, step: str, message: str):
        self.step = step
        super().__init__(f"{step}: {message}")


class SettingsError(ConfigurationError):
    def __init__(self, message: str):
        super().__init__("settings", message)


class DatasetError(ConfigurationError):
    def __init__(self, message: str):
        super().__init__("dataset shape", message)


class DatasetLoadError(AnalyticsError):
    """The dataset provider could not deliver an assessment export."""

    def __init__(self, assessment_id: str, message: str):
        self.assessment_id = assessment_id
        super().__init__(f"Could not load assessment {assessment_id!r}: {message}")
