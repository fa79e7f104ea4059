"""
Analysis settings and report options.

Settings arrive as a flat key/value mapping per caller (dashboard sidebar,
YAML file, stored preferences). Missing keys fall back to the defaults below;
malformed values raise `SettingsError` before any analysis starts.
"""

import logging
import re
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from insights.errors import SettingsError

logger = logging.getLogger(__name__)

_PERCENT_FIELDS = ("growth_threshold", "strength_threshold", "group_weakness_threshold")
_SIZE_FIELDS = ("group_max_size", "group_min_size")


def _snake(key: str) -> str:
    """growthThreshold -> growth_threshold"""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key.strip()).lower().replace("-", "_")


@dataclass(frozen=True)
class Settings:
    growth_threshold: float = 50
    strength_threshold: float = 75
    group_weakness_threshold: float = 70
    group_max_size: int = 5
    group_min_size: int = 2

    def __post_init__(self):
        for name in _PERCENT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise SettingsError(f"{name} must be a number, got {value!r}")
            if not 0 <= value <= 100:
                raise SettingsError(f"{name} must be within [0, 100], got {value}")
        for name in _SIZE_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise SettingsError(f"{name} must be a positive integer, got {value!r}")
        if self.group_min_size > self.group_max_size:
            raise SettingsError(
                f"group_min_size ({self.group_min_size}) exceeds group_max_size ({self.group_max_size})"
            )
        if self.growth_threshold > self.strength_threshold:
            raise SettingsError(
                f"growth_threshold ({self.growth_threshold}) exceeds strength_threshold ({self.strength_threshold})"
            )

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]] = None) -> "Settings":
        """Build settings from a flat mapping; accepts snake_case or camelCase keys."""
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, raw in (values or {}).items():
            name = _snake(str(key))
            if name not in known:
                logger.debug(f"Ignoring unknown setting {key!r}")
                continue
            if raw is None or raw == "":
                continue
            kwargs[name] = cls._coerce(name, raw)
        return cls(**kwargs)

    @staticmethod
    def _coerce(name: str, raw: Any) -> Any:
        if isinstance(raw, str):
            try:
                raw = float(raw.strip().rstrip("%"))
            except ValueError:
                raise SettingsError(f"{name} must be numeric, got {raw!r}")
        if name in _SIZE_FIELDS and isinstance(raw, float) and raw.is_integer():
            return int(raw)
        return raw

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_settings_file(path: Union[str, Path]) -> Settings:
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise SettingsError(f"{path} must contain a mapping, got {type(data).__name__}")
    return Settings.from_mapping(data.get("settings", data))


_FALSE_FLAGS = frozenset({"", "false", "0", "no", "off"})


def _flag(raw: Any) -> bool:
    """Flags from flat string providers; the usual spellings of false count as off."""
    if isinstance(raw, str):
        return raw.strip().lower() not in _FALSE_FLAGS
    return bool(raw)


@dataclass(frozen=True)
class ReportOptions:
    """Which optional report sections to compute. A false or absent flag omits the bundle key."""

    item_analysis: bool = False
    groups: bool = False
    heatmaps: bool = False
    format_sections: bool = False
    district: bool = False

    @classmethod
    def everything(cls) -> "ReportOptions":
        return cls(item_analysis=True, groups=True, heatmaps=True, format_sections=True, district=True)

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]] = None) -> "ReportOptions":
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, raw in (values or {}).items():
            name = _snake(str(key))
            if name in known:
                kwargs[name] = _flag(raw)
        return cls(**kwargs)
