"""User preference settings (the settings document)."""
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

from streakmind.core.logging import logger
from streakmind.services.storage import DocumentStore


class EnabledPersonalities(BaseModel):
    therapist: bool = True
    friend: bool = True
    trainer: bool = True


class NotificationSettings(BaseModel):
    streak_reminders: bool = True
    daily_goals: bool = True
    weekly_reports: bool = False


class PreferenceSettings(BaseModel):
    default_visualization: Literal['heatmap', 'bar', 'progress', 'pie'] = 'heatmap'
    time_format: Literal['12h', '24h'] = '24h'
    start_week_on: Literal['sunday', 'monday'] = 'monday'


class AppSettings(BaseModel):
    """Preferences shown in the settings screen."""
    show_scores: bool = True
    enabled_personalities: EnabledPersonalities = Field(default_factory=EnabledPersonalities)
    theme: Literal['light', 'dark', 'system'] = 'dark'
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    preferences: PreferenceSettings = Field(default_factory=PreferenceSettings)


def _deep_merge(base: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def decode_settings(raw: Any) -> AppSettings:
    return AppSettings.model_validate(raw)


def encode_settings(value: AppSettings) -> Dict[str, Any]:
    return value.model_dump()


class SettingsService:
    """Read, partially update and reset the settings document."""

    def __init__(self, store: DocumentStore[AppSettings]):
        self.store = store

    def get(self) -> AppSettings:
        return self.store.load()

    def update(self, updates: Optional[Dict[str, Any]]) -> AppSettings:
        """Merge a partial update; raises pydantic.ValidationError on bad values."""
        current = self.store.load()
        merged = AppSettings.model_validate(_deep_merge(current.model_dump(), updates or {}))
        self.store.save(merged)
        logger.info(f"Settings updated: {sorted((updates or {}).keys())}")
        return merged

    def reset(self) -> AppSettings:
        defaults = AppSettings()
        self.store.save(defaults)
        logger.info("Settings reset to defaults")
        return defaults
