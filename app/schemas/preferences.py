from typing import Literal

from pydantic import ConfigDict, Field

from app.schemas.base import CamelModel

Theme = Literal["light", "dark", "system"]
Visibility = Literal["public", "private"]


class UserPreferences(CamelModel):
    """Effective settings: stored overrides on top of these defaults."""

    # Notifications
    email_notifications: bool = True
    push_notifications: bool = False
    weekly_digest: bool = True
    reading_reminders: bool = True
    achievement_alerts: bool = True

    # Reading
    font_size: int = Field(16, ge=10, le=32)
    font_family: str = "inter"
    reading_speed: int = Field(250, ge=50, le=1000)  # target words per minute
    auto_play: bool = False
    highlight_words: bool = True
    show_progress: bool = True

    # Audio
    default_voice: str = "rachel"
    speech_rate: float = Field(1.0, ge=0.5, le=2.0)
    volume: int = Field(75, ge=0, le=100)
    autoplay_chapters: bool = False

    # Interface
    theme: Theme = "system"
    language: str = "en"
    sidebar_collapsed: bool = False
    compact_mode: bool = False

    # Privacy
    profile_visibility: Visibility = "private"
    data_sharing: bool = False
    analytics_opt_out: bool = False


class PreferencesUpdate(CamelModel):
    """Partial settings update; only supplied keys change."""

    model_config = ConfigDict(extra="forbid")

    email_notifications: bool | None = None
    push_notifications: bool | None = None
    weekly_digest: bool | None = None
    reading_reminders: bool | None = None
    achievement_alerts: bool | None = None

    font_size: int | None = Field(None, ge=10, le=32)
    font_family: str | None = Field(None, min_length=1, max_length=50)
    reading_speed: int | None = Field(None, ge=50, le=1000)
    auto_play: bool | None = None
    highlight_words: bool | None = None
    show_progress: bool | None = None

    default_voice: str | None = Field(None, min_length=1, max_length=50)
    speech_rate: float | None = Field(None, ge=0.5, le=2.0)
    volume: int | None = Field(None, ge=0, le=100)
    autoplay_chapters: bool | None = None

    theme: Theme | None = None
    language: str | None = Field(None, min_length=2, max_length=10)
    sidebar_collapsed: bool | None = None
    compact_mode: bool | None = None

    profile_visibility: Visibility | None = None
    data_sharing: bool | None = None
    analytics_opt_out: bool | None = None


class PreferencesResponse(CamelModel):
    preferences: UserPreferences


class PreferencesUpdateResponse(CamelModel):
    message: str = "Settings updated successfully"
    preferences: UserPreferences
