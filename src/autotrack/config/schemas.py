"""Pydantic schemas for autotrack configuration."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ApiConfig(BaseModel):
    """Credentials and endpoint configuration for the language-model backend."""

    endpoint: str = "https://api.openai.com/v1/chat/completions"
    api_key: Optional[str] = Field(default=None, repr=False)
    model: str = "gpt-4o-mini"
    temperature: float = Field(0.3, ge=0.0, le=2.0)
    max_tokens: int = Field(500, ge=1)
    timeout_seconds: Optional[float] = Field(default=None, gt=0)


class TrackingOptions(BaseModel):
    """Automatic collection categories of the analytics sink."""

    model_config = ConfigDict(populate_by_name=True)

    sessions: bool = True
    page_views: bool = Field(True, alias="pageViews")
    form_interactions: bool = Field(True, alias="formInteractions")
    file_downloads: bool = Field(True, alias="fileDownloads")


class AnalyticsConfig(BaseModel):
    """Credentials and endpoint configuration for the analytics sink."""

    api_key: Optional[str] = Field(default=None, repr=False)
    endpoint: str = "https://api2.amplitude.com/2/httpapi"
    tracking: TrackingOptions = TrackingOptions()


class NamingConfig(BaseModel):
    """Parameters controlling event naming."""

    fallback_event_name: str = Field("button_clicked", min_length=1)
    dedupe_in_flight: bool = False


class AppConfig(BaseModel):
    """Root configuration model for autotrack."""

    api: ApiConfig = ApiConfig()
    analytics: AnalyticsConfig = AnalyticsConfig()
    naming: NamingConfig = NamingConfig()
