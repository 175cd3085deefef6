"""
Configuration for the infoscreen server.

The configuration is a JSON file. Global settings (repository, cache, sync
interval, process lifecycle) sit at the top level; every front-end screen is
an entry under "screens" with its own bind address and content feeds.
"""

from pathlib import Path
from typing import List

from pydantic import BaseModel, Field, ValidationError

from .core.errors import ConfigError

DEFAULT_CONFIG_FILE = Path("config.json")


class ScreenConfig(BaseModel):
    bind_adr: str = "localhost"
    bind_port: int = Field(5000, ge=0, le=65535)
    screen_config: int = 1

    # Content feeds; an empty path disables the feed
    content_source_dir: str = ""
    content2_source_dir: str = ""
    content3_source_dir: str = ""
    image_source_dir: str = ""
    ticker_source_dir: str = ""
    ticker_default_file: str = ""

    content_image_display_duration: int = 5
    ticker_display_duration: int = 5
    mixin_image_display_duration: int = 5
    mixin_image_rate: int = 2

    open_weather_map_url: str = "http://api.openweathermap.org/data/2.5"
    open_weather_map_api_key: str = ""
    open_weather_map_city_id: str = ""

    @property
    def url(self) -> str:
        return f"http://{self.bind_adr}:{self.bind_port}/"


class AppConfig(BaseModel):
    log_file: str = "infoscreen.log"
    app_root: str = "app"
    repo_root: str = "rep"
    cache_size: int = Field(100, ge=0, description="Image cache size in MB")
    content_sync_interval: int = Field(60, gt=0, description="Seconds between content polls")

    browser_path: str = ""
    terminate_hour: int = Field(-1, ge=-1, le=23)
    terminate_minute: int = Field(0, ge=0, le=59)

    screens: List[ScreenConfig] = Field(default_factory=lambda: [ScreenConfig()], min_length=1)


def load_config(path: Path = DEFAULT_CONFIG_FILE) -> AppConfig:
    """Load and validate the configuration file at `path`."""
    try:
        data = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f'Failed to open config file "{path}": {e}') from e

    try:
        return AppConfig.model_validate_json(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e
