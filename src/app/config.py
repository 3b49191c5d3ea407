"""Configuration management using Pydantic settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "STORE-VIEWER"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Simulation server
    upstream_enabled: bool = True
    upstream_url: str = "ws://localhost:8080/ws"
    upstream_http_url: str = "http://localhost:8080"
    upstream_reconnect_delay: float = 2.0  # seconds between reconnect attempts
    accident_timeout: float = 5.0

    # Store layout: JSON file with zones + exit; empty = built-in departments
    layout_path: str = ""

    # Animation
    animation_speed: float = 2.0  # pixels per frame
    frame_rate: int = 60

    # Interaction
    hover_radius: float = 25.0  # matches the 50px customer icon

    # Surfaces (pixels)
    store_width: int = 800
    store_height: int = 600
    panel_width: int = 400
    panel_height: int = 200
    font_path: str = ""  # TrueType font for Cyrillic labels; empty = Hershey (ASCII)

    # Streaming
    stream_fps: int = 10
    jpeg_quality: int = 80


settings = Settings()
