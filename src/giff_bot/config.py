"""Application configuration loaded from environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # Discord application
    app_id: str = ""
    public_key: str = ""
    discord_token: str = ""
    discord_api_base: str = "https://discord.com/api/v10"

    # HTTP listener
    host: str = "0.0.0.0"
    port: int = 3000

    # e621 search
    e621_base_url: str = "https://e621.net"
    user_agent: str = "discord-giff"
    fetch_timeout_ms: int = 2000
    fetch_max_attempts: int = 3
    fetch_page_size: int = 10
    required_ext: str = "gif"

    # Tag storage
    data_dir: str = "./data"
    config_file_name: str = "user-configs.json"
    default_tags: list[str] = [
        "order:random",
        "score:>2000",
        "rating:safe",
        "-comic",
        "type:gif",
        "animated",
    ]

    @property
    def config_file(self) -> Path:
        return Path(self.data_dir) / self.config_file_name


settings = Settings()
