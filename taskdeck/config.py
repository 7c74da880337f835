from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    host: str = "127.0.0.1"
    port: int = 9000
    tasks_file: Path = Path("data/tasks.json")
    zip_csv_file: Path = Path("data/utf_ken_all.csv")
    zipcloud_base_url: str = "https://zipcloud.ibsnet.co.jp/api"
    http_timeout: float = 10.0
    log_level: str = "INFO"
    log_file: Path | None = None

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
