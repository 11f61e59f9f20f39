from dataclasses import dataclass
from datetime import date
from pathlib import Path
import zoneinfo

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_QUESTIONS_PATH = Path(__file__).parent / "data" / "questions.json"


@dataclass(frozen=True)
class QuizConfig:
    start_date: date
    total_days: int
    tz: str
    open_hour: int
    close_hour: int

    def __post_init__(self):
        for name in ("open_hour", "close_hour"):
            h = getattr(self, name)
            if not 0 <= h <= 23:
                raise ValueError(f"{name} must be 0-23, got {h}")
        if self.open_hour >= self.close_hour:
            raise ValueError("open_hour must be before close_hour")
        if self.total_days < 1:
            raise ValueError("total_days must be at least 1")
        try:
            zoneinfo.ZoneInfo(self.tz)
        except (zoneinfo.ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"unknown timezone {self.tz!r}") from e


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")
    ENV: str = "dev"
    DATABASE_URL: str = "sqlite:///./dailyquiz.db"

    QUIZ_START_DATE: date = date(2024, 12, 1)
    QUIZ_TOTAL_DAYS: int = 24
    QUIZ_TZ: str = "Europe/London"
    OPEN_HOUR: int = 10
    CLOSE_HOUR: int = 16
    QUESTIONS_PATH: Path = DEFAULT_QUESTIONS_PATH

    BACKEND: str = "local"  # local | remote
    REMOTE_BACKEND_URL: str = ""
    REMOTE_BACKEND_TOKEN: str = ""

    IP_SOURCE: str = "request"  # request | lookup
    IP_LOOKUP_URL: str = "https://api64.ipify.org?format=json"

    DEV_MODE: bool = False
    DEV_OVERRIDE_PATH: Path = Path(".dailyquiz-override.json")

    ADMIN_TOKEN: str = "dailyquiz-admin"
    DEVICE_COOKIE: str = "dailyquiz_device"
    LOG_LEVEL: str = "INFO"

    def quiz_config(self) -> QuizConfig:
        return QuizConfig(
            start_date=self.QUIZ_START_DATE,
            total_days=self.QUIZ_TOTAL_DAYS,
            tz=self.QUIZ_TZ,
            open_hour=self.OPEN_HOUR,
            close_hour=self.CLOSE_HOUR,
        )

settings = Settings()
