import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings

LOG_LEVELS = ("debug", "info", "error")


class Settings(BaseSettings):
    # 项目信息
    APP_NAME: str = "Book Tracker"
    APP_VERSION: str = "0.1.0"

    # 服务
    PORT: str = "8006"
    LOG_LEVEL: str = "info"

    # 数据库
    DB_PATH: str = "./booktracker.db"
    SEED_SAMPLE_DATA: bool = True

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @field_validator("PORT")
    @classmethod
    def _check_port(cls, v: str) -> str:
        if not v:
            raise ValueError("PORT cannot be empty")
        if not v.removeprefix(":").isdigit():
            raise ValueError(f"PORT must be a number, got: {v}")
        return v

    @field_validator("DB_PATH")
    @classmethod
    def _check_db_path(cls, v: str) -> str:
        if not v:
            raise ValueError("DB_PATH cannot be empty")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def _check_log_level(cls, v: str) -> str:
        if v not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be debug, info, or error, got: {v}")
        return v

    @property
    def port_number(self) -> int:
        return int(self.PORT.removeprefix(":"))

    @property
    def DATABASE_URL(self) -> str:
        return f"sqlite+aiosqlite:///{self.DB_PATH}"


def configure_logging(level: str) -> None:
    """按 LOG_LEVEL 初始化根 logger"""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


settings = Settings()
