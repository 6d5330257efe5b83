import logging
import os
from dataclasses import dataclass
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_SEED_PATH = PROJECT_ROOT / "data" / "seed.json"

SEED_PATH_ENV = "CATALOG_SEED_PATH"
SKIP_ORPHANS_ENV = "CATALOG_SKIP_ORPHANS"
LOG_LEVEL_ENV = "CATALOG_LOG_LEVEL"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    seed_path: Path
    skip_orphans: bool
    log_level: int


def get_seed_path() -> Path:
    """
    Путь к seed-файлу:
    1. переменная CATALOG_SEED_PATH (если не пустая)
    2. data/seed.json в корне проекта
    """
    env_value = os.environ.get(SEED_PATH_ENV)
    if env_value:
        return Path(env_value)
    return DEFAULT_SEED_PATH


def get_skip_orphans() -> bool:
    """Пропускать товары с битыми ссылками вместо ошибки при старте"""
    return os.environ.get(SKIP_ORPHANS_ENV, "").strip().lower() in _TRUTHY


def get_log_level() -> int:
    """
    Уровень логирования по имени (DEBUG, INFO, ...), по умолчанию INFO

    Raises:
        ValueError: неизвестное имя уровня
    """
    name = os.environ.get(LOG_LEVEL_ENV, "INFO").strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level in {LOG_LEVEL_ENV}: {name!r}")
    return level


def load_settings() -> Settings:
    return Settings(
        seed_path=get_seed_path(),
        skip_orphans=get_skip_orphans(),
        log_level=get_log_level(),
    )
