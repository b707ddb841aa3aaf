# === FILE: https_scout/config.py ===
"""
Модуль для загрузки и валидации конфигурации краулера HttpsScout.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from urllib.parse import urlsplit

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

__all__ = ["CrawlerConfig", "load_config", "parse_duration"]

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$")
_DURATION_UNITS: Dict[str, float] = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_duration(value: Union[str, int, float]) -> float:
    """Переводит ``"250ms"``, ``"1s"``, ``"2m"`` или число в секунды."""
    if isinstance(value, (int, float)):
        return float(value)
    match = _DURATION_RE.match(value)
    if match is None:
        raise ValueError(f"Неправильная длительность: {value!r}")
    amount, unit = match.groups()
    return float(amount) * _DURATION_UNITS[unit or "s"]


class CrawlerConfig(BaseModel):
    """Конфигурация для одного запуска обхода."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    sites: List[str] = Field(..., min_length=1, description="Стартовые URL для обхода.")
    depth: int = Field(0, ge=0, description="Глубина обхода, 0 = без ограничения.")
    parallel: int = Field(10, ge=1, description="Макс. число параллельных запросов на хост.")
    delay: float = Field(1.0, ge=0, description="Пауза между запросами к одному хосту (секунд).")
    timeout: float = Field(10.0, gt=0, description="Таймаут на один запрос (секунд).")
    user_agent: str = Field("HttpsScout/0.1", min_length=1, description="Заголовок User-Agent.")
    retry_times: int = Field(0, ge=0, description="Число повторных попыток при 429/5xx.")
    retry_backoff: float = Field(1.0, ge=0, description="Базовая пауза перед повтором (секунд).")
    verbose: bool = Field(False, description="Писать ход обхода в поток ошибок.")
    slack_url: Optional[str] = Field(None, description="Slack incoming webhook для итогов.")

    @field_validator("sites", mode="before")
    def _split_sites(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [v]
        return v

    @field_validator("sites")
    def _check_sites(cls, v: List[str]) -> List[str]:
        cleaned = []
        for raw in v:
            site = raw.strip()
            parts = urlsplit(site)
            if parts.scheme not in ("http", "https") or not parts.netloc:
                raise ValueError(f"invalid URL: {raw!r}")
            cleaned.append(site)
        return cleaned

    @field_validator("delay", "timeout", mode="before")
    def _parse_durations(cls, v: Any) -> Any:
        if isinstance(v, (str, int, float)) and not isinstance(v, bool):
            return parse_duration(v)
        return v


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def _read_file(path: Union[str, Path, None]) -> dict[str, Any]:
    if path is None:
        if not _DEFAULT_CFG.exists():
            return {}
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")


def load_config(path: Union[str, Path, None] = None, **overrides: Any) -> CrawlerConfig:
    """
    Читает YAML или JSON, накладывает overrides (значения None пропускаются)
    и возвращает проверенный объект CrawlerConfig.
    Без path используется configs/default.yaml, если он существует.
    """
    data = _read_file(path)
    data.update({k: v for k, v in overrides.items() if v is not None})
    return CrawlerConfig(**data)
