"""
climate_pipeline/config.py

Environment-driven runtime settings for fetching and dataset assembly.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, TypeVar

from climate_pipeline.env import load_env_files, resolve_project_path

T = TypeVar("T")


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    load_env_files()


def _env(name: str, default: T, cast: Callable[[str], T]) -> T:
    """
    Read `name` through `cast`; unset, blank or unparseable values fall back to `default`.
    """

    _load_env_once()
    raw_value = (os.getenv(name) or "").strip()
    if not raw_value:
        return default
    try:
        return cast(raw_value)
    except ValueError:
        return default


@dataclass(frozen=True)
class HTTPSettings:
    """
    Shared HTTP behavior for every provider request.
    """

    timeout_seconds: float = 30.0
    max_attempts: int = 3
    backoff_base_seconds: float = 1.5
    user_agent: str = "ClimateDataPipeline/1.0 (+https://github.com/climate-data-pipeline)"
    accept: str = "application/json,text/csv,*/*"


@dataclass(frozen=True)
class PipelineSettings:
    """
    Output locations and orchestration limits for one update run.
    """

    output_path: str = "public/data/climate-realtime.json"
    map_output_dir: str = "public/data/maps"
    map_public_prefix: str = "data/maps"
    map_max_back_days: int = 20
    max_workers: int = 8
    default_interval_minutes: float = 360.0


@lru_cache(maxsize=1)
def get_http_settings() -> HTTPSettings:
    """
    Return cached HTTP settings from environment variables.
    """

    defaults = HTTPSettings()
    return HTTPSettings(
        timeout_seconds=max(1.0, _env("CLIMATE_HTTP_TIMEOUT_SECONDS", defaults.timeout_seconds, float)),
        max_attempts=max(1, _env("CLIMATE_HTTP_MAX_ATTEMPTS", defaults.max_attempts, int)),
        backoff_base_seconds=max(
            0.0,
            _env("CLIMATE_HTTP_BACKOFF_BASE_SECONDS", defaults.backoff_base_seconds, float),
        ),
        user_agent=_env("CLIMATE_HTTP_USER_AGENT", defaults.user_agent, str),
        accept=_env("CLIMATE_HTTP_ACCEPT", defaults.accept, str),
    )


@lru_cache(maxsize=1)
def get_pipeline_settings() -> PipelineSettings:
    """
    Return cached pipeline settings; relative paths resolve against the project root.
    """

    defaults = PipelineSettings()
    output_path = _env("CLIMATE_OUTPUT_PATH", defaults.output_path, str)
    map_output_dir = _env("CLIMATE_MAP_OUTPUT_DIR", defaults.map_output_dir, str)
    return PipelineSettings(
        output_path=str(resolve_project_path(output_path)),
        map_output_dir=str(resolve_project_path(map_output_dir)),
        map_public_prefix=_env("CLIMATE_MAP_PUBLIC_PREFIX", defaults.map_public_prefix, str).rstrip("/"),
        map_max_back_days=max(0, _env("CLIMATE_MAP_MAX_BACK_DAYS", defaults.map_max_back_days, int)),
        max_workers=max(1, _env("CLIMATE_MAX_WORKERS", defaults.max_workers, int)),
        default_interval_minutes=max(
            1.0,
            _env("CLIMATE_DEFAULT_INTERVAL_MINUTES", defaults.default_interval_minutes, float),
        ),
    )
