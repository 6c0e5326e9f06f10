"""Centralized settings with environment + runtime config overlay.
Provides typed accessors to avoid scattering magic numbers through the collector.
"""
from __future__ import annotations
from pathlib import Path
from typing import Optional
import os, yaml
from dataclasses import dataclass

_RUNTIME_CACHE: dict | None = None

CONFIG_DIR = Path(__file__).resolve().parent.parent / 'config'

def _load_runtime() -> dict:
    global _RUNTIME_CACHE
    if _RUNTIME_CACHE is None:
        cfg_file = CONFIG_DIR / 'runtime.yml'
        if cfg_file.exists():
            try:
                _RUNTIME_CACHE = yaml.safe_load(cfg_file.read_text(encoding='utf-8')) or {}
            except yaml.YAMLError:
                _RUNTIME_CACHE = {}
        else:
            _RUNTIME_CACHE = {}
    return _RUNTIME_CACHE

def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is not None:
        try:
            return int(v)
        except ValueError:
            return default
    return int(_load_runtime().get(name.lower(), default))

def _env_str(name: str, default: str) -> str:
    v = os.getenv(name)
    if v is not None:
        return v
    return str(_load_runtime().get(name.lower(), default))

def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        v = _load_runtime().get(name.lower())
        if v is None:
            return default
        if isinstance(v, bool):
            return v
    return str(v).strip().lower() in ('1', 'true', 'yes', 'on')

@dataclass(frozen=True)
class Settings:
    base_origin: str
    default_target: int
    settle_ms: int
    detail_settle_ms: int
    marker_timeout_ms: int
    detail_timeout_ms: int
    stall_threshold_scroll: int
    stall_threshold_load_more: int
    max_cycles: int
    open_details: bool
    cdp_url: str
    layouts_file: Optional[Path]
    history_path: Path

def load_settings() -> Settings:
    layouts = _env_str('SCRAPER_LAYOUTS_FILE', '')
    return Settings(
        base_origin=_env_str('SCRAPER_BASE_ORIGIN', 'https://www.linkedin.com'),
        default_target=max(1, _env_int('SCRAPER_TARGET', 25)),
        settle_ms=_env_int('SCRAPER_SETTLE_MS', 2000),
        detail_settle_ms=_env_int('SCRAPER_DETAIL_SETTLE_MS', 800),
        marker_timeout_ms=_env_int('SCRAPER_MARKER_TIMEOUT_MS', 10000),
        detail_timeout_ms=_env_int('SCRAPER_DETAIL_TIMEOUT_MS', 5000),
        # click-driven loads settle slower than plain scrolling
        stall_threshold_scroll=max(1, _env_int('SCRAPER_STALL_SCROLL', 3)),
        stall_threshold_load_more=max(1, _env_int('SCRAPER_STALL_LOAD_MORE', 5)),
        max_cycles=max(1, _env_int('SCRAPER_MAX_CYCLES', 200)),
        open_details=_env_bool('SCRAPER_OPEN_DETAILS', True),
        cdp_url=_env_str('SCRAPER_CDP_URL', 'http://localhost:9222'),
        layouts_file=Path(layouts) if layouts else None,
        history_path=Path(_env_str('SCRAPER_RUN_HISTORY', 'scraper/data/run_history.jsonl')),
    )

SETTINGS = load_settings()
