"""Run history logging utilities.

Writes each collection run summary as one JSON line (JSONL) for easy append and later analysis.
File lives under data/ by default (configurable via SCRAPER_RUN_HISTORY or CLI flag).
"""
from __future__ import annotations
from pathlib import Path
from datetime import datetime, timezone
import json
import logging
from typing import Dict, Any, List

logger = logging.getLogger('history')

def append_history(summary: Dict[str, Any], history_path: Path):
    history_path = Path(history_path)
    history_path.parent.mkdir(parents=True, exist_ok=True)
    rec = dict(summary)
    rec['timestamp_utc'] = datetime.now(timezone.utc).isoformat()
    try:
        with history_path.open('a', encoding='utf-8') as f:
            f.write(json.dumps(rec, ensure_ascii=False, default=str) + '\n')
    except OSError:
        # Non-fatal; the collected records are still returned to the caller
        logger.warning(f"Could not append run history to {history_path}", exc_info=True)

def read_history(history_path: Path) -> List[Dict[str, Any]]:
    history_path = Path(history_path)
    if not history_path.exists():
        return []
    out = []
    for line in history_path.read_text(encoding='utf-8').splitlines():
        if line.strip():
            out.append(json.loads(line))
    return out

__all__ = ['append_history', 'read_history']
