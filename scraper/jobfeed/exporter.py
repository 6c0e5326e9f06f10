from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Iterable, List
import json
import pandas as pd
from .models import JobRecord

# Field-for-field encoding of JobRecord; no schema versioning
EXPORT_COLUMNS = ['title', 'company', 'location', 'link', 'description']


def _rows(records: Iterable[JobRecord]) -> List[Dict[str, Any]]:
    return [r.model_dump() for r in records]


def export_records(records: Iterable[JobRecord], path: Path) -> Path:
    """Write collected records in discovery order.

    Format follows the suffix: `.json` (array), `.jsonl` (one object per line)
    or `.csv`. Parent directories are created as needed.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    rows = _rows(records)
    suffix = path.suffix.lower()
    if suffix == '.json':
        path.write_text(json.dumps(rows, ensure_ascii=False, indent=2), encoding='utf-8')
    elif suffix == '.jsonl':
        with path.open('w', encoding='utf-8') as f:
            for row in rows:
                f.write(json.dumps(row, ensure_ascii=False) + '\n')
    elif suffix == '.csv':
        df = pd.DataFrame(rows, columns=EXPORT_COLUMNS)
        df.to_csv(path, index=False)
    else:
        raise ValueError(f"Unsupported export format '{suffix}' (use .json, .jsonl or .csv)")
    return path


def load_records(path: Path) -> List[JobRecord]:
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == '.json':
        rows = json.loads(path.read_text(encoding='utf-8'))
    elif suffix == '.jsonl':
        rows = [json.loads(line) for line in path.read_text(encoding='utf-8').splitlines() if line.strip()]
    elif suffix == '.csv':
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
        rows = df.to_dict(orient='records')
        for row in rows:
            row['description'] = row.get('description') or None
    else:
        raise ValueError(f"Unsupported export format '{suffix}' (use .json, .jsonl or .csv)")
    return [JobRecord(**row) for row in rows]


__all__ = ['EXPORT_COLUMNS', 'export_records', 'load_records']
