# brewlab_backend/app/services/data_stores/io_utils.py
from __future__ import annotations

import json, os, tempfile, shutil
from pathlib import Path
from typing import Any

from brewlab_backend.app.utils.io_guards import assert_writable

def atomic_write(path: Path, text: str) -> None:
    """
    Atomic, guarded text write. Refuses writes under the packaged seed dir.
    """
    assert_writable(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile("w", delete=False, dir=path.parent, encoding="utf-8") as tf:
        tf.write(text)
        tmp = Path(tf.name)
    try:
        os.replace(tmp, path)   # atomic where supported
    except OSError:
        shutil.move(str(tmp), str(path))

def read_json(path: Path, default: Any):
    """
    Safe JSON reader. Returns `default` if missing or invalid.
    """
    if not path.exists():
        return default
    try:
        raw = path.read_text(encoding="utf-8")
        return json.loads(raw) if raw.strip() else default
    except (OSError, ValueError):
        return default

def write_json(path: Path, obj: Any) -> None:
    atomic_write(path, json.dumps(obj, ensure_ascii=False, indent=2))
