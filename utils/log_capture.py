# utils/log_capture.py

from __future__ import annotations
import io
import logging
from datetime import datetime, timezone
from pathlib import Path

class SyncRunLogCapture:
    """
    Captura temporal del log (root) a un buffer en memoria durante una sincronización.
    Uso:
        with SyncRunLogCapture() as cap:
            ... # ejecutar sync
        cap.write_to(log_dir, prefix="sync_usuario")
    """
    def __init__(self, level=logging.INFO) -> None:
        self.level = level
        self.buffer = io.StringIO()
        self.handler = logging.StreamHandler(self.buffer)
        self.handler.setLevel(level)
        self.handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(threadName)s %(message)s"))

    def __enter__(self):
        root = logging.getLogger()
        self._prev_level = root.level
        root.setLevel(min(self._prev_level, self.level) if self._prev_level else self.level)
        root.addHandler(self.handler)
        return self

    def __exit__(self, exc_type, exc, tb):
        root = logging.getLogger()
        try:
            root.removeHandler(self.handler)
            root.setLevel(self._prev_level)
        finally:
            self.handler.close()

    def text(self) -> str:
        return self.buffer.getvalue()

    def write_to(self, log_dir: Path, *, prefix: str) -> Path:
        log_dir.mkdir(parents=True, exist_ok=True)
        fname = f"{prefix}_{datetime.now(timezone.utc).strftime('%Y%m%dT%H%M%SZ')}.log"
        fp = log_dir / fname
        fp.write_text(self.text(), encoding="utf-8")
        return fp
