# infrastructure/filesystem/storage.py
from __future__ import annotations
from collections import defaultdict
from pathlib import Path
from typing import Iterable
import json
import os
import threading
import uuid

from domain.models import Attachment

class JsonAttachmentStore:
    """
    Persistencia de adjuntos en un JSON por usuario: <base>/<user_id>.json
    """
    def __init__(self, base: Path) -> None:
        self.base = base.resolve()
        self.base.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def _path(self, user_id: str) -> Path:
        return self.base / f"{user_id}.json"

    def _write(self, user_id: str, items: list[Attachment]) -> None:
        # escribir a temporal y renombrar: el fichero nunca queda a medias
        fp = self._path(user_id)
        tmp = self.base / f".{user_id}.{uuid.uuid4().hex}.tmp"
        tmp.write_text(json.dumps([a.to_dict() for a in items], ensure_ascii=False, indent=2), encoding="utf-8")
        os.replace(tmp, fp)

    def load(self, user_id: str) -> list[Attachment]:
        fp = self._path(user_id)
        if not fp.exists():
            return []
        raw = json.loads(fp.read_text(encoding="utf-8"))
        return [Attachment.from_dict(r) for r in raw]

    def delete_all(self, attachments: Iterable[Attachment]) -> None:
        by_user: dict[str, set[str]] = defaultdict(set)
        for a in attachments:
            by_user[a.user_id].add(a.g_id)
        with self._lock:
            for user_id, gids in by_user.items():
                kept = [a for a in self.load(user_id) if a.g_id not in gids]
                self._write(user_id, kept)

    def delete_for_user(self, user_id: str) -> None:
        with self._lock:
            self._path(user_id).unlink(missing_ok=True)

    def save_all(self, attachments: Iterable[Attachment]) -> None:
        by_user: dict[str, list[Attachment]] = defaultdict(list)
        for a in attachments:
            by_user[a.user_id].append(a)
        with self._lock:
            for user_id, items in by_user.items():
                # se añaden tal cual: los g_id vacíos no se fusionan
                self._write(user_id, self.load(user_id) + items)

    def replace_all(self, user_id: str, attachments: Iterable[Attachment]) -> None:
        with self._lock:
            self._write(user_id, list(attachments))
