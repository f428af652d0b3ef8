# config/settings.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import os
from dotenv import load_dotenv

load_dotenv()

@dataclass(frozen=True)
class Settings:
    # GMAIL
    GMAIL_BASE: str = os.getenv("GMAIL_BASE", "https://gmail.googleapis.com/gmail/v1")
    GMAIL_USER_ID: str = os.getenv("GMAIL_USER_ID", "me")  # "me" = usuario autenticado por el token
    GMAIL_QUERY: str = os.getenv("GMAIL_QUERY", "has:attachment")
    GMAIL_PAGE_SIZE: int = int(os.getenv("GMAIL_PAGE_SIZE", 100))
    HTTP_TIMEOUT: int = int(os.getenv("HTTP_TIMEOUT", 30))

    # Credenciales (emitidas fuera de este servicio): "usuario:token,usuario2:token2"
    GMAIL_ACCESS_TOKENS: str = os.getenv("GMAIL_ACCESS_TOKENS", "")

    # Buzones y vocabulario de categorías
    MAILBOX_USERS: str = os.getenv("MAILBOX_USERS", "")
    # "Facturas=factura|invoice;Viajes=vuelo|hotel"
    MAILBOX_CATEGORIES: str = os.getenv("MAILBOX_CATEGORIES", "")

    # Fetch / reintentos
    FETCH_MAX_ATTEMPTS: int = int(os.getenv("FETCH_MAX_ATTEMPTS", 3))
    FETCH_RETRY_WAIT_MAX: float = float(os.getenv("FETCH_RETRY_WAIT_MAX", 0))  # 0 = sin espera entre intentos

    # Pools
    SYNC_IO_WORKERS: int = int(os.getenv("SYNC_IO_WORKERS", min(32, (os.cpu_count() or 1) * 4)))
    SYNC_CPU_WORKERS: int = int(os.getenv("SYNC_CPU_WORKERS", os.cpu_count() or 1))

    # Política de fallos y reemplazo
    SYNC_FAILURE_POLICY: str = os.getenv("SYNC_FAILURE_POLICY", "abort").lower()  # abort | best_effort
    SYNC_REPLACE_MODE: str = os.getenv("SYNC_REPLACE_MODE", "delete_first").lower()  # delete_first | atomic

    # Almacenamiento
    STORAGE_DIR: str = os.getenv("STORAGE_DIR", "./_data")

    # Bucle
    SYNC_INTERVAL: int = int(os.getenv("SYNC_INTERVAL", 0))  # 0 = una sola pasada

    # Logs por ejecución
    LOG_MODE: str = os.getenv("LOG_MODE", "console").lower()  # console | file | both
    LOG_DIR: str = os.getenv("LOG_DIR", "./_logs")

    # ───────── helpers ─────────
    def mailbox_users(self) -> list[str]:
        raw = (self.MAILBOX_USERS or "").strip()
        return [s.strip() for s in raw.split(",") if s.strip()]

    def access_tokens(self) -> dict[str, str]:
        tokens: dict[str, str] = {}
        for item in (self.GMAIL_ACCESS_TOKENS or "").split(","):
            user, sep, token = item.strip().partition(":")
            if sep and user.strip() and token.strip():
                tokens[user.strip()] = token.strip()
        return tokens

    def category_vocabulary(self) -> dict[str, list[str]]:
        vocab: dict[str, list[str]] = {}
        for item in (self.MAILBOX_CATEGORIES or "").split(";"):
            name, sep, rule = item.strip().partition("=")
            if not sep or not name.strip():
                continue
            keywords = [k.strip().lower() for k in rule.split("|") if k.strip()]
            if keywords:
                vocab[name.strip()] = keywords
        return vocab

    def storage_dir_path(self) -> Path:
        return Path(self.STORAGE_DIR).resolve()

    def log_dir_path(self) -> Path:
        return Path(self.LOG_DIR).resolve()
