# domain/errors.py
from __future__ import annotations


class SyncError(RuntimeError):
    """Error fatal: aborta la sincronización completa sin commit parcial."""


class TransportError(SyncError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class FetchExhaustedError(SyncError):
    def __init__(self, message_id: str, attempts: int, cause: BaseException | None) -> None:
        super().__init__(f"No se pudo obtener el mensaje {message_id} tras {attempts} intentos: {cause}")
        self.message_id = message_id
        self.attempts = attempts
        self.cause = cause


class MissingCredentialError(SyncError):
    def __init__(self, user_id: str) -> None:
        super().__init__(f"Sin credencial para el usuario {user_id}")
        self.user_id = user_id


class SyncCancelled(SyncError):
    """La ejecución se canceló porque otro mensaje falló."""
