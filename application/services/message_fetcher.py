# application/services/message_fetcher.py
from __future__ import annotations
import logging
import threading
from typing import Protocol

from tenacity import (
    RetryError,
    Retrying,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_none,
    wait_random_exponential,
)

from domain.errors import FetchExhaustedError, SyncCancelled
from domain.models import RemoteMessage

logger = logging.getLogger(__name__)


class MessageSource(Protocol):
    def get_message(self, message_id: str) -> RemoteMessage: ...


class MessageFetcher:
    """
    Descarga el mensaje completo con reintentos acotados.
    Por defecto 3 intentos seguidos sin espera; con retry_wait_max > 0 se
    espera con backoff exponencial con jitter hasta ese máximo (segundos).
    """
    def __init__(self, *, max_attempts: int = 3, retry_wait_max: float = 0.0) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts debe ser >= 1")
        self.max_attempts = max_attempts
        self.retry_wait_max = retry_wait_max

    def _wait(self):
        if self.retry_wait_max > 0:
            return wait_random_exponential(multiplier=0.5, max=self.retry_wait_max)
        return wait_none()

    def fetch(
        self,
        client: MessageSource,
        message_id: str,
        cancel: threading.Event | None = None,
    ) -> RemoteMessage:
        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self._wait(),
            retry=retry_if_not_exception_type(SyncCancelled),
        )
        try:
            for attempt in retrying:
                with attempt:
                    if cancel is not None and cancel.is_set():
                        raise SyncCancelled(f"Fetch de {message_id} cancelado")
                    n = attempt.retry_state.attempt_number
                    if n > 1:
                        logger.warning("Reintento %d/%d del mensaje %s", n, self.max_attempts, message_id)
                    return client.get_message(message_id)
        except RetryError as e:
            last = e.last_attempt.exception()
            raise FetchExhaustedError(message_id, e.last_attempt.attempt_number, last) from last
