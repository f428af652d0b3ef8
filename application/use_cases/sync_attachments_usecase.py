# application/use_cases/sync_attachments_usecase.py
from __future__ import annotations
import logging
import threading
from concurrent.futures import FIRST_EXCEPTION, ALL_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Protocol

from application.services.message_fetcher import MessageFetcher, MessageSource
from application.services.message_lister import HAS_ATTACHMENT_QUERY, MessagePager, list_messages_with_attachments
from application.services.message_processor import MessageProcessor
from domain.errors import SyncCancelled, SyncError
from domain.models import Attachment, MailboxUser
from domain.ports import AttachmentService

logger = logging.getLogger(__name__)

FailurePolicy = Literal["abort", "best_effort"]
ReplaceMode = Literal["delete_first", "atomic"]


class SyncState(str, Enum):
    IDLE = "idle"
    LISTING = "listing"
    FETCHING = "fetching"
    AGGREGATING = "aggregating"
    PERSISTING = "persisting"
    DONE = "done"


class MailboxClient(MessagePager, MessageSource, Protocol):
    """Cliente del proveedor: listado paginado + mensaje completo."""


class ClientProvider(Protocol):
    def for_user(self, user_id: str) -> MailboxClient: ...


@dataclass
class SyncReport:
    user_id: str
    state: SyncState = SyncState.IDLE
    message_count: int = 0
    attachments: list[Attachment] = field(default_factory=list)
    failed_messages: dict[str, BaseException] = field(default_factory=dict)


class SyncAttachmentsUseCase:
    def __init__(
        self,
        *,
        client_factory: ClientProvider,
        attachment_service: AttachmentService,
        fetcher: MessageFetcher,
        processor: MessageProcessor,
        query: str = HAS_ATTACHMENT_QUERY,
        page_size: int | None = None,
        io_workers: int = 8,
        cpu_workers: int = 2,
        failure_policy: FailurePolicy = "abort",
        replace_mode: ReplaceMode = "delete_first",
    ) -> None:
        if failure_policy not in ("abort", "best_effort"):
            raise ValueError(f"failure_policy desconocida: {failure_policy}")
        if replace_mode not in ("delete_first", "atomic"):
            raise ValueError(f"replace_mode desconocido: {replace_mode}")
        self.client_factory = client_factory
        self.attachment_service = attachment_service
        self.fetcher = fetcher
        self.processor = processor
        self.query = query
        self.page_size = page_size
        self.io_workers = max(1, io_workers)
        self.cpu_workers = max(1, cpu_workers)
        self.failure_policy = failure_policy
        self.replace_mode = replace_mode

    # ───────────────────────── API ─────────────────────────
    def get_attachments(self, user: MailboxUser) -> list[Attachment]:
        """Adjuntos ya conocidos del usuario; si no hay ninguno se sincroniza."""
        if user.attachments:
            return user.attachments
        return self.sync_attachments(user)

    def sync_attachments(self, user: MailboxUser) -> list[Attachment]:
        return self.run(user).attachments

    def run(self, user: MailboxUser) -> SyncReport:
        """
        Resincronización completa: listar -> (fetch ‖ process) por mensaje -> agregar -> persistir.
        Devuelve los adjuntos ordenados por fecha de creación, el más reciente primero.
        """
        report = SyncReport(user_id=user.user_id)
        # sin credencial no se borra nada ni se toca la red
        client = self.client_factory.for_user(user.user_id)

        if self.replace_mode == "delete_first":
            # todo lo persistido del usuario, no solo lo que hay en memoria
            self.attachment_service.delete_for_user(user.user_id)
            user.attachments.clear()

        try:
            report.state = SyncState.LISTING
            message_ids = list_messages_with_attachments(client, self.query, self.page_size)
            report.message_count = len(message_ids)

            report.state = SyncState.FETCHING
            results = self._run_pipelines(client, message_ids, user, report)

            report.state = SyncState.AGGREGATING
            attachments = self._merge(message_ids, results)

            report.state = SyncState.PERSISTING
            if self.replace_mode == "atomic":
                self.attachment_service.replace_all(user.user_id, attachments)
            else:
                self.attachment_service.save_all(attachments)
        except Exception:
            logger.error("Sync de %s falló en estado %s", user.user_id, report.state.value)
            raise

        attachments.sort(key=lambda a: a.created_date, reverse=True)
        user.attachments = list(attachments)
        report.attachments = attachments
        report.state = SyncState.DONE
        logger.info(
            "Sync de %s OK: %d mensajes, %d adjuntos, %d fallos",
            user.user_id, report.message_count, len(attachments), len(report.failed_messages),
        )
        return report

    # ───────────────────────── pipeline ─────────────────────────
    def _pipeline(
        self,
        io_pool: ThreadPoolExecutor,
        cpu_pool: ThreadPoolExecutor,
        client: MailboxClient,
        message_id: str,
        user: MailboxUser,
        cancel: threading.Event,
    ) -> Future:
        """fetch en el pool de I/O; al terminar, process encadenado en el pool de cómputo."""
        out: Future = Future()

        def on_processed(f: Future) -> None:
            if f.cancelled():
                out.cancel()
            elif f.exception() is not None:
                out.set_exception(f.exception())
            else:
                out.set_result(f.result())

        def on_fetched(f: Future) -> None:
            if f.cancelled():
                out.cancel()
                return
            if f.exception() is not None:
                out.set_exception(f.exception())
                return
            if cancel.is_set():
                out.set_exception(SyncCancelled(f"Proceso de {message_id} cancelado"))
                return
            try:
                inner = cpu_pool.submit(self.processor.process, f.result(), user)
            except RuntimeError as e:  # pool ya cerrado
                out.set_exception(SyncCancelled(str(e)))
                return
            inner.add_done_callback(on_processed)

        fetch = io_pool.submit(self.fetcher.fetch, client, message_id, cancel)
        fetch.add_done_callback(on_fetched)
        return out

    def _run_pipelines(
        self,
        client: MailboxClient,
        message_ids: list[str],
        user: MailboxUser,
        report: SyncReport,
    ) -> dict[str, list[Attachment]]:
        if not message_ids:
            return {}

        cancel = threading.Event()
        io_pool = ThreadPoolExecutor(max_workers=self.io_workers, thread_name_prefix="sync-io")
        cpu_pool = ThreadPoolExecutor(max_workers=self.cpu_workers, thread_name_prefix="sync-cpu")
        try:
            futures = [
                (mid, self._pipeline(io_pool, cpu_pool, client, mid, user, cancel))
                for mid in message_ids
            ]
            abort = self.failure_policy == "abort"
            wait([f for _, f in futures], return_when=FIRST_EXCEPTION if abort else ALL_COMPLETED)

            if abort:
                for mid, f in futures:
                    if f.done() and not f.cancelled() and f.exception() is not None:
                        cancel.set()
                        exc = f.exception()
                        logger.error("Mensaje %s falló; se aborta la sincronización: %s", mid, exc)
                        if isinstance(exc, SyncError):
                            raise exc
                        raise SyncError(f"Mensaje {mid}: {exc}") from exc

            results: dict[str, list[Attachment]] = {}
            for mid, f in futures:
                exc = f.exception()
                if exc is not None:
                    logger.warning("Mensaje %s omitido: %s", mid, exc)
                    report.failed_messages[mid] = exc
                else:
                    results[mid] = f.result()
            return results
        finally:
            cancel.set()
            io_pool.shutdown(wait=True, cancel_futures=True)
            cpu_pool.shutdown(wait=True, cancel_futures=True)

    @staticmethod
    def _merge(message_ids: list[str], results: dict[str, list[Attachment]]) -> list[Attachment]:
        # merge en un solo hilo y en orden de listado; g_id único por buzón
        merged: list[Attachment] = []
        seen: set[str] = set()
        for mid in message_ids:
            for a in results.get(mid, []):
                if a.g_id and a.g_id in seen:
                    logger.debug("Adjunto duplicado %s (mensaje %s) ignorado", a.g_id, mid)
                    continue
                seen.add(a.g_id)
                merged.append(a)
        return merged
