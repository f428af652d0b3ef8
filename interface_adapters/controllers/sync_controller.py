# interface_adapters/controllers/sync_controller.py
from __future__ import annotations
import logging
from config.settings import Settings
from domain.errors import SyncError
from domain.models import MailboxUser
from utils.log_capture import SyncRunLogCapture

from application.services.categorizer import KeywordCategorizer
from application.services.message_fetcher import MessageFetcher
from application.services.message_processor import MessageProcessor
from application.use_cases.sync_attachments_usecase import SyncAttachmentsUseCase, SyncReport
from infrastructure.auth.credential_store import StaticCredentialService
from infrastructure.email.client_factory import ClientFactory
from infrastructure.filesystem.storage import JsonAttachmentStore

logger = logging.getLogger(__name__)

class SyncController:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.store = JsonAttachmentStore(base=settings.storage_dir_path())
        self.client_factory = ClientFactory(StaticCredentialService(settings.access_tokens()), settings)
        self.uc = SyncAttachmentsUseCase(
            client_factory=self.client_factory,
            attachment_service=self.store,
            fetcher=MessageFetcher(
                max_attempts=settings.FETCH_MAX_ATTEMPTS,
                retry_wait_max=settings.FETCH_RETRY_WAIT_MAX,
            ),
            processor=MessageProcessor(KeywordCategorizer()),
            query=settings.GMAIL_QUERY,
            page_size=settings.GMAIL_PAGE_SIZE,
            io_workers=settings.SYNC_IO_WORKERS,
            cpu_workers=settings.SYNC_CPU_WORKERS,
            failure_policy=settings.SYNC_FAILURE_POLICY,  # type: ignore[arg-type]
            replace_mode=settings.SYNC_REPLACE_MODE,  # type: ignore[arg-type]
        )
        vocab = settings.category_vocabulary()
        self.users = {
            uid: MailboxUser(user_id=uid, categories=vocab, attachments=self.store.load(uid))
            for uid in settings.mailbox_users()
        }

    # ───────────────────────── ejecución ─────────────────────────
    def _sync_user(self, user: MailboxUser) -> SyncReport | None:
        st = self.settings
        with SyncRunLogCapture() as cap:
            logger.info("=== Sincronizando adjuntos de %s ===", user.user_id)
            try:
                report = self.uc.run(user)
            except SyncError:
                logger.exception("Sync de %s abortada", user.user_id)
                report = None

        if st.LOG_MODE in ("file", "both"):
            try:
                fp = cap.write_to(st.log_dir_path(), prefix=f"sync_{user.user_id}")
                logger.info("Log de ejecución guardado en %s", fp)
            except OSError:
                logger.exception("No se pudo guardar el log de %s", user.user_id)
        return report

    def run_once(self) -> dict[str, SyncReport | None]:
        if not self.users:
            logger.info("Sin buzones configurados (MAILBOX_USERS).")
            return {}
        logger.info("Sincronizando %d buzones…", len(self.users))
        return {uid: self._sync_user(user) for uid, user in self.users.items()}
