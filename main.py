# main.py
# Punto de entrada: resincronización completa de adjuntos Gmail por buzón (una pasada o en bucle)
from __future__ import annotations
import logging
import time
from config.settings import Settings
from interface_adapters.controllers.sync_controller import SyncController

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)


def main() -> None:
    settings = Settings()
    controller = SyncController(settings=settings)

    logger.info("=== Gmail Attachment Sync ===")
    logger.info("query=%s usuarios=%s", settings.GMAIL_QUERY, ",".join(settings.mailbox_users()) or "-")
    while True:
        try:
            controller.run_once()
        except Exception:
            logger.exception("Error en ciclo de sincronización")
        if settings.SYNC_INTERVAL <= 0:
            break
        time.sleep(settings.SYNC_INTERVAL)


if __name__ == "__main__":
    main()
