# core/request_worker.py
import asyncio
import logging
from PySide6.QtCore import QThread, Signal

from core.bridge import process_gemini_request

logger = logging.getLogger(__name__)


class RequestWorker(QThread):
    """Поток для выполнения одного запроса к веб-серверу"""
    finished_signal = Signal(bool, str)  # success, text or error message

    def __init__(self, payload, config):
        super().__init__()
        self.payload = payload
        self.config = config

    def run(self):
        """Выполняет запрос в фоновом потоке"""
        try:
            success, message = asyncio.run(process_gemini_request(self.payload, self.config))
        except Exception as e:
            logger.error(f"❌ Unexpected error while forwarding request: {e}", exc_info=True)
            success, message = False, f"Unexpected error: {e}"

        self.finished_signal.emit(success, message)
