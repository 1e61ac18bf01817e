# gats_iqtest/core/utils.py
import logging
import re
import threading
import time
import uuid
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from .config import config
from .exceptions import SessionNotFoundError
from .session import IQTestSession
from ..models.schemas import UserProfile

logger = logging.getLogger(__name__)

class SessionRegistry:
    """In-memory store of active sessions with expiry"""

    def __init__(self, expiration_seconds: int = None, start_cleanup: bool = True):
        self.expiration_seconds = expiration_seconds or config.SESSION_EXPIRATION_SECONDS
        self._sessions: Dict[str, Tuple[IQTestSession, UserProfile]] = {}
        self._lock = threading.Lock()
        self._cleanup_thread = None
        if start_cleanup:
            self._start_cleanup_thread()

    def _start_cleanup_thread(self):
        """Start background cleanup thread"""
        if self._cleanup_thread and self._cleanup_thread.is_alive():
            return

        self._cleanup_thread = threading.Thread(target=self._periodic_cleanup, daemon=True)
        self._cleanup_thread.start()
        logger.info("✅ Session cleanup thread started")

    def _periodic_cleanup(self):
        while True:
            time.sleep(config.MEMORY_CLEANUP_INTERVAL)
            try:
                self.cleanup_expired()
            except Exception as e:
                logger.error(f"Cleanup thread error: {e}")

    def cleanup_expired(self, now: Optional[float] = None) -> int:
        """Drop sessions older than the expiration window"""
        now = time.time() if now is None else now
        with self._lock:
            expired = [
                session_id for session_id, (session, _) in self._sessions.items()
                if now - session.created_at > self.expiration_seconds
            ]
            for session_id in expired:
                del self._sessions[session_id]

        if expired:
            logger.info(f"🧹 Cleanup: removed {len(expired)} expired sessions")
        return len(expired)

    def create(self, profile: UserProfile) -> Tuple[str, IQTestSession]:
        session_id = str(uuid.uuid4())
        session = IQTestSession()
        with self._lock:
            self._sessions[session_id] = (session, profile)
        logger.info(f"✅ Session created: {session_id}")
        return session_id, session

    def get(self, session_id: str) -> Tuple[IQTestSession, UserProfile]:
        with self._lock:
            entry = self._sessions.get(session_id)
        if entry is None or time.time() - entry[0].created_at > self.expiration_seconds:
            raise SessionNotFoundError(session_id)
        return entry

    def remove(self, session_id: str) -> bool:
        with self._lock:
            entry = self._sessions.pop(session_id, None)
        if entry is not None:
            entry[0].reset()
            logger.info(f"✅ Session removed: {session_id}")
        return entry is not None

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            active = len(self._sessions)
        return {
            "active_sessions": active,
            "cleanup_thread_alive": self._cleanup_thread.is_alive() if self._cleanup_thread else False
        }

class DateTimeUtils:
    """Utility functions for date/time operations"""

    @staticmethod
    def get_current_timestamp() -> float:
        return time.time()

    @staticmethod
    def format_timestamp(timestamp: float, format_str: str = "%Y-%m-%d %H:%M:%S") -> str:
        return datetime.fromtimestamp(timestamp).strftime(format_str)

def report_filename(name: str, extension: str) -> str:
    """Attachment filename derived from the user's name"""
    safe_name = re.sub(r"\s+", "_", name.strip()) or "user"
    # header values must stay latin-1 safe
    safe_name = re.sub(r"[^A-Za-z0-9_\-.]", "", safe_name) or "user"
    return f"IQ_Test_Results_{safe_name}.{extension}"
