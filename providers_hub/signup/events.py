"""
Signal "compte authentifié" publié par les endpoints auth (login, callback de confirmation)
et attendu par les wizards en attente de confirmation d'email.
"""
import asyncio
import logging
import threading
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

_Waiter = Tuple[asyncio.AbstractEventLoop, "asyncio.Future[Any]"]


def _resolve(fut: "asyncio.Future[Any]", value: Any) -> None:
    if not fut.done():
        fut.set_result(value)


class AuthStateNotifier:
    """
    Abonnements par email (insensible à la casse).
    - subscribe() s'appelle depuis la boucle asyncio du wizard.
    - publish() peut venir d'un thread du threadpool: résolution via call_soon_threadsafe.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._waiters: Dict[str, List[_Waiter]] = {}

    @staticmethod
    def _key(email: Optional[str]) -> str:
        return (email or "").strip().lower()

    def subscribe(self, email: str) -> "asyncio.Future[Any]":
        loop = asyncio.get_running_loop()
        fut = loop.create_future()
        with self._lock:
            self._waiters.setdefault(self._key(email), []).append((loop, fut))
        return fut

    def unsubscribe(self, email: str, fut: "asyncio.Future[Any]") -> None:
        key = self._key(email)
        with self._lock:
            remaining = [w for w in self._waiters.get(key, []) if w[1] is not fut]
            if remaining:
                self._waiters[key] = remaining
            else:
                self._waiters.pop(key, None)

    def publish(self, email: Optional[str], user: Optional[Dict[str, Any]] = None) -> int:
        """Réveille tous les abonnés de cet email; retourne le nombre de wizards notifiés."""
        key = self._key(email)
        if not key:
            return 0
        with self._lock:
            waiters = self._waiters.pop(key, [])
        notified = 0
        for loop, fut in waiters:
            try:
                loop.call_soon_threadsafe(_resolve, fut, user or {"email": key})
                notified += 1
            except RuntimeError:
                logger.warning("signup.events publish skipped: event loop closed email=%s", key)
        if notified:
            logger.info("signup.events auth signal email=%s waiters=%s", key, notified)
        return notified

    def pending(self, email: str) -> int:
        with self._lock:
            return len(self._waiters.get(self._key(email), []))


_notifier = AuthStateNotifier()


def get_auth_notifier() -> AuthStateNotifier:
    return _notifier
