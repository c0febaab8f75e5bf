"""
Cas d'usage 'signup': registre des wizards ouverts et branchement sur Supabase Auth.
"""
import logging
import time
from typing import Dict, Optional

from starlette.concurrency import run_in_threadpool

from providers_hub import config
from providers_hub.auth import service as auth_service
from .events import AuthStateNotifier, get_auth_notifier
from .models import CloseReason, SignupResult
from .wizard import AuthProvider, SignupWizard

logger = logging.getLogger(__name__)


async def supabase_auth_provider(email: str, password: str, name: str, role: str) -> SignupResult:
    """Adaptateur: auth_service.signup (synchrone, supabase-py) exécuté dans le threadpool."""
    res = await run_in_threadpool(auth_service.signup, email, password, name, role)
    return SignupResult(success=res.success, requires_confirmation=res.requires_confirmation, error=res.error)


class WizardRegistry:
    """
    Wizards ouverts, indexés par id (une seule boucle asyncio, pas de verrou).
    - Les wizards fermés restent consultables pendant `retention_seconds` puis sont purgés.
    - Un wizard ouvert sans activité depuis `idle_seconds` est fermé (expired) puis purgé.
    """

    def __init__(
        self,
        retention_seconds: float = config.SIGNUP_WIZARD_RETENTION_SECONDS,
        idle_seconds: float = config.SIGNUP_WIZARD_IDLE_SECONDS,
    ):
        self.retention_seconds = retention_seconds
        self.idle_seconds = idle_seconds
        self._wizards: Dict[str, SignupWizard] = {}

    def add(self, wizard: SignupWizard) -> SignupWizard:
        self._wizards[wizard.id] = wizard
        return wizard

    def get(self, wizard_id: str) -> Optional[SignupWizard]:
        return self._wizards.get(wizard_id)

    def discard(self, wizard_id: str) -> Optional[SignupWizard]:
        wizard = self._wizards.pop(wizard_id, None)
        if wizard is not None:
            wizard.close()
        return wizard

    def _expired(self, wizard: SignupWizard, now: float) -> bool:
        if wizard.closed:
            return wizard.closed_at is not None and now - wizard.closed_at >= self.retention_seconds
        return wizard.idle_for(now) >= self.idle_seconds

    def purge(self, now: Optional[float] = None) -> int:
        now = time.monotonic() if now is None else now
        expired = [wid for wid, w in self._wizards.items() if self._expired(w, now)]
        for wid in expired:
            self._wizards.pop(wid).close(CloseReason.EXPIRED)
        if expired:
            logger.debug("signup.registry purged=%s", len(expired))
        return len(expired)

    def close_all(self) -> int:
        """Arrêt du serveur: ferme les wizards ouverts et vide le registre."""
        closed = sum(1 for w in self._wizards.values() if w.close())
        self._wizards.clear()
        return closed

    def __len__(self) -> int:
        return len(self._wizards)


class SignupWizardService:
    def __init__(
        self,
        auth_provider: AuthProvider = supabase_auth_provider,
        notifier: Optional[AuthStateNotifier] = None,
        registry: Optional[WizardRegistry] = None,
        confirmation_timeout: float = config.SIGNUP_CONFIRMATION_TIMEOUT_SECONDS,
    ):
        self.auth_provider = auth_provider
        self.notifier = notifier if notifier is not None else get_auth_notifier()
        self.registry = registry if registry is not None else WizardRegistry()
        self.confirmation_timeout = confirmation_timeout

    def open(self, initial_service: Optional[str] = None, initial_location: Optional[str] = None) -> SignupWizard:
        self.registry.purge()
        wizard = SignupWizard(
            auth_provider=self.auth_provider,
            notifier=self.notifier,
            initial_service=initial_service,
            initial_location=initial_location,
            confirmation_timeout=self.confirmation_timeout,
        )
        logger.info("signup.wizard opened wizard=%s first_step=%s", wizard.id, int(wizard.first_step))
        return self.registry.add(wizard)

    def get(self, wizard_id: str) -> Optional[SignupWizard]:
        return self.registry.get(wizard_id)

    def discard(self, wizard_id: str) -> Optional[SignupWizard]:
        return self.registry.discard(wizard_id)


_service: Optional[SignupWizardService] = None


def get_wizard_service() -> SignupWizardService:
    global _service
    if _service is None:
        _service = SignupWizardService()
    return _service
