"""
Wizard d'inscription acheteur (5 étapes) sous forme de machine à états asyncio.

Étapes: SERVICE -> TIMELINE -> BUDGET -> CREDENTIALS -> AWAITING_CONFIRMATION.
En attente de confirmation, deux tâches sont en course: le signal d'authentification
(AuthStateNotifier) et un minuteur. La première qui aboutit ferme le wizard, l'autre
est annulée. La fermeture est protégée par un unique drapeau `closed`.
"""
import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple
from uuid import uuid4

from providers_hub import config
from providers_hub.utils.validators import email_local_part
from .events import AuthStateNotifier
from .models import (
    CONFIRMATION_TIMEOUT_MESSAGE,
    PASSWORD_MISMATCH_MESSAGE,
    REGISTRATION_FAILED_MESSAGE,
    STEP_REQUIREMENTS,
    CloseReason,
    SignupDraft,
    SignupResult,
    WizardStep,
)

logger = logging.getLogger(__name__)

# (email, password, name, role) -> SignupResult
AuthProvider = Callable[[str, str, str, str], Awaitable[SignupResult]]

SIGNUP_ROLE = "client"


class WizardError(Exception):
    pass


class WizardValidationError(WizardError):
    """Saisie incomplète ou invalide: message affiché, état inchangé."""


class WizardStateError(WizardError):
    """Action impossible dans l'état courant (wizard fermé, mauvaise étape, envoi en cours)."""


class SignupWizard:
    def __init__(
        self,
        auth_provider: AuthProvider,
        notifier: AuthStateNotifier,
        initial_service: Optional[str] = None,
        initial_location: Optional[str] = None,
        confirmation_timeout: float = config.SIGNUP_CONFIRMATION_TIMEOUT_SECONDS,
        wizard_id: Optional[str] = None,
    ):
        self.id = wizard_id or uuid4().hex
        self._auth_provider = auth_provider
        self._notifier = notifier
        self._confirmation_timeout = confirmation_timeout

        self.draft = SignupDraft(service=initial_service or "", location=initial_location or "")
        # Service pré-sélectionné: l'étape 1 est sautée et reste inaccessible
        self.first_step = WizardStep.TIMELINE if initial_service else WizardStep.SERVICE
        self.step = self.first_step

        self.signing_up = False
        self.signup_email = ""
        self.error: Optional[str] = None
        self.notice: Optional[str] = None

        self.last_activity = time.monotonic()

        self.closed = False
        self.close_reason: Optional[CloseReason] = None
        self.closed_at: Optional[float] = None
        self._closed_event = asyncio.Event()
        self._wait_task: Optional[asyncio.Task] = None
        self._auth_signal: Optional[Tuple[str, "asyncio.Future[Any]"]] = None

    # --- Navigation ---

    def update_draft(self, **fields: Any) -> None:
        self._ensure_open()
        self._touch()
        for name, value in fields.items():
            if value is not None:
                setattr(self.draft, name, value)

    def next_step(self) -> WizardStep:
        self._ensure_open()
        self._touch()
        requirement = STEP_REQUIREMENTS.get(self.step)
        if requirement is None:
            raise WizardStateError(f"Cannot advance from step {self.step.name.lower()}")
        field, message = requirement
        if not getattr(self.draft, field):
            self.error = message
            raise WizardValidationError(message)
        self.error = None
        self.step = WizardStep(self.step + 1)
        return self.step

    def previous_step(self) -> WizardStep:
        self._ensure_open()
        self._touch()
        if self.step is WizardStep.AWAITING_CONFIRMATION:
            raise WizardStateError("Use wrong email to leave the confirmation step")
        if self.signing_up:
            raise WizardStateError("Signup already in progress")
        if self.step > self.first_step:
            self.step = WizardStep(self.step - 1)
        self.error = None
        return self.step

    # --- Création du compte ---

    async def submit(self) -> "SignupWizard":
        self._ensure_open()
        self._touch()
        if self.step is not WizardStep.CREDENTIALS:
            raise WizardStateError("Account details can only be submitted from the credentials step")
        if self.signing_up:
            raise WizardStateError("Signup already in progress")
        if self.draft.password != self.draft.confirm_password:
            self.error = PASSWORD_MISMATCH_MESSAGE
            raise WizardValidationError(PASSWORD_MISMATCH_MESSAGE)

        email = self.draft.email.strip()
        self.signing_up = True
        self.error = None
        try:
            result = await self._auth_provider(email, self.draft.password, email_local_part(email), SIGNUP_ROLE)
        except Exception:
            logger.exception("signup.wizard auth provider failed wizard=%s", self.id)
            result = None
        finally:
            self.signing_up = False

        if self.closed:
            # Dialogue fermé pendant l'appel: rien à reprendre
            return self
        if result is None or not result.success:
            if result is not None:
                logger.warning("signup.wizard signup rejected wizard=%s error=%s", self.id, result.error)
            self.error = REGISTRATION_FAILED_MESSAGE
            raise WizardValidationError(REGISTRATION_FAILED_MESSAGE)

        if result.requires_confirmation:
            self.signup_email = email
            self.step = WizardStep.AWAITING_CONFIRMATION
            self._start_confirmation_wait()
        else:
            self._close(CloseReason.SIGNED_UP)
        return self

    def wrong_email(self) -> WizardStep:
        """Retour à l'étape identifiants depuis l'attente, saisie conservée."""
        self._ensure_open()
        self._touch()
        if self.step is not WizardStep.AWAITING_CONFIRMATION:
            raise WizardStateError("Not waiting for an email confirmation")
        self._cancel_wait()
        self.signup_email = ""
        self.step = WizardStep.CREDENTIALS
        return self.step

    # --- Attente de confirmation ---

    @property
    def awaiting_confirmation(self) -> bool:
        return self.step is WizardStep.AWAITING_CONFIRMATION and not self.closed

    @property
    def confirmation_task(self) -> Optional[asyncio.Task]:
        return self._wait_task

    def _start_confirmation_wait(self) -> None:
        self._cancel_wait()
        # Abonnement avant la création de la tâche: aucun signal publié entre-temps n'est perdu
        email = self.signup_email
        auth_signal = self._notifier.subscribe(email)
        self._auth_signal = (email, auth_signal)
        self._wait_task = asyncio.create_task(
            self._await_confirmation(email, auth_signal),
            name=f"signup-confirmation-{self.id}",
        )

    async def _await_confirmation(self, email: str, auth_signal: "asyncio.Future[Any]") -> None:
        timer = asyncio.ensure_future(asyncio.sleep(self._confirmation_timeout))
        try:
            done, _ = await asyncio.wait({auth_signal, timer}, return_when=asyncio.FIRST_COMPLETED)
            if auth_signal in done:
                self._close(CloseReason.AUTHENTICATED)
            else:
                logger.info("signup.wizard confirmation timeout wizard=%s email=%s", self.id, email)
                self._close(CloseReason.TIMEOUT, notice=CONFIRMATION_TIMEOUT_MESSAGE)
        finally:
            timer.cancel()
            self._release_signal()

    def _release_signal(self) -> None:
        if self._auth_signal is None:
            return
        email, auth_signal = self._auth_signal
        self._auth_signal = None
        auth_signal.cancel()
        self._notifier.unsubscribe(email, auth_signal)

    def _cancel_wait(self) -> None:
        task = self._wait_task
        self._wait_task = None
        # Une tâche annulée avant son premier pas ne passe pas par son finally
        self._release_signal()
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    # --- Fermeture ---

    def close(self, reason: CloseReason = CloseReason.DISMISSED) -> bool:
        """Ferme le dialogue; False si un autre chemin l'a déjà fermé."""
        return self._close(reason)

    def _close(self, reason: CloseReason, notice: Optional[str] = None) -> bool:
        if self.closed:
            return False
        self.closed = True
        self.close_reason = reason
        self.closed_at = time.monotonic()
        if notice:
            self.notice = notice
        self._cancel_wait()
        self.draft.password = ""
        self.draft.confirm_password = ""
        self._closed_event.set()
        logger.info("signup.wizard closed wizard=%s reason=%s", self.id, reason.value)
        return True

    async def wait_closed(self) -> CloseReason:
        await self._closed_event.wait()
        return self.close_reason

    def _touch(self) -> None:
        self.last_activity = time.monotonic()

    def idle_for(self, now: Optional[float] = None) -> float:
        return (time.monotonic() if now is None else now) - self.last_activity

    def _ensure_open(self) -> None:
        if self.closed:
            raise WizardStateError("Signup wizard is closed")

    def snapshot(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "step": int(self.step),
            "step_name": self.step.name.lower(),
            "first_step": int(self.first_step),
            "draft": self.draft.public_dict(),
            "signing_up": self.signing_up,
            "awaiting_confirmation": self.awaiting_confirmation,
            "signup_email": self.signup_email or None,
            "error": self.error,
            "notice": self.notice,
            "closed": self.closed,
            "close_reason": self.close_reason.value if self.close_reason else None,
        }
