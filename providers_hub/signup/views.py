from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from providers_hub.utils.rate_limit import optional_rate_limit
from .models import BUDGET_OPTIONS, URGENCY_OPTIONS, DraftUpdate, OpenWizardRequest
from .service import SignupWizardService, get_wizard_service
from .wizard import SignupWizard, WizardError

router = APIRouter(prefix="/api/v1/signup/wizards", tags=["Signup API"])


def _get_or_404(service: SignupWizardService, wizard_id: str) -> SignupWizard:
    wizard = service.get(wizard_id)
    if wizard is None:
        raise HTTPException(status_code=404, detail="Signup wizard not found")
    return wizard


def _bad_request(e: WizardError) -> HTTPException:
    return HTTPException(status_code=400, detail=str(e))


# Les endpoints sont async: les tâches d'attente du wizard vivent dans la boucle du serveur
@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(optional_rate_limit(times=10, seconds=60))],
)
async def open_wizard(
    body: Optional[OpenWizardRequest] = None,
    service: SignupWizardService = Depends(get_wizard_service),
) -> Dict[str, Any]:
    """Ouvre un wizard; avec initialService il démarre directement à l'étape délais."""
    body = body or OpenWizardRequest()
    wizard = service.open(initial_service=body.initial_service, initial_location=body.initial_location)
    return wizard.snapshot()


@router.get("/options")
async def step_options() -> Dict[str, Any]:
    return {"urgency": URGENCY_OPTIONS, "budget": BUDGET_OPTIONS}


@router.get("/{wizard_id}")
async def get_wizard(wizard_id: str, service: SignupWizardService = Depends(get_wizard_service)) -> Dict[str, Any]:
    return _get_or_404(service, wizard_id).snapshot()


@router.patch("/{wizard_id}/draft")
async def update_draft(
    wizard_id: str,
    body: DraftUpdate,
    service: SignupWizardService = Depends(get_wizard_service),
) -> Dict[str, Any]:
    wizard = _get_or_404(service, wizard_id)
    try:
        wizard.update_draft(**body.model_dump(exclude_unset=True))
    except WizardError as e:
        raise _bad_request(e)
    return wizard.snapshot()


@router.post("/{wizard_id}/next")
async def next_step(wizard_id: str, service: SignupWizardService = Depends(get_wizard_service)) -> Dict[str, Any]:
    wizard = _get_or_404(service, wizard_id)
    try:
        wizard.next_step()
    except WizardError as e:
        raise _bad_request(e)
    return wizard.snapshot()


@router.post("/{wizard_id}/previous")
async def previous_step(wizard_id: str, service: SignupWizardService = Depends(get_wizard_service)) -> Dict[str, Any]:
    wizard = _get_or_404(service, wizard_id)
    try:
        wizard.previous_step()
    except WizardError as e:
        raise _bad_request(e)
    return wizard.snapshot()


@router.post("/{wizard_id}/submit", dependencies=[Depends(optional_rate_limit(times=5, seconds=60))])
async def submit(wizard_id: str, service: SignupWizardService = Depends(get_wizard_service)) -> Dict[str, Any]:
    """
    Crée le compte (rôle client, nom = partie locale de l'email).
    - Sans confirmation requise: wizard fermé (close_reason=signed_up)
    - Avec confirmation: étape 5, attente du signal d'auth ou du timeout
    - Échec: 400 avec message générique, retour possible sur l'étape identifiants
    """
    wizard = _get_or_404(service, wizard_id)
    try:
        await wizard.submit()
    except WizardError as e:
        raise _bad_request(e)
    return wizard.snapshot()


@router.post("/{wizard_id}/wrong-email")
async def wrong_email(wizard_id: str, service: SignupWizardService = Depends(get_wizard_service)) -> Dict[str, Any]:
    wizard = _get_or_404(service, wizard_id)
    try:
        wizard.wrong_email()
    except WizardError as e:
        raise _bad_request(e)
    return wizard.snapshot()


@router.delete("/{wizard_id}")
async def close_wizard(wizard_id: str, service: SignupWizardService = Depends(get_wizard_service)) -> Dict[str, Any]:
    wizard = service.discard(wizard_id)
    if wizard is None:
        raise HTTPException(status_code=404, detail="Signup wizard not found")
    return wizard.snapshot()
