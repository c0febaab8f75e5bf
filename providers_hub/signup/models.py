"""
Modèles du wizard d'inscription acheteur: étapes, brouillon, options des étapes 2 et 3.
"""
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class WizardStep(IntEnum):
    SERVICE = 1
    TIMELINE = 2
    BUDGET = 3
    CREDENTIALS = 4
    AWAITING_CONFIRMATION = 5


class CloseReason(str, Enum):
    SIGNED_UP = "signed_up"
    AUTHENTICATED = "authenticated"
    TIMEOUT = "timeout"
    DISMISSED = "dismissed"
    EXPIRED = "expired"


URGENCY_OPTIONS: List[Dict[str, str]] = [
    {"value": "asap", "label": "ASAP", "description": "Within the next week - urgent need"},
    {"value": "soon", "label": "Soon", "description": "Within the next month"},
    {"value": "flexible", "label": "Flexible", "description": "No specific timeline"},
]

BUDGET_OPTIONS: List[Dict[str, str]] = [
    {"value": "under-1000", "label": "Under £1,000", "description": "Basic services and consultations"},
    {"value": "1000-5000", "label": "£1,000 - £5,000", "description": "Standard service packages"},
    {"value": "5000-15000", "label": "£5,000 - £15,000", "description": "Comprehensive solutions"},
    {"value": "over-15000", "label": "Over £15,000", "description": "Enterprise-level services"},
    {"value": "discuss", "label": "Let's discuss", "description": "Prefer to discuss pricing options"},
]

# Champ obligatoire et message bloquant pour chaque étape de sélection
STEP_REQUIREMENTS = {
    WizardStep.SERVICE: ("service", "Please select a service to continue."),
    WizardStep.TIMELINE: ("urgency", "Please select a timeline to continue."),
    WizardStep.BUDGET: ("budget", "Please select a budget range to continue."),
}

PASSWORD_MISMATCH_MESSAGE = "Passwords do not match"
REGISTRATION_FAILED_MESSAGE = "Registration failed. Please try again or contact support."
CONFIRMATION_TIMEOUT_MESSAGE = (
    "Email confirmation is taking longer than expected. "
    "Please try refreshing the page or check your email again."
)


class SignupDraft(BaseModel):
    """Saisie en cours, propre à une session du wizard (jamais persistée)."""
    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    service: str = ""
    urgency: str = ""
    budget: str = ""
    notes: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = Field(default="", alias="confirmPassword")
    business_type: str = Field(default="", alias="businessType")
    business_size: str = Field(default="", alias="businessSize")
    location: str = ""
    phone: str = ""

    def public_dict(self) -> Dict[str, Any]:
        """Brouillon sans les mots de passe (réponses API)."""
        return self.model_dump(exclude={"password", "confirm_password"})


class DraftUpdate(BaseModel):
    """Mise à jour partielle du brouillon (PATCH): seuls les champs fournis sont appliqués."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    service: Optional[str] = None
    urgency: Optional[str] = None
    budget: Optional[str] = None
    notes: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = Field(default=None, alias="confirmPassword")
    business_type: Optional[str] = Field(default=None, alias="businessType")
    business_size: Optional[str] = Field(default=None, alias="businessSize")
    location: Optional[str] = None
    phone: Optional[str] = None


class OpenWizardRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    initial_service: Optional[str] = Field(default=None, alias="initialService")
    initial_location: Optional[str] = Field(default=None, alias="initialLocation")


class SignupResult(BaseModel):
    """Réponse du fournisseur d'auth: {success, requires_confirmation}."""
    success: bool
    requires_confirmation: bool = False
    error: Optional[str] = None
