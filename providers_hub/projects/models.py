from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class BudgetType(str, Enum):
    FIXED = "fixed"
    HOURLY = "hourly"
    MONTHLY = "monthly"


class Urgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ProjectStatus(str, Enum):
    PENDING = "pending"
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ProjectCreate(BaseModel):
    title: str = Field(min_length=1)
    category: str = Field(min_length=1)
    subcategory: Optional[str] = None
    description: str = Field(min_length=1)
    budget: float = Field(ge=0)
    budget_type: BudgetType = BudgetType.FIXED
    location: str
    deadline: date
    urgency: Urgency = Urgency.MEDIUM
    skills: List[str] = Field(default_factory=list)
    requirements: Optional[str] = None
    attachments: Optional[List[str]] = None
    status: ProjectStatus = ProjectStatus.OPEN


class ProjectUpdate(BaseModel):
    """Champs modifiables; le statut passe par l'endpoint dédié."""
    title: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = None
    subcategory: Optional[str] = None
    description: Optional[str] = None
    budget: Optional[float] = Field(default=None, ge=0)
    budget_type: Optional[BudgetType] = None
    location: Optional[str] = None
    deadline: Optional[date] = None
    urgency: Optional[Urgency] = None
    skills: Optional[List[str]] = None
    requirements: Optional[str] = None
    attachments: Optional[List[str]] = None


class StatusUpdate(BaseModel):
    status: str
