"""
Domain dataclasses used across the application.
"""

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

ROLE_EMPLOYEE = "BE"
ROLE_MANAGER = "BM"

STATUS_SCHEDULED = "scheduled"
STATUS_ACTIVE = "active"


# ── Directory rows ───────────────────────────────────────────────────

@dataclass
class EmployeeRow:
    """One row of the employee directory (dbo users)."""
    key: Optional[str]
    external_id: str
    territory: Optional[str]
    display_name: Optional[str]
    phone: Optional[str]
    email: Optional[str]


@dataclass
class ManagerRow:
    """One row of the manager directory; a manager has one row per supervised territory."""
    key: Optional[str]
    external_id: str
    own_territory: Optional[str]
    subordinate_territory: Optional[str]
    display_name: Optional[str]
    phone: Optional[str]
    email: Optional[str]


# ── Identity ─────────────────────────────────────────────────────────

@dataclass
class Identity:
    """The logged-in user, resolved once per session."""
    id: str
    role: str                           # ROLE_EMPLOYEE or ROLE_MANAGER
    external_id: str
    own_territory: Optional[str]
    managed_territories: Optional[str]  # manager only, TERRITORY_DELIMITER-joined
    display_name: Optional[str]
    contact_phone: Optional[str]
    email: Optional[str]
    resolved_at: datetime

    @property
    def is_manager(self) -> bool:
        return self.role == ROLE_MANAGER

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["resolved_at"] = self.resolved_at.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Identity":
        role = data["role"]
        if role not in {ROLE_EMPLOYEE, ROLE_MANAGER}:
            raise ValueError(f"Unsupported role '{role}' in stored identity.")
        if not data.get("id"):
            raise ValueError("Stored identity has no id.")
        return cls(
            id=str(data["id"]),
            role=role,
            external_id=str(data["external_id"]),
            own_territory=data.get("own_territory"),
            managed_territories=data.get("managed_territories"),
            display_name=data.get("display_name"),
            contact_phone=data.get("contact_phone"),
            email=data.get("email"),
            resolved_at=datetime.fromisoformat(data["resolved_at"]),
        )


@dataclass
class RemoteSession:
    """Session issued by the remote authentication service."""
    token: str
    principal_id: str
    principal_email: Optional[str]


@dataclass
class SessionResult:
    """Outcome of the best-effort remote session call."""
    session: Optional[RemoteSession] = None
    failure: Optional[str] = None  # "timeout" or "service_error"
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.session is not None


# ── Territory scope ──────────────────────────────────────────────────

@dataclass
class ScopeWarning:
    """Non-fatal condition surfaced next to a doctor listing."""
    code: str   # "TerritoryUnset", "NoManagedTerritories" or "NoDoctorsInScope"
    message: str


@dataclass
class EmployeeScope:
    territory: Optional[str]

    def territories(self) -> Tuple[str, ...]:
        if self.territory and self.territory.strip():
            return (self.territory.strip(),)
        return ()

    def describe(self) -> str:
        return (self.territory or "").strip()

    def empty_warning(self) -> ScopeWarning:
        return ScopeWarning(
            code="TerritoryUnset",
            message="Your territory is not set. Contact your administrator.",
        )


@dataclass
class ManagerScope:
    managed: Optional[str]
    delimiter: str = ","

    def territories(self) -> Tuple[str, ...]:
        parts = (p.strip() for p in (self.managed or "").split(self.delimiter))
        # Repeated entries across manager rows collapse here.
        return tuple(dict.fromkeys(p for p in parts if p))

    def describe(self) -> str:
        return ", ".join(self.territories())

    def empty_warning(self) -> ScopeWarning:
        return ScopeWarning(
            code="NoManagedTerritories",
            message="No BE territories are assigned to you.",
        )


# ── Doctors / camps ──────────────────────────────────────────────────

@dataclass
class Doctor:
    id: str
    name: str
    territory: Optional[str]
    eligible: bool
    imacx_code: Optional[str] = None
    specialty: Optional[str] = None
    clinic_name: Optional[str] = None
    clinic_address: Optional[str] = None
    city: Optional[str] = None
    phone: Optional[str] = None
    whatsapp_number: Optional[str] = None
    employee_code: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DoctorListing:
    """Result of the territory-scoped doctor filter."""
    doctors: List[Doctor]
    scope_description: str
    warning: Optional[ScopeWarning] = None


@dataclass
class Camp:
    id: str
    user_id: str
    doctor_id: str
    camp_date: date
    status: str
    total_patients: int = 0
    consent_form_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["camp_date"] = self.camp_date.isoformat()
        return data


@dataclass
class ConsentFile:
    """An uploaded consent document held in memory."""
    filename: str
    content_type: str
    data: bytes = field(repr=False)

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class CampResult:
    camp: Camp
    notify_url: Optional[str]
    warnings: List[str] = field(default_factory=list)
