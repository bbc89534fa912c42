"""
Territory scoping – which doctors an identity may pick for a camp.
"""

from typing import Union

from camp_portal.config import TERRITORY_DELIMITER
from camp_portal.directory import fetch_eligible_doctors
from camp_portal.errors import OutOfScope
from camp_portal.models import (
    Doctor,
    DoctorListing,
    EmployeeScope,
    Identity,
    ManagerScope,
    ScopeWarning,
)

TerritoryScope = Union[EmployeeScope, ManagerScope]


def resolve_scope(identity: Identity) -> TerritoryScope:
    """Derive the territory scope of an identity.

    Employees see their own territory; managers see every BE territory they
    supervise. Both collapse to a set of territory keys through
    ``scope.territories()``.
    """
    if identity.is_manager:
        return ManagerScope(managed=identity.managed_territories, delimiter=TERRITORY_DELIMITER)
    return EmployeeScope(territory=identity.own_territory)


def list_eligible_doctors(engine, identity: Identity) -> DoctorListing:
    """Eligible doctors inside the identity's scope, ordered by name."""
    scope = resolve_scope(identity)
    territories = scope.territories()
    description = scope.describe()

    if not territories:
        return DoctorListing(doctors=[], scope_description=description, warning=scope.empty_warning())

    doctors = fetch_eligible_doctors(engine, territories)
    warning = None
    if not doctors:
        warning = ScopeWarning(
            code="NoDoctorsInScope",
            message=f"No doctors found for territory: {description}",
        )
    return DoctorListing(doctors=doctors, scope_description=description, warning=warning)


def ensure_in_scope(identity: Identity, doctor: Doctor) -> None:
    """Raise OutOfScope unless *doctor* is eligible and inside the identity's territories."""
    territories = resolve_scope(identity).territories()
    if not doctor.eligible or doctor.territory not in territories:
        raise OutOfScope(f"Doctor {doctor.id} is not available in your territory.")
