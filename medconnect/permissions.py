"""
Authorization gate

A pure decision over (actor, operation, resource ownership). Credential
checks happen before this point, so the only outcomes here are ALLOW and
FORBIDDEN.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .errors import ForbiddenError
from .models import Role

logger = logging.getLogger(__name__)


class Operation(str, enum.Enum):
    BOOK_APPOINTMENT = "book_appointment"
    VIEW_APPOINTMENT = "view_appointment"
    CONFIRM_APPOINTMENT = "confirm_appointment"
    COMPLETE_APPOINTMENT = "complete_appointment"
    CANCEL_APPOINTMENT = "cancel_appointment"
    PAY_APPOINTMENT = "pay_appointment"
    LIST_ALL_APPOINTMENTS = "list_all_appointments"
    CREATE_DOCTOR_ACCOUNT = "create_doctor_account"
    CREATE_OWN_DOCTOR_PROFILE = "create_own_doctor_profile"
    UPDATE_DOCTOR_PROFILE = "update_doctor_profile"


class Decision(str, enum.Enum):
    ALLOW = "allow"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class Actor:
    user_id: int
    role: Role

    @classmethod
    def from_user(cls, user) -> "Actor":
        return cls(user_id=user.id, role=user.role)


@dataclass(frozen=True)
class Ownership:
    """Account ids that own the resource; None when the resource has no such owner"""

    patient_id: Optional[int] = None
    doctor_user_id: Optional[int] = None


NO_RESOURCE = Ownership()


def _allow(condition: bool) -> Decision:
    return Decision.ALLOW if condition else Decision.FORBIDDEN


def _patient_decision(actor: Actor, operation: Operation, resource: Ownership) -> Decision:
    owns = resource.patient_id is not None and resource.patient_id == actor.user_id
    if operation == Operation.BOOK_APPOINTMENT:
        return Decision.ALLOW
    if operation in (
        Operation.VIEW_APPOINTMENT,
        Operation.CANCEL_APPOINTMENT,
        Operation.PAY_APPOINTMENT,
    ):
        return _allow(owns)
    return Decision.FORBIDDEN


def _doctor_decision(actor: Actor, operation: Operation, resource: Ownership) -> Decision:
    owns = resource.doctor_user_id is not None and resource.doctor_user_id == actor.user_id
    if operation == Operation.CREATE_OWN_DOCTOR_PROFILE:
        return Decision.ALLOW
    if operation in (
        Operation.VIEW_APPOINTMENT,
        Operation.CONFIRM_APPOINTMENT,
        Operation.COMPLETE_APPOINTMENT,
        Operation.CANCEL_APPOINTMENT,
        Operation.UPDATE_DOCTOR_PROFILE,
    ):
        return _allow(owns)
    return Decision.FORBIDDEN


def _admin_decision(actor: Actor, operation: Operation, resource: Ownership) -> Decision:
    # Admins oversee bookings but never act as the treating doctor or the patient
    return _allow(
        operation
        in (
            Operation.VIEW_APPOINTMENT,
            Operation.CANCEL_APPOINTMENT,
            Operation.PAY_APPOINTMENT,
            Operation.LIST_ALL_APPOINTMENTS,
            Operation.CREATE_DOCTOR_ACCOUNT,
            Operation.UPDATE_DOCTOR_PROFILE,
        )
    )


_RULES: dict[Role, Callable[[Actor, Operation, Ownership], Decision]] = {
    Role.PATIENT: _patient_decision,
    Role.DOCTOR: _doctor_decision,
    Role.ADMIN: _admin_decision,
}


def authorize(actor: Actor, operation: Operation, resource: Ownership = NO_RESOURCE) -> Decision:
    return _RULES[actor.role](actor, operation, resource)


def ensure_allowed(
    actor: Actor,
    operation: Operation,
    resource: Ownership = NO_RESOURCE,
    message: str = "You are not allowed to perform this action",
) -> None:
    if authorize(actor, operation, resource) is Decision.FORBIDDEN:
        logger.warning(
            f"Forbidden: {actor.role.value} {actor.user_id} attempted {operation.value} "
            f"on {resource}"
        )
        raise ForbiddenError(message)
