"""
Appointment status transitions

    pending   -> confirmed   (doctor)
    pending   -> cancelled   (patient, doctor, admin)
    pending   -> completed   (doctor)
    confirmed -> completed   (doctor)
    confirmed -> cancelled   (patient, doctor, admin)
    completed, cancelled: terminal

Who may perform each move is decided by the authorization gate; this module
only maps (from, to) to the operation being requested.
"""

from ...errors import InvalidTransitionError
from ...models import AppointmentStatus
from ...permissions import Actor, Operation, Ownership, ensure_allowed

TRANSITIONS: dict[AppointmentStatus, dict[AppointmentStatus, Operation]] = {
    AppointmentStatus.PENDING: {
        AppointmentStatus.CONFIRMED: Operation.CONFIRM_APPOINTMENT,
        AppointmentStatus.CANCELLED: Operation.CANCEL_APPOINTMENT,
        AppointmentStatus.COMPLETED: Operation.COMPLETE_APPOINTMENT,
    },
    AppointmentStatus.CONFIRMED: {
        AppointmentStatus.COMPLETED: Operation.COMPLETE_APPOINTMENT,
        AppointmentStatus.CANCELLED: Operation.CANCEL_APPOINTMENT,
    },
    AppointmentStatus.COMPLETED: {},
    AppointmentStatus.CANCELLED: {},
}

TERMINAL_STATES = frozenset(state for state, moves in TRANSITIONS.items() if not moves)


def is_terminal(status: AppointmentStatus) -> bool:
    return status in TERMINAL_STATES


def allowed_targets(status: AppointmentStatus) -> list[AppointmentStatus]:
    return list(TRANSITIONS[status])


def operation_for(current: AppointmentStatus, target: AppointmentStatus) -> Operation:
    """The operation a move represents; raises if the move isn't in the table"""
    if is_terminal(current):
        raise InvalidTransitionError(
            f"Appointment is already {current.value}; no further status changes are allowed"
        )

    operation = TRANSITIONS[current].get(target)
    if operation is None:
        allowed = ", ".join(s.value for s in allowed_targets(current))
        raise InvalidTransitionError(
            f"Cannot change appointment status from {current.value} to {target.value}; "
            f"allowed: {allowed}"
        )
    return operation


def check_transition(
    actor: Actor,
    ownership: Ownership,
    current: AppointmentStatus,
    target: AppointmentStatus,
) -> AppointmentStatus:
    """
    Validate a requested status change without touching storage.

    Order: outsiders are forbidden, then unreachable moves are invalid
    transitions, then a reachable move the actor's role may not make is
    forbidden. Returns the new status.
    """
    ensure_allowed(
        actor,
        Operation.VIEW_APPOINTMENT,
        ownership,
        message="Not authorized to update this appointment",
    )

    operation = operation_for(current, target)

    ensure_allowed(
        actor,
        operation,
        ownership,
        message=f"A {actor.role.value} cannot mark an appointment as {target.value}",
    )
    return target
