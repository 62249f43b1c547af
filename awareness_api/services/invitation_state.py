"""
Invitation state machine.

PENDING is the only state with outgoing transitions. Transitions are issued
as conditional UPDATEs (compare-and-swap on ``state``), so the request path
and the purge sweep share one definition of when a move is legal and the
database serialises competing writers.
"""
from datetime import datetime
from sqlalchemy import update
from sqlalchemy.sql.dml import Update

from awareness_api.core.errors import AlreadyProcessedError, ExpiredError
from awareness_api.models.invitation import Invitation, InvitationState

ALLOWED_TRANSITIONS = {
    InvitationState.PENDING: frozenset({
        InvitationState.ACCEPTED,
        InvitationState.DECLINED,
        InvitationState.EXPIRED,
    }),
}


def can_transition(current: InvitationState, target: InvitationState) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def is_lapsed(invitation: Invitation, now: datetime) -> bool:
    return now > invitation.expires_at


def effective_state(invitation: Invitation, now: datetime) -> InvitationState:
    """State as seen at ``now``; a lapsed pending invitation reads as expired."""
    if invitation.state == InvitationState.PENDING and is_lapsed(invitation, now):
        return InvitationState.EXPIRED
    return invitation.state


def ensure_pending(invitation: Invitation, now: datetime) -> None:
    """
    Raises:
        ExpiredError: If the invitation lapsed or was expired by the sweep
        AlreadyProcessedError: If it was accepted or declined
    """
    state = effective_state(invitation, now)
    if state == InvitationState.EXPIRED:
        raise ExpiredError()
    if state != InvitationState.PENDING:
        raise AlreadyProcessedError()


def transition(target: InvitationState, now: datetime, *criteria, require_live: bool = True) -> Update:
    """
    Conditional UPDATE moving matching PENDING rows to ``target``.

    ``require_live`` restricts ACCEPTED/DECLINED to invitations that have not
    lapsed. EXPIRED always applies to lapsed rows only.
    """
    if not can_transition(InvitationState.PENDING, target):
        raise ValueError(f"Invalid invitation transition to {target}")

    stmt = update(Invitation).where(Invitation.state == InvitationState.PENDING, *criteria)
    if target == InvitationState.EXPIRED:
        stmt = stmt.where(Invitation.expires_at < now)
    elif require_live:
        stmt = stmt.where(Invitation.expires_at >= now)

    values = {"state": target, "updated_at": now}
    if target == InvitationState.ACCEPTED:
        values["accepted_at"] = now

    return stmt.values(**values).execution_options(synchronize_session=False)
