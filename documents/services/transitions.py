"""
Status transition gate.

Pure functions only: given a document kind, its current status and a
requested action, either return the resulting Decision or raise
InvalidTransition. Nothing here reads or writes the database.

Rate confirmation:  draft -> sent -> signed -> accepted
BOL:                unsigned -> shipper_signed | driver_signed -> fully_signed
POD:                unsigned -> receiver_signed | driver_signed -> fully_signed
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from django.conf import settings

from documents.choices import Action, Kind, SignerRole, Status
from documents.services.exceptions import InvalidTransition


@dataclass(frozen=True)
class Decision:
    status: Status
    # Role whose signature the action records, None for send/accept
    signer: Optional[SignerRole] = None
    needs_delivery: bool = False


@dataclass(frozen=True)
class DualSignatureFlow:
    """Two-party paperwork where either party may sign first."""

    first: SignerRole
    second: SignerRole
    partial: dict
    actions: dict

    @property
    def statuses(self):
        return (Status.UNSIGNED, *self.partial.values(), Status.FULLY_SIGNED)

    def signed_by(self, status):
        if status == Status.FULLY_SIGNED:
            return {self.first, self.second}
        return {role for role, partial in self.partial.items() if partial == status}


BOL_FLOW = DualSignatureFlow(
    first=SignerRole.SHIPPER,
    second=SignerRole.DRIVER,
    partial={
        SignerRole.SHIPPER: Status.SHIPPER_SIGNED,
        SignerRole.DRIVER: Status.DRIVER_SIGNED,
    },
    actions={
        Action.SHIPPER_SIGN: SignerRole.SHIPPER,
        Action.DRIVER_SIGN: SignerRole.DRIVER,
    },
)

POD_FLOW = DualSignatureFlow(
    first=SignerRole.RECEIVER,
    second=SignerRole.DRIVER,
    partial={
        SignerRole.RECEIVER: Status.RECEIVER_SIGNED,
        SignerRole.DRIVER: Status.DRIVER_SIGNED,
    },
    actions={
        Action.RECEIVER_SIGN: SignerRole.RECEIVER,
        Action.DRIVER_SIGN: SignerRole.DRIVER,
    },
)

RATE_CONFIRMATION_SEQUENCE = (
    Status.DRAFT,
    Status.SENT,
    Status.SIGNED,
    Status.ACCEPTED,
)

RATE_CONFIRMATION_SIGNERS = {
    Action.CUSTOMER_SIGN: SignerRole.CUSTOMER,
    Action.CARRIER_SIGN: SignerRole.CARRIER,
}

INITIAL_STATUS = {
    Kind.RATE_CONFIRMATION: Status.DRAFT,
    Kind.BILL_OF_LADING: Status.UNSIGNED,
    Kind.PROOF_OF_DELIVERY: Status.UNSIGNED,
}

_FLOWS = {
    Kind.BILL_OF_LADING: BOL_FLOW,
    Kind.PROOF_OF_DELIVERY: POD_FLOW,
}

SIGNER_FOR_ACTION = {
    **RATE_CONFIRMATION_SIGNERS,
    **BOL_FLOW.actions,
    **POD_FLOW.actions,
}


def rank(kind, status) -> int:
    """Position of ``status`` in the forward order of ``kind``."""
    kind = Kind(kind)
    status = Status(status)
    if kind == Kind.RATE_CONFIRMATION:
        if status not in RATE_CONFIRMATION_SEQUENCE:
            raise InvalidTransition(f"'{status}' is not a rate confirmation status.")
        return RATE_CONFIRMATION_SEQUENCE.index(status)

    flow = _FLOWS[kind]
    if status not in flow.statuses:
        raise InvalidTransition(f"'{status}' is not a {kind.label} status.")
    return len(flow.signed_by(status))


def requires_both_signatures() -> bool:
    return getattr(settings, "RATE_CONFIRMATION_REQUIRES_BOTH_SIGNATURES", False)


def required_signers(kind) -> frozenset:
    """Roles whose signatures complete the document."""
    kind = Kind(kind)
    if kind == Kind.RATE_CONFIRMATION:
        if not requires_both_signatures():
            return frozenset()
        return frozenset(RATE_CONFIRMATION_SIGNERS.values())
    flow = _FLOWS[kind]
    return frozenset({flow.first, flow.second})


def _reject(kind, status, action, reason=""):
    message = f"Cannot {Action(action).label.lower()} a {kind.label} that is {status.label.lower()}."
    if reason:
        message = f"{message} {reason}"
    raise InvalidTransition(message, status=str(status), action=str(action))


def _rate_confirmation(status, action, signed_roles, require_both):
    kind = Kind.RATE_CONFIRMATION

    if action == Action.SEND:
        if status != Status.DRAFT:
            _reject(kind, status, action, "Only drafts can be sent.")
        return Decision(Status.SENT)

    if action in RATE_CONFIRMATION_SIGNERS:
        if status not in (Status.SENT, Status.SIGNED):
            _reject(kind, status, action, "It must be sent first.")
        role = RATE_CONFIRMATION_SIGNERS[action]
        if status == Status.SIGNED:
            return Decision(Status.SIGNED, signer=role)

        roles = set(signed_roles) | {role}
        complete = (
            roles >= set(RATE_CONFIRMATION_SIGNERS.values()) if require_both else True
        )
        return Decision(Status.SIGNED if complete else Status.SENT, signer=role)

    if action == Action.ACCEPT:
        if status != Status.SIGNED:
            _reject(kind, status, action, "It must be signed first.")
        return Decision(Status.ACCEPTED)

    _reject(kind, status, action)


def _dual_signature(kind, flow, status, action):
    if status == Status.FULLY_SIGNED:
        _reject(kind, status, action, "It is already fully signed.")
    if action not in flow.actions:
        _reject(kind, status, action)

    role = flow.actions[action]
    roles = flow.signed_by(status) | {role}
    if roles >= {flow.first, flow.second}:
        new_status = Status.FULLY_SIGNED
    else:
        new_status = flow.partial[role]

    return Decision(
        new_status,
        signer=role,
        needs_delivery=role == SignerRole.RECEIVER,
    )


def resolve(
    kind,
    status,
    action,
    signed_roles: Iterable[SignerRole] = (),
    require_both: Optional[bool] = None,
) -> Decision:
    """
    Decide whether ``action`` is legal from ``status``.

    ``signed_roles`` only matters for rate confirmations, whose ``sent``
    status does not say who has signed already. BOL/POD derive it from
    their status.

    Raises:
        InvalidTransition: unknown action, status foreign to the kind,
            or action not defined for the status.
    """
    kind = Kind(kind)
    try:
        action = Action(action)
    except ValueError:
        raise InvalidTransition(f"Unknown action: {action}", action=str(action))

    # Validates status belongs to kind
    rank(kind, status)
    status = Status(status)

    if kind == Kind.RATE_CONFIRMATION:
        if require_both is None:
            require_both = requires_both_signatures()
        return _rate_confirmation(status, action, signed_roles, require_both)

    return _dual_signature(kind, _FLOWS[kind], status, action)


def legal_actions(kind, status, signed_roles=(), require_both=None) -> list:
    """Actions that ``resolve`` would accept, in declaration order."""
    actions = []
    for action in Action:
        try:
            resolve(kind, status, action, signed_roles, require_both)
        except InvalidTransition:
            continue
        actions.append(action)
    return actions
