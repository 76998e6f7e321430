"""
Value records passed through the signing lifecycle.

A DocumentRecord is a snapshot of one piece of paperwork. The lifecycle
never mutates a record; it returns a new one built with ``replace()``.
The store maps records to and from the ORM, and ``to_dict``/``from_dict``
give the JSON shape used by the views.
"""

import base64
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping, Optional

from django.utils.dateparse import parse_datetime

from documents.choices import (
    AccessorialType,
    DeliveryCondition,
    Kind,
    SignerRole,
    Status,
    TERMINAL_STATUSES,
)
from documents.services.pricing import ZERO, to_money, total_amount

_PNG_DATA_URL = "data:image/png;base64,"


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse(value: Optional[str]) -> Optional[datetime]:
    return parse_datetime(value) if value else None


@dataclass(frozen=True)
class Signature:
    """Captured signature: typed name, PNG ink image, capture time."""

    signer_name: str
    image_png: bytes = field(repr=False)
    captured_at: datetime
    ip_address: str = ""

    @property
    def data_url(self) -> str:
        return _PNG_DATA_URL + base64.b64encode(self.image_png).decode("ascii")

    def to_dict(self) -> dict:
        return {
            "signer_name": self.signer_name,
            "image": self.data_url,
            "captured_at": _iso(self.captured_at),
            "ip_address": self.ip_address,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Signature":
        image = data["image"]
        if image.startswith(_PNG_DATA_URL):
            image = image[len(_PNG_DATA_URL) :]
        return cls(
            signer_name=data["signer_name"],
            image_png=base64.b64decode(image),
            captured_at=_parse(data["captured_at"]),
            ip_address=data.get("ip_address") or "",
        )


@dataclass(frozen=True)
class DeliveryReceipt:
    """Receiver's verification recorded when a POD is signed."""

    actual_quantity: str
    condition: DeliveryCondition
    notes: str = ""
    received_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "actual_quantity": self.actual_quantity,
            "condition": str(self.condition),
            "notes": self.notes,
            "received_at": _iso(self.received_at),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DeliveryReceipt":
        return cls(
            actual_quantity=str(data["actual_quantity"]),
            condition=DeliveryCondition(data["condition"]),
            notes=data.get("notes") or "",
            received_at=_parse(data.get("received_at")),
        )


@dataclass(frozen=True)
class RateTerms:
    rate_amount: Decimal = ZERO
    quantity: Decimal = ZERO
    quantity_unit: str = ""
    charges: Mapping[AccessorialType, Decimal] = field(default_factory=dict)

    @property
    def total(self) -> Decimal:
        return total_amount(self.rate_amount, self.quantity, self.charges)

    def to_dict(self) -> dict:
        return {
            "rate_amount": str(to_money(self.rate_amount)),
            "quantity": str(self.quantity),
            "quantity_unit": self.quantity_unit,
            "charges": {
                str(name): str(to_money(amount))
                for name, amount in self.charges.items()
            },
            "total_amount": str(self.total),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RateTerms":
        return cls(
            rate_amount=Decimal(data.get("rate_amount") or "0"),
            quantity=Decimal(data.get("quantity") or "0"),
            quantity_unit=data.get("quantity_unit") or "",
            charges={
                AccessorialType(name): Decimal(amount)
                for name, amount in (data.get("charges") or {}).items()
            },
        )


@dataclass(frozen=True)
class DocumentRecord:
    reference: str
    kind: Kind
    status: Status
    version: int = 1
    load_ref: str = ""
    terms: Optional[RateTerms] = None
    signatures: Mapping[SignerRole, Signature] = field(default_factory=dict)
    details: Mapping[str, Any] = field(default_factory=dict)
    sent_at: Optional[datetime] = None
    signed_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None

    @property
    def total_amount(self) -> Decimal:
        return self.terms.total if self.terms else ZERO

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def signed_roles(self) -> frozenset:
        return frozenset(self.signatures)

    @property
    def delivery(self) -> Optional[DeliveryReceipt]:
        data = self.details.get("delivery")
        return DeliveryReceipt.from_dict(data) if data else None

    def with_signature(self, role: SignerRole, signature: Signature):
        signatures = dict(self.signatures)
        signatures[SignerRole(role)] = signature
        return replace(self, signatures=signatures)

    def to_dict(self) -> dict:
        return {
            "reference": self.reference,
            "kind": str(self.kind),
            "status": str(self.status),
            "version": self.version,
            "load_ref": self.load_ref,
            "terms": self.terms.to_dict() if self.terms else None,
            "total_amount": str(self.total_amount),
            "signatures": {
                str(role): sig.to_dict() for role, sig in self.signatures.items()
            },
            "details": dict(self.details),
            "sent_at": _iso(self.sent_at),
            "signed_at": _iso(self.signed_at),
            "accepted_at": _iso(self.accepted_at),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DocumentRecord":
        terms = data.get("terms")
        return cls(
            reference=data["reference"],
            kind=Kind(data["kind"]),
            status=Status(data["status"]),
            version=int(data.get("version", 1)),
            load_ref=data.get("load_ref") or "",
            terms=RateTerms.from_dict(terms) if terms else None,
            signatures={
                SignerRole(role): Signature.from_dict(sig)
                for role, sig in (data.get("signatures") or {}).items()
            },
            details=dict(data.get("details") or {}),
            sent_at=_parse(data.get("sent_at")),
            signed_at=_parse(data.get("signed_at")),
            accepted_at=_parse(data.get("accepted_at")),
        )
