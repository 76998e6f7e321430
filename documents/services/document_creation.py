import logging
import secrets
from dataclasses import replace

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from documents.choices import AccessorialType, Kind, Status
from documents.models import Document
from documents.records import DocumentRecord, RateTerms
from documents.services import store
from documents.services.exceptions import Conflict, ServiceError
from documents.services.transitions import INITIAL_STATUS

logger = logging.getLogger(__name__)

PARTY_FIELDS = {
    Kind.RATE_CONFIRMATION: [
        "customer_name",
        "carrier_name",
        "commodity",
        "origin",
        "destination",
        "pickup_date",
        "delivery_date",
        "special_instructions",
    ],
    Kind.BILL_OF_LADING: [
        "shipper_name",
        "consignee_name",
        "carrier_name",
        "driver_name",
        "truck_number",
        "trailer_number",
        "commodity",
        "special_instructions",
    ],
    Kind.PROOF_OF_DELIVERY: [
        "consignee_name",
        "carrier_name",
        "driver_name",
        "commodity",
        "expected_quantity",
    ],
}

# Required before a rate confirmation can be saved
RATE_CONFIRMATION_REQUIRED = ["load_ref", "customer_name", "carrier_name"]


def _new_reference(prefix):
    return f"{prefix}-{secrets.token_hex(3).upper()}"


def _details_from(kind, cleaned_data):
    details = {}
    for name in PARTY_FIELDS[kind]:
        value = cleaned_data.get(name)
        if value in (None, ""):
            continue
        details[name] = value.isoformat() if hasattr(value, "isoformat") else value
    return details


def _validate_rate_confirmation(cleaned_data):
    missing = [f for f in RATE_CONFIRMATION_REQUIRED if not cleaned_data.get(f)]
    if missing:
        raise ServiceError(
            "Please fill in all required fields: " + ", ".join(missing), missing=missing
        )


def _create(doc: Document) -> DocumentRecord:
    try:
        doc.full_clean(exclude=["created_by"])
    except ValidationError as e:
        raise ServiceError("Please correct the errors below.", errors=e.message_dict)

    try:
        with transaction.atomic():
            doc.save()
    except IntegrityError:
        raise ServiceError(f"Document {doc.reference} already exists.")
    logger.info("Created %s %s for load %s", doc.kind, doc.reference, doc.load_ref)
    return store.to_record(doc)


def create_rate_confirmation(*, created_by, form) -> DocumentRecord:
    """
    Create a draft rate confirmation from a valid RateConfirmationForm.
    Assumes: form.is_valid() already True.
    """
    cd = form.cleaned_data
    _validate_rate_confirmation(cd)

    doc = form.save(commit=False)
    doc.reference = cd.get("reference") or _new_reference("RC")
    doc.kind = Kind.RATE_CONFIRMATION
    doc.status = INITIAL_STATUS[Kind.RATE_CONFIRMATION]
    doc.details = _details_from(Kind.RATE_CONFIRMATION, cd)
    doc.created_by = created_by
    return _create(doc)


def _create_signing_document(kind, prefix, *, load_ref, cleaned_data, created_by):
    if not load_ref:
        raise ServiceError("A load reference is required.")
    if Document.objects.filter(load_ref=load_ref, kind=kind, is_active=True).exists():
        raise ServiceError(f"Load {load_ref} already has a {kind.label}.")

    doc = Document(
        reference=f"{prefix}-{load_ref}",
        kind=kind,
        status=INITIAL_STATUS[kind],
        load_ref=load_ref,
        details=_details_from(kind, cleaned_data),
        created_by=created_by,
    )
    return _create(doc)


def create_bill_of_lading(*, load_ref, form, created_by=None) -> DocumentRecord:
    """BOL pre-filled with load data; only the signatures are left empty."""
    return _create_signing_document(
        Kind.BILL_OF_LADING,
        "BOL",
        load_ref=load_ref,
        cleaned_data=form.cleaned_data,
        created_by=created_by,
    )


def create_proof_of_delivery(*, load_ref, form, created_by=None) -> DocumentRecord:
    return _create_signing_document(
        Kind.PROOF_OF_DELIVERY,
        "POD",
        load_ref=load_ref,
        cleaned_data=form.cleaned_data,
        created_by=created_by,
    )


def update_rate_terms(reference, *, expected_version, form) -> DocumentRecord:
    """
    Replace the pricing terms of a draft rate confirmation.
    The total is recomputed from the new inputs.
    """
    document = store.load(reference)

    if document.kind != Kind.RATE_CONFIRMATION:
        raise ServiceError(f"{reference} is not a rate confirmation.")
    if document.status != Status.DRAFT:
        raise ServiceError("Rate terms can only be changed while the rate confirmation is a draft.")
    if document.version != expected_version:
        raise Conflict(
            f"{reference} was modified by someone else. Reload and try again.",
            current_version=document.version,
        )

    cd = form.cleaned_data
    terms = RateTerms(
        rate_amount=cd["rate_amount"],
        quantity=cd["quantity"],
        quantity_unit=cd.get("quantity_unit") or document.terms.quantity_unit,
        charges={t: cd.get(t.value) or 0 for t in AccessorialType},
    )
    return store.commit(replace(document, terms=terms), expected_version=expected_version)
