import json

from django.conf import settings
from django.contrib.auth.decorators import login_required
from django.core.exceptions import ValidationError
from django.core.validators import validate_ipv46_address
from django.http import HttpResponse, JsonResponse
from django.views.decorators.http import require_GET, require_POST

from documents.choices import (
    TERMINAL_STATUSES,
    Action,
    DeliveryCondition,
    SignerRole,
)
from documents.forms import (
    BillOfLadingForm,
    DocumentActionForm,
    ProofOfDeliveryForm,
    RateConfirmationForm,
    RateTermsForm,
)
from documents.policies.document_actions import actions_for, permitted_actions
from documents.policies.roles import is_admin, is_broker
from documents.records import DeliveryReceipt
from documents.services import store
from documents.services.document_creation import (
    create_bill_of_lading,
    create_proof_of_delivery,
    create_rate_confirmation,
    update_rate_terms,
)
from documents.services.exceptions import Conflict, ServiceError
from documents.services.lifecycle import perform_action
from documents.services.signature_capture import SignaturePad
from documents.services.transitions import SIGNER_FOR_ACTION


def _error(code, message, status, **extra):
    payload = {"error": {"code": code, "message": message, **extra}}
    return JsonResponse(payload, status=status)


def _service_error(exc: ServiceError):
    return JsonResponse({"error": exc.as_dict()}, status=exc.http_status)


def _invalid_form(form):
    return _error(
        "VALIDATION_ERROR",
        "Request validation failed",
        400,
        details=form.errors.get_json_data(),
    )


def _forbidden(message="Not authorized for this action."):
    return _error("FORBIDDEN", message, 403)


def _json_body(request):
    """Parsed JSON body, falling back to form-encoded POST data."""
    if request.content_type == "application/json":
        try:
            body = json.loads(request.body or b"{}")
        except ValueError:
            return None
        return body if isinstance(body, dict) else None
    return request.POST


def _valid_ip(value):
    try:
        validate_ipv46_address(value)
    except ValidationError:
        return ""
    return value


def _client_ip(request):
    """Signer IP for the audit trail. X-Forwarded-For only behind a trusted proxy."""
    if getattr(settings, "USE_X_FORWARDED_FOR", False):
        forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
        candidate = _valid_ip(forwarded.split(",")[0].strip())
        if candidate:
            return candidate
    return _valid_ip(request.META.get("REMOTE_ADDR", ""))


def _document_payload(document, user):
    payload = document.to_dict()
    payload["available_actions"] = actions_for(user, document)
    return payload


def _can_create(user):
    return is_broker(user) or is_admin(user)


@login_required
@require_GET
def document_detail(request, reference):
    """Document snapshot plus the actions this user can take on it."""
    try:
        document = store.load(reference)
    except ServiceError as e:
        return _service_error(e)
    return JsonResponse({"document": _document_payload(document, request.user)})


@login_required
@require_POST
def document_action(request, reference):
    """
    Run one lifecycle action.

    Flow:
    1. Validate the request shape (DocumentActionForm)
    2. Role check
    3. Capture the signature for signing actions (MISSING_NAME / EMPTY_SIGNATURE)
    4. perform_action() - gate, CAS write
    5. Return the new snapshot and a message for the UI to show

    On CONFLICT the current snapshot is returned so the client can
    refetch-and-retry once without another round trip.
    """
    data = _json_body(request)
    if data is None:
        return _error("VALIDATION_ERROR", "Body must be a JSON object.", 400)

    form = DocumentActionForm(data)
    if not form.is_valid():
        return _invalid_form(form)

    cd = form.cleaned_data
    action = Action(cd["action"])

    if action not in permitted_actions(request.user):
        return _forbidden(f"Your role cannot {action.label.lower()}.")

    signature = None
    delivery = None
    try:
        if action in SIGNER_FOR_ACTION:
            pad = SignaturePad.from_payload(cd.get("signer_name"), cd.get("strokes"))
            signature = pad.submit(ip_address=_client_ip(request))
        if cd.get("delivery"):
            delivery = DeliveryReceipt(
                actual_quantity=cd["delivery"]["actual_quantity"],
                condition=DeliveryCondition(cd["delivery"]["condition"]),
                notes=cd["delivery"].get("notes") or "",
            )

        result = perform_action(
            reference,
            action,
            expected_version=cd["version"],
            signature=signature,
            delivery=delivery,
            actor=request.user,
        )
    except Conflict as e:
        response = e.as_dict()
        try:
            current = _document_payload(store.load(reference), request.user)
        except ServiceError:
            current = None
        return JsonResponse({"error": response, "document": current}, status=e.http_status)
    except ServiceError as e:
        return _service_error(e)

    return JsonResponse(
        {
            "document": _document_payload(result.document, request.user),
            "message": result.message,
        }
    )


@login_required
@require_POST
def create_rate_confirmation_view(request):
    if not _can_create(request.user):
        return _forbidden("Only brokers can create rate confirmations.")

    data = _json_body(request)
    if data is None:
        return _error("VALIDATION_ERROR", "Body must be a JSON object.", 400)

    form = RateConfirmationForm(data)
    if not form.is_valid():
        return _invalid_form(form)

    try:
        document = create_rate_confirmation(created_by=request.user, form=form)
    except ServiceError as e:
        return _service_error(e)

    return JsonResponse(
        {
            "document": _document_payload(document, request.user),
            "message": f"Rate Confirmation {document.reference} created.",
        },
        status=201,
    )


@login_required
@require_POST
def update_rate_terms_view(request, reference):
    if not _can_create(request.user):
        return _forbidden("Only brokers can change rate terms.")

    data = _json_body(request)
    if data is None:
        return _error("VALIDATION_ERROR", "Body must be a JSON object.", 400)

    form = RateTermsForm(data)
    version = data.get("version")
    if not form.is_valid():
        return _invalid_form(form)
    try:
        version = int(version)
    except (TypeError, ValueError):
        return _error("VALIDATION_ERROR", "A numeric version is required.", 400)

    try:
        document = update_rate_terms(reference, expected_version=version, form=form)
    except ServiceError as e:
        return _service_error(e)

    return JsonResponse(
        {
            "document": _document_payload(document, request.user),
            "message": f"Rate Confirmation {document.reference} updated.",
        }
    )


def _create_signing_document(request, load_ref, form_class, create):
    if not _can_create(request.user):
        return _forbidden("Only brokers can prepare load paperwork.")

    data = _json_body(request)
    if data is None:
        return _error("VALIDATION_ERROR", "Body must be a JSON object.", 400)

    form = form_class(data)
    if not form.is_valid():
        return _invalid_form(form)

    try:
        document = create(load_ref=load_ref, form=form, created_by=request.user)
    except ServiceError as e:
        return _service_error(e)

    return JsonResponse(
        {
            "document": _document_payload(document, request.user),
            "message": f"{document.kind.label} {document.reference} ready for signatures.",
        },
        status=201,
    )


@login_required
@require_POST
def create_bill_of_lading_view(request, load_ref):
    return _create_signing_document(request, load_ref, BillOfLadingForm, create_bill_of_lading)


@login_required
@require_POST
def create_proof_of_delivery_view(request, load_ref):
    return _create_signing_document(
        request, load_ref, ProofOfDeliveryForm, create_proof_of_delivery
    )


@login_required
@require_GET
def signed_documents(request, load_ref):
    """All of a load's paperwork that reached a terminal state."""
    documents = store.for_load(load_ref, statuses=TERMINAL_STATUSES)
    return JsonResponse(
        {"documents": [_document_payload(doc, request.user) for doc in documents]}
    )


@login_required
@require_GET
def signature_image(request, reference, role):
    """PNG of one captured signature, for audit printing."""
    try:
        role = SignerRole(role)
    except ValueError:
        return _error("NOT_FOUND", f"Unknown signer role: {role}", 404)

    try:
        document = store.load(reference)
    except ServiceError as e:
        return _service_error(e)

    signature = document.signatures.get(role)
    if signature is None:
        return _error("NOT_FOUND", f"{reference} has no {role.label.lower()} signature.", 404)

    response = HttpResponse(signature.image_png, content_type="image/png")
    response["Content-Disposition"] = f'inline; filename="{reference}-{role.value}.png"'
    return response
