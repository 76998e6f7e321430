import pytest
from django.urls import reverse

from documents.choices import Status
from documents.models import Document

pytestmark = pytest.mark.django_db

STROKES = [[[20, 100], [80, 40], [140, 110]]]


def _act(client, reference, action, version, **extra):
    payload = {"action": action, "version": version, **extra}
    return client.post(
        reverse("document_action", args=[reference]),
        payload,
        content_type="application/json",
    )


def test_login_required(client, rate_confirmation_factory):
    doc = rate_confirmation_factory()
    response = client.get(reverse("document_detail", args=[doc.reference]))
    assert response.status_code == 302


def test_detail_lists_available_actions(client, broker, rate_confirmation_factory):
    doc = rate_confirmation_factory()
    client.force_login(broker)
    response = client.get(reverse("document_detail", args=[doc.reference]))

    assert response.status_code == 200
    body = response.json()["document"]
    assert body["status"] == "draft"
    assert body["version"] == 1
    assert body["available_actions"] == ["send"]


def test_unknown_document_is_404(client, broker):
    client.force_login(broker)
    response = client.get(reverse("document_detail", args=["RC-404"]))
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_broker_creates_rate_confirmation(client, broker):
    client.force_login(broker)
    response = client.post(
        reverse("create_rate_confirmation"),
        {
            "load_ref": "LD1001",
            "customer_name": "Acme Aggregates",
            "carrier_name": "Rivera Trucking",
            "rate_amount": "12.50",
            "quantity": "10",
            "fuel_surcharge": "20",
        },
        content_type="application/json",
    )
    assert response.status_code == 201
    document = response.json()["document"]
    assert document["status"] == "draft"
    assert document["total_amount"] == "145.00"


def test_carrier_cannot_create(client, carrier):
    client.force_login(carrier)
    response = client.post(
        reverse("create_rate_confirmation"), {}, content_type="application/json"
    )
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


def test_send_and_premature_accept(client, broker, rate_confirmation_factory):
    doc = rate_confirmation_factory(reference="RC-001")
    client.force_login(broker)

    sent = _act(client, "RC-001", "send", 1)
    assert sent.status_code == 200
    assert sent.json()["document"]["status"] == "sent"
    assert sent.json()["message"] == "Rate Confirmation RC-001 sent for signature."

    rejected = _act(client, "RC-001", "accept", 2)
    assert rejected.status_code == 422
    assert rejected.json()["error"]["code"] == "INVALID_TRANSITION"
    doc.refresh_from_db()
    assert doc.status == Status.SENT


def test_role_cannot_perform_foreign_action(client, customer, rate_confirmation_factory):
    doc = rate_confirmation_factory(status=Status.SENT)
    client.force_login(customer)
    response = _act(client, doc.reference, "carrier_sign", 1, signer_name="X", strokes=STROKES)
    assert response.status_code == 403


def test_sign_errors_surface_codes(client, carrier, rate_confirmation_factory):
    doc = rate_confirmation_factory(status=Status.SENT)
    client.force_login(carrier)

    no_name = _act(client, doc.reference, "carrier_sign", 1, signer_name="  ", strokes=STROKES)
    assert no_name.status_code == 400
    assert no_name.json()["error"]["code"] == "MISSING_NAME"

    no_ink = _act(client, doc.reference, "carrier_sign", 1, signer_name="Rivera", strokes=[])
    assert no_ink.status_code == 400
    assert no_ink.json()["error"]["code"] == "EMPTY_SIGNATURE"

    doc.refresh_from_db()
    assert doc.version == 1


def test_carrier_signs_and_image_is_served(client, carrier, rate_confirmation_factory):
    doc = rate_confirmation_factory(status=Status.SENT)
    client.force_login(carrier)

    response = _act(
        client, doc.reference, "carrier_sign", 1, signer_name="Rivera", strokes=STROKES
    )
    assert response.status_code == 200
    body = response.json()
    assert body["document"]["signatures"]["carrier"]["ip_address"] == "127.0.0.1"
    assert body["document"]["status"] == "signed"
    assert body["message"] == (
        f"Carrier signature captured. Rate Confirmation {doc.reference} is fully signed."
    )

    image = client.get(reverse("signature_image", args=[doc.reference, "carrier"]))
    assert image.status_code == 200
    assert image["Content-Type"] == "image/png"
    assert image.content.startswith(b"\x89PNG")

    missing = client.get(reverse("signature_image", args=[doc.reference, "customer"]))
    assert missing.status_code == 404


def test_stale_version_returns_conflict_with_current_snapshot(
    client, carrier, rate_confirmation_factory
):
    doc = rate_confirmation_factory(status=Status.SENT)
    client.force_login(carrier)
    first = _act(client, doc.reference, "carrier_sign", 1, signer_name="A", strokes=STROKES)
    assert first.status_code == 200

    second = _act(client, doc.reference, "carrier_sign", 1, signer_name="B", strokes=STROKES)
    assert second.status_code == 409
    body = second.json()
    assert body["error"]["code"] == "CONFLICT"
    assert body["document"]["version"] == 2
    assert Document.objects.get(pk=doc.pk).signatures.get().signer_name == "A"


def test_invalid_payload(client, broker, rate_confirmation_factory):
    doc = rate_confirmation_factory()
    client.force_login(broker)
    response = _act(client, doc.reference, "launch", 1)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_pod_receiver_flow(client, broker, receiver):
    client.force_login(broker)
    created = client.post(
        reverse("create_pod", args=["LD1001"]),
        {"consignee_name": "City Works"},
        content_type="application/json",
    )
    assert created.status_code == 201
    reference = created.json()["document"]["reference"]
    assert reference == "POD-LD1001"

    client.force_login(receiver)
    missing = _act(client, reference, "receiver_sign", 1, signer_name="Lee", strokes=STROKES)
    assert missing.status_code == 400
    assert missing.json()["error"]["code"] == "MISSING_DELIVERY_DATA"

    signed = _act(
        client,
        reference,
        "receiver_sign",
        1,
        signer_name="Lee",
        strokes=STROKES,
        delivery={"actual_quantity": "20 tons", "condition": "good"},
    )
    assert signed.status_code == 200
    document = signed.json()["document"]
    assert document["status"] == "receiver_signed"
    assert document["details"]["delivery"]["condition"] == "good"


def test_signed_documents_for_load(client, broker, rate_confirmation_factory, bol_factory):
    rate_confirmation_factory(load_ref="LD9", status=Status.ACCEPTED)
    bol_factory(load_ref="LD9", status=Status.SHIPPER_SIGNED)
    client.force_login(broker)

    response = client.get(reverse("signed_documents", args=["LD9"]))
    documents = response.json()["documents"]
    assert [d["kind"] for d in documents] == ["rate_confirmation"]
    assert documents[0]["available_actions"] == []


@pytest.mark.parametrize(
    "strokes",
    [
        [[["a", "b"]]],
        [[[10, "NaN"]]],
        [[[True, 5]]],
        [[[1, 2, 3]]],
        "not-a-list",
    ],
)
def test_malformed_strokes_are_validation_errors(client, carrier, rate_confirmation_factory, strokes):
    doc = rate_confirmation_factory(status=Status.SENT)
    client.force_login(carrier)

    response = _act(client, doc.reference, "carrier_sign", 1, signer_name="Rivera", strokes=strokes)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"
    doc.refresh_from_db()
    assert doc.version == 1


def test_non_finite_coordinates_rejected(client, carrier, rate_confirmation_factory):
    doc = rate_confirmation_factory(status=Status.SENT)
    client.force_login(carrier)
    response = client.post(
        reverse("document_action", args=[doc.reference]),
        '{"action": "carrier_sign", "version": 1, "signer_name": "Rivera",'
        ' "strokes": [[[Infinity, 5], [10, 10]]]}',
        content_type="application/json",
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_forwarded_for_ignored_without_trusted_proxy(client, carrier, rate_confirmation_factory):
    doc = rate_confirmation_factory(status=Status.SENT)
    client.force_login(carrier)

    response = client.post(
        reverse("document_action", args=[doc.reference]),
        {"action": "carrier_sign", "version": 1, "signer_name": "Rivera", "strokes": STROKES},
        content_type="application/json",
        HTTP_X_FORWARDED_FOR="203.0.113.9",
    )

    assert response.status_code == 200
    assert response.json()["document"]["signatures"]["carrier"]["ip_address"] == "127.0.0.1"


@pytest.mark.parametrize(
    "header, expected",
    [("203.0.113.9, 10.0.0.1", "203.0.113.9"), ("foo", "127.0.0.1"), ("", "127.0.0.1")],
)
def test_forwarded_for_behind_trusted_proxy(
    client, carrier, rate_confirmation_factory, settings, header, expected
):
    settings.USE_X_FORWARDED_FOR = True
    doc = rate_confirmation_factory(status=Status.SENT)
    client.force_login(carrier)

    response = client.post(
        reverse("document_action", args=[doc.reference]),
        {"action": "carrier_sign", "version": 1, "signer_name": "Rivera", "strokes": STROKES},
        content_type="application/json",
        HTTP_X_FORWARDED_FOR=header,
    )

    assert response.status_code == 200
    assert response.json()["document"]["signatures"]["carrier"]["ip_address"] == expected


def test_both_signatures_required_when_configured(client, carrier, rate_confirmation_factory, settings):
    settings.RATE_CONFIRMATION_REQUIRES_BOTH_SIGNATURES = True
    doc = rate_confirmation_factory(status=Status.SENT)
    client.force_login(carrier)

    response = _act(client, doc.reference, "carrier_sign", 1, signer_name="Rivera", strokes=STROKES)

    assert response.status_code == 200
    assert response.json()["document"]["status"] == "sent"
    assert response.json()["message"] == "Carrier signature captured. Waiting for customer signature."
