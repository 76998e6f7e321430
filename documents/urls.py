"""
URL routing for load paperwork.

- /rate-confirmations/ → create a draft rate confirmation
- /rate-confirmations/"RC-001"/terms/ → replace pricing while in draft
- /loads/"LD1001"/bol/ → prepare the load's BOL for e-signing
- /loads/"LD1001"/pod/ → prepare the load's POD for e-signing
- /loads/"LD1001"/signed-documents/ → everything signed/accepted for a load
- /documents/"RC-001"/ → snapshot + available actions
- /documents/"RC-001"/actions/ → send / sign / accept
- /documents/"RC-001"/signatures/carrier.png → signature image
"""

from django.urls import path

from .views import (
    create_bill_of_lading_view,
    create_proof_of_delivery_view,
    create_rate_confirmation_view,
    document_action,
    document_detail,
    signature_image,
    signed_documents,
    update_rate_terms_view,
)

urlpatterns = [
    path(
        "rate-confirmations/",
        create_rate_confirmation_view,
        name="create_rate_confirmation",
    ),
    path(
        "rate-confirmations/<str:reference>/terms/",
        update_rate_terms_view,
        name="update_rate_terms",
    ),
    path("loads/<str:load_ref>/bol/", create_bill_of_lading_view, name="create_bol"),
    path("loads/<str:load_ref>/pod/", create_proof_of_delivery_view, name="create_pod"),
    path(
        "loads/<str:load_ref>/signed-documents/",
        signed_documents,
        name="signed_documents",
    ),
    path(
        "documents/<str:reference>/signatures/<str:role>.png",
        signature_image,
        name="signature_image",
    ),
    path("documents/<str:reference>/actions/", document_action, name="document_action"),
    path("documents/<str:reference>/", document_detail, name="document_detail"),
]
