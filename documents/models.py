from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from documents.choices import AccessorialType, Kind, SignerRole, Status
from documents.services.pricing import total_amount


class BaseModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        abstract = True


def _money_field(help_text=""):
    return models.DecimalField(
        max_digits=10, decimal_places=2, default=0, help_text=help_text
    )


class Document(BaseModel):
    """
    Rate confirmation, bill of lading or proof of delivery.

    Status and signatures are only written through the lifecycle service
    (documents.services.lifecycle), which bumps ``version`` on every write.
    Never assign ``status`` directly.
    """

    Kind = Kind
    Status = Status

    # Identification
    reference = models.CharField(
        max_length=50, unique=True, help_text="Document number, e.g. RC-001"
    )
    kind = models.CharField(max_length=30, choices=Kind.choices)
    load_ref = models.CharField(
        max_length=50, blank=True, db_index=True, help_text="Load reference number"
    )

    status = models.CharField(max_length=20, choices=Status.choices)
    version = models.PositiveIntegerField(
        default=1, help_text="Incremented on every write (optimistic locking)"
    )

    # ---- Rate terms (rate confirmations only) ----
    rate_amount = _money_field("Rate per unit in USD")
    quantity = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    quantity_unit = models.CharField(max_length=20, blank=True, default="tons")

    # Accessorials: field names match AccessorialType values
    fuel_surcharge = _money_field()
    dump_fee = _money_field()
    tolls = _money_field()
    detention = _money_field()
    layover = _money_field()
    stop_off = _money_field()

    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=0,
        editable=False,
        help_text="rate x quantity + accessorials (auto-calculated)",
    )

    # Parties, commodity, delivery receipt
    details = models.JSONField(default=dict, blank=True)

    # Milestones
    sent_at = models.DateTimeField(null=True, blank=True)
    signed_at = models.DateTimeField(
        null=True, blank=True, help_text="When the last required signature landed"
    )
    accepted_at = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="documents_created",
    )

    class Meta:
        ordering = ["-created_at"]

    @property
    def charges(self):
        return {t: getattr(self, t.value) for t in AccessorialType}

    def recalculate_total(self):
        if self.kind == Kind.RATE_CONFIRMATION:
            self.total_amount = total_amount(self.rate_amount, self.quantity, self.charges)
        else:
            self.total_amount = 0
        return self.total_amount

    def clean(self):
        super().clean()
        errors = {}
        if self.rate_amount is not None and self.rate_amount < 0:
            errors["rate_amount"] = "Rate cannot be negative."
        if self.quantity is not None and self.quantity < 0:
            errors["quantity"] = "Quantity cannot be negative."
        for name, amount in self.charges.items():
            if amount is not None and amount < 0:
                errors[name.value] = "Amount cannot be negative."
        if errors:
            raise ValidationError(errors)

    def save(self, *args, **kwargs):
        # Total is always derived from its inputs
        self.recalculate_total()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.reference} - {self.get_status_display()}"  # type: ignore


class DocumentSignature(BaseModel):
    """One captured signature per role per document. Re-signing overwrites."""

    document = models.ForeignKey(
        Document, on_delete=models.CASCADE, related_name="signatures"
    )
    role = models.CharField(max_length=20, choices=SignerRole.choices)

    signer_name = models.CharField(max_length=200)
    image = models.BinaryField(help_text="PNG, opaque white background")
    signed_at = models.DateTimeField()
    ip_address = models.GenericIPAddressField(null=True, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["document", "role"], name="unique_signature_per_role"
            )
        ]

    def __str__(self):
        return f"{self.document.reference} - {self.get_role_display()} ({self.signer_name})"  # type: ignore
