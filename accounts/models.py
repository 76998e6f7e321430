from django.contrib.auth.models import AbstractUser
from django.core.validators import RegexValidator
from django.db import models


class User(AbstractUser):
    """Platform user. ``role`` decides which paperwork actions are offered."""

    class Role(models.TextChoices):
        BROKER = "broker", "Broker"
        CUSTOMER = "customer", "Customer"
        CARRIER = "carrier", "Carrier"
        SHIPPER = "shipper", "Shipper"
        DRIVER = "driver", "Driver"
        RECEIVER = "receiver", "Receiver (Consignee)"
        ADMIN = "admin", "Admin"

    role = models.CharField(
        choices=Role.choices,
        default=Role.BROKER,
        max_length=20,
        help_text="User role for permission management",
    )
    company_name = models.CharField(
        max_length=200, blank=True, help_text="Customer, carrier or shipper company"
    )
    email = models.EmailField(unique=True)
    phone_regex = RegexValidator(regex=r"^\+\d{10,15}$")
    phone = models.CharField(validators=[phone_regex], max_length=20, null=True, blank=True)

    # timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def display_name(self):
        """Default signer name offered on signature forms."""
        return self.get_full_name() or self.username

    def __str__(self):
        return f"{self.display_name} ({self.get_role_display()})"  # type: ignore
