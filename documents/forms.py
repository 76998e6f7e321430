# forms.py
import math
from decimal import Decimal

from django import forms

from .choices import AccessorialType, Action, DeliveryCondition
from .models import Document

_CHARGE_FIELDS = [t.value for t in AccessorialType]


def _is_coordinate(value):
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


class RateTermsForm(forms.ModelForm):
    """
    Pricing inputs of a rate confirmation.

    Negative amounts are rejected by Document.clean(), which ModelForm
    validation runs for the fields listed here.
    """

    class Meta:
        model = Document
        fields = ["rate_amount", "quantity", "quantity_unit", *_CHARGE_FIELDS]

    AMOUNT_FIELDS = ["rate_amount", "quantity", *_CHARGE_FIELDS]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # Blank amounts mean zero, like the empty fee inputs on the form
        for name in self.AMOUNT_FIELDS:
            self.fields[name].required = False

    def clean(self):
        cleaned_data = super().clean()
        for name in self.AMOUNT_FIELDS:
            if cleaned_data.get(name) is None and name not in self.errors:
                cleaned_data[name] = Decimal("0")
        return cleaned_data


class RateConfirmationForm(RateTermsForm):
    """
    Draft rate confirmation: pricing on the model, parties and route
    stored in Document.details.
    """

    reference = forms.CharField(max_length=50, required=False)
    customer_name = forms.CharField(max_length=200, required=False)
    carrier_name = forms.CharField(max_length=200, required=False)
    commodity = forms.CharField(max_length=200, required=False)
    origin = forms.CharField(max_length=200, required=False)
    destination = forms.CharField(max_length=200, required=False)
    pickup_date = forms.DateField(required=False)
    delivery_date = forms.DateField(required=False)
    special_instructions = forms.CharField(required=False)

    class Meta(RateTermsForm.Meta):
        fields = ["load_ref", *RateTermsForm.Meta.fields]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        # Set placeholder text (UX hints, not styling)
        placeholders = {
            "reference": "Leave blank to auto-number",
            "load_ref": "Load number",
            "rate_amount": "0.00",
            "quantity": "0",
        }
        for name, field in self.fields.items():
            if name in placeholders:
                field.widget.attrs.setdefault("placeholder", placeholders[name])


class BillOfLadingForm(forms.Form):
    shipper_name = forms.CharField(max_length=200)
    consignee_name = forms.CharField(max_length=200)
    carrier_name = forms.CharField(max_length=200, required=False)
    driver_name = forms.CharField(max_length=200, required=False)
    truck_number = forms.CharField(max_length=50, required=False)
    trailer_number = forms.CharField(max_length=50, required=False)
    commodity = forms.CharField(max_length=200, required=False)
    special_instructions = forms.CharField(required=False)


class ProofOfDeliveryForm(forms.Form):
    consignee_name = forms.CharField(max_length=200)
    carrier_name = forms.CharField(max_length=200, required=False)
    driver_name = forms.CharField(max_length=200, required=False)
    commodity = forms.CharField(max_length=200, required=False)
    expected_quantity = forms.CharField(max_length=50, required=False)


class DocumentActionForm(forms.Form):
    """
    Action request: ``{action, version, signer_name?, strokes?, delivery?}``.

    Signer name and strokes are optional here on purpose: completeness is
    checked by the signature pad so callers get MISSING_NAME /
    EMPTY_SIGNATURE rather than a generic validation error.
    """

    action = forms.ChoiceField(choices=Action.choices)
    version = forms.IntegerField(min_value=1)
    signer_name = forms.CharField(max_length=200, required=False, strip=False)
    strokes = forms.JSONField(required=False)
    delivery = forms.JSONField(required=False)

    def clean_strokes(self):
        strokes = self.cleaned_data.get("strokes") or []
        if not isinstance(strokes, list):
            raise forms.ValidationError("Strokes must be a list of point lists.")
        for stroke in strokes:
            if not isinstance(stroke, list) or not all(
                isinstance(p, (list, tuple)) and len(p) == 2 for p in stroke
            ):
                raise forms.ValidationError("Each stroke must be a list of [x, y] points.")
            if not all(_is_coordinate(c) for p in stroke for c in p):
                raise forms.ValidationError("Point coordinates must be finite numbers.")
        return strokes

    def clean_delivery(self):
        delivery = self.cleaned_data.get("delivery")
        if not delivery:
            return None
        form = DeliveryReceiptForm(delivery if isinstance(delivery, dict) else {})
        if not form.is_valid():
            raise forms.ValidationError(form.errors.as_text())
        return form.cleaned_data


class DeliveryReceiptForm(forms.Form):
    actual_quantity = forms.CharField(max_length=50)
    condition = forms.ChoiceField(choices=DeliveryCondition.choices)
    notes = forms.CharField(required=False)
