from django.contrib import admin

from .models import Document, DocumentSignature


class DocumentSignatureInline(admin.TabularInline):
    model = DocumentSignature
    extra = 0
    fields = ("role", "signer_name", "signed_at", "ip_address")
    readonly_fields = fields
    can_delete = False


@admin.register(Document)
class DocumentAdmin(admin.ModelAdmin):
    list_display = ("reference", "kind", "status", "load_ref", "total_amount", "version")
    list_filter = ("kind", "status")
    search_fields = ("reference", "load_ref")
    # Status, version and signatures only change through the lifecycle service
    readonly_fields = ("status", "version", "total_amount", "sent_at", "signed_at", "accepted_at")
    inlines = [DocumentSignatureInline]
