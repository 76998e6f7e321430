from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("accounts/", include("django.contrib.auth.urls")),
    path("", include("documents.urls")),
]


# admin customisation
admin.site.site_header = "Freight Paperwork"
admin.site.site_title = "Paperwork"
admin.site.index_title = "Rate Confirmations, BOLs & PODs"
