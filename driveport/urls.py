from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("files/", include("ingestion.urls")),
    path("admin/", admin.site.urls),
]
