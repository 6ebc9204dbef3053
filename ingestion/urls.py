from django.urls import path

from ingestion import views

urlpatterns = [
    path("", views.list_files, name="file-list"),
    path("upload-from-urls/", views.upload_from_urls, name="upload-from-urls"),
    path("<str:record_id>/", views.file_detail, name="file-detail"),
]
