from django.contrib import admin
from django.urls import path, include

from blood import views as blood_views

urlpatterns = [
    path("admin/", admin.site.urls),
    path("", blood_views.home, name="home"),
    path("accounts/", include("accounts.urls")),
    path("blood/", include("blood.urls")),
    path("institutions/", include("hospitals.urls")),
    path("notifications/", include("communication.urls")),
]
