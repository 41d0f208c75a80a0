from django.urls import path
from . import views

urlpatterns = [
    path("", views.inbox, name="inbox"),
    path("open/<int:pk>/", views.open_notification, name="notification_open"),
    path("read/<int:pk>/", views.mark_read, name="notification_read"),
    path("read-all/", views.mark_all_read, name="notification_read_all"),
]
