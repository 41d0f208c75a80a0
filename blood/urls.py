from django.urls import path
from . import views

urlpatterns = [
    path("campaigns/", views.campaign_list, name="campaign_list"),
    path("campaigns/<int:campaign_id>/", views.campaign_detail, name="campaign_detail"),
    path("campaigns/<int:campaign_id>/apply/", views.campaign_apply, name="campaign_apply"),
    path("donate/", views.direct_donation, name="direct_donation"),
    path("my/donations/", views.my_donations, name="my_donations"),
    path("my/appointments/", views.my_appointments, name="my_appointments"),
    path("my/appointments/<int:appointment_id>/cancel/", views.cancel_my_appointment, name="cancel_my_appointment"),
]
