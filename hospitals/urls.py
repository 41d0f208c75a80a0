from django.urls import path
from . import views

urlpatterns = [
    path("", views.institutions_home, name="institutions_home"),
    path("register/", views.hospital_register, name="hospital_register"),
    path("pending/", views.hospital_pending, name="hospital_pending"),
    path("portal/", views.portal, name="hospital_portal"),
    path("portal/members/", views.members, name="hospital_members"),

    path("portal/campaigns/", views.campaign_list, name="hospital_campaign_list"),
    path("portal/campaigns/new/", views.campaign_create, name="hospital_campaign_create"),
    path("portal/campaigns/<int:campaign_id>/edit/", views.campaign_edit, name="hospital_campaign_edit"),
    path("portal/campaigns/<int:campaign_id>/delete/", views.campaign_delete, name="hospital_campaign_delete"),

    path("portal/stock/", views.stock, name="hospital_stock"),
    path("portal/stock/add/", views.bag_add, name="hospital_bag_add"),
    path("portal/stock/<int:bag_id>/remove/", views.bag_remove, name="hospital_bag_remove"),
    path("portal/stock/bulk-remove/", views.bag_bulk_remove, name="hospital_bag_bulk_remove"),

    path("portal/requests/", views.request_list, name="hospital_request_list"),
    path("portal/requests/<int:request_id>/schedule/", views.request_schedule, name="hospital_request_schedule"),
    path("portal/requests/<int:request_id>/reject/", views.request_reject, name="hospital_request_reject"),
    path("portal/appointments/", views.appointment_list, name="hospital_appointment_list"),
    path("portal/appointments/<int:appointment_id>/update/", views.appointment_update, name="hospital_appointment_update"),
]
