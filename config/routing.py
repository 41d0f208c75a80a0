from django.urls import path
from channels.routing import URLRouter

import communication.routing

websocket_urlpatterns = [
    path("ws/", URLRouter(communication.routing.websocket_urlpatterns)),
]
