from django.urls import path

from .views import signed_media

urlpatterns = [
    path("signed/<str:token>/", signed_media, name="signed-media"),
]
