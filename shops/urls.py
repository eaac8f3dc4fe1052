from rest_framework.routers import DefaultRouter
from django.urls import path, include

from .views import ShopViewSet

router = DefaultRouter()
router.register(r"", ShopViewSet, basename="shop")

urlpatterns = [
    path('', include(router.urls)),
]
