from django.urls import path, include

from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from .views import AccountViewSet, LogoutView, WhatsAppSendView, WhatsAppVerifyView

router = DefaultRouter()
router.register(r'', AccountViewSet, basename='account')


urlpatterns = [
    path('token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('logout/', LogoutView.as_view(), name='logout'),
    path('whatsapp/send/', WhatsAppSendView.as_view(), name='whatsapp-send'),
    path('whatsapp/verify/', WhatsAppVerifyView.as_view(), name='whatsapp-verify'),
    path('', include(router.urls)),
]
