from django.urls import path

from .views import PublicShopView, PublicProductView

urlpatterns = [
    path('<slug:slug>/', PublicShopView.as_view(), name='public-shop'),
    path('<slug:slug>/products/<int:product_id>/', PublicProductView.as_view(), name='public-product'),
]
