import logging

from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.parsers import JSONParser, FormParser, MultiPartParser
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsShopOwner
from mediafiles.batch import resolve_signed_urls
from orders.serializers import OrderReadSerializer, MEDIA_FIELDS as ORDER_MEDIA_FIELDS
from products.catalog import apply_catalog, catalog_summary
from products.models import Product
from products.serializers import MEDIA_FIELDS as PRODUCT_MEDIA_FIELDS, PublicProductSerializer
from .models import Shop, DELETED_NAME, DELETED_FIELD
from .serializers import ShopSerializer, OnboardingSerializer, ShopUpdateSerializer, PublicShopSerializer
from .stats import dashboard_stats, profile_stats
from .utils.metadata import page_url, shop_metadata, product_metadata
from .utils.owner import get_owner_shop
from .utils.whatsapp import whatsapp_link, shop_intro_message, product_message

logger = logging.getLogger("shops")


def _shop_data(shop, request, serializer_class=ShopSerializer):
    signed = resolve_signed_urls([shop], ["photo"], request=request)
    data = serializer_class(shop, context={"request": request, "signed_urls": signed}).data
    return data


class ShopViewSet(viewsets.GenericViewSet):
    """The caller's own shop: onboarding, settings, soft delete and stats."""
    queryset = Shop.objects.all()
    parser_classes = [JSONParser, FormParser, MultiPartParser]
    permission_classes = [IsAuthenticated, IsShopOwner]

    def get_serializer_class(self):
        if self.action == "onboarding":
            return OnboardingSerializer
        if self.action == "me" and self.request.method == "PATCH":
            return ShopUpdateSerializer
        return ShopSerializer

    def _own_shop(self):
        shop = get_owner_shop(self.request.user)
        self.check_object_permissions(self.request, shop)
        return shop

    # Shop creation [POST shops/onboarding/]
    @action(detail=False, methods=["post"])
    def onboarding(self, request, *args, **kwargs):
        # 1) one shop per owner
        if Shop.objects.filter(owner=request.user).exists():
            return Response(
                {"detail": "Vous avez déjà une boutique."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        # 2) create it with a free slug
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        shop = serializer.save(owner=request.user)
        logger.info("Shop %s (/%s) created by user %s", shop.id, shop.slug, request.user.id)
        return Response({
            "detail": "Boutique créée avec succès.",
            "shop": _shop_data(shop, request),
        }, status=status.HTTP_201_CREATED)

    # [GET|PATCH|DELETE shops/me/]
    @swagger_auto_schema(method="patch", request_body=ShopUpdateSerializer)
    @action(detail=False, methods=["get", "patch", "delete"])
    def me(self, request, *args, **kwargs):
        shop = self._own_shop()

        if request.method == "GET":
            return Response(_shop_data(shop, request))

        if request.method == "PATCH":
            serializer = self.get_serializer(shop, data=request.data, partial=True)
            serializer.is_valid(raise_exception=True)
            shop = serializer.save()
            return Response(_shop_data(shop, request))

        self._soft_delete(shop)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @transaction.atomic
    def _soft_delete(self, shop):
        shop.name = DELETED_NAME
        shop.activity = DELETED_FIELD
        shop.city = DELETED_FIELD
        shop.description = f"Compte supprimé le {timezone.localdate().strftime('%d/%m/%Y')}"
        shop.save(update_fields=["name", "activity", "city", "description", "updated_at"])

        owner = shop.owner
        owner.is_active = False
        owner.save(update_fields=["is_active"])
        logger.info("Shop %s soft-deleted, user %s deactivated", shop.id, owner.id)

    # [GET shops/me/stats/]
    @action(detail=False, methods=["get"], url_path="me/stats")
    def me_stats(self, request, *args, **kwargs):
        return Response(profile_stats(self._own_shop()))

    # [GET shops/dashboard/]
    @action(detail=False, methods=["get"])
    def dashboard(self, request, *args, **kwargs):
        shop = self._own_shop()
        stats = dashboard_stats(shop)

        recent = stats.pop("recent_orders")
        signed = resolve_signed_urls(recent, ORDER_MEDIA_FIELDS, request=request)
        stats["recent_orders"] = OrderReadSerializer(
            recent, many=True, context={"request": request, "signed_urls": signed}
        ).data
        stats["shop"] = _shop_data(shop, request)
        return Response(stats)


###########################################################
# Public storefront, no authentication

def _public_shop(slug):
    # deactivated owners: the page is gone
    return get_object_or_404(
        Shop.objects.select_related("owner"), slug=slug, owner__is_active=True
    )


class PublicShopView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    @swagger_auto_schema(manual_parameters=[
        openapi.Parameter("filter", openapi.IN_QUERY, type=openapi.TYPE_STRING,
                          enum=["all", "available", "popular", "lowstock"]),
        openapi.Parameter("sort", openapi.IN_QUERY, type=openapi.TYPE_STRING,
                          enum=["newest", "price-low", "price-high", "name", "popularity"]),
        openapi.Parameter("search", openapi.IN_QUERY, type=openapi.TYPE_STRING),
    ])
    def get(self, request, slug):
        shop = _public_shop(slug)

        all_products = list(shop.products.all())
        products = apply_catalog(
            all_products,
            filter_key=request.query_params.get("filter", "all"),
            sort_key=request.query_params.get("sort"),
            query=request.query_params.get("search", ""),
        )
        signed = resolve_signed_urls(products, PRODUCT_MEDIA_FIELDS, request=request)
        shop_data = _shop_data(shop, request, PublicShopSerializer)

        message = shop_intro_message(shop, page_url(f"/{shop.slug}"))
        return Response({
            "shop": shop_data,
            "products": PublicProductSerializer(
                products, many=True, context={"request": request, "signed_urls": signed}
            ).data,
            "summary": catalog_summary(all_products),
            "whatsapp_url": whatsapp_link(shop.owner.phone, message),
            "metadata": shop_metadata(shop, shop_data["photo_url"]),
        })


class PublicProductView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request, slug, product_id):
        shop = _public_shop(slug)
        product = get_object_or_404(Product, pk=product_id, shop=shop)

        signed = resolve_signed_urls([product], PRODUCT_MEDIA_FIELDS, request=request)
        product_data = PublicProductSerializer(
            product, context={"request": request, "signed_urls": signed}
        ).data

        message = product_message(product, shop, page_url(f"/{shop.slug}/product/{product.id}"))
        return Response({
            "shop": _shop_data(shop, request, PublicShopSerializer),
            "product": product_data,
            "whatsapp_url": whatsapp_link(shop.owner.phone, message),
            "metadata": product_metadata(shop, product, product_data["photo_url"]),
        })
