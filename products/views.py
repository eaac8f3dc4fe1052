import logging

from rest_framework import viewsets, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.parsers import JSONParser, FormParser, MultiPartParser
from rest_framework.response import Response

from accounts.permissions import IsShopOwner
from mediafiles.batch import resolve_signed_urls
from shops.utils.owner import get_owner_shop
from .catalog import owner_catalog
from .models import Product
from .serializers import MEDIA_FIELDS, ProductReadSerializer, ProductCreateUpdateSerializer

logger = logging.getLogger("products")


class ProductViewSet(viewsets.ModelViewSet):
    """Owner catalog: every query is scoped to the caller's shop."""
    serializer_class = ProductReadSerializer
    parser_classes = [JSONParser, FormParser, MultiPartParser]
    permission_classes = [IsAuthenticated, IsShopOwner]

    def get_queryset(self):
        shop = get_owner_shop(self.request.user)
        return Product.objects.select_related("shop").filter(shop=shop)

    def get_serializer_class(self):
        if self.action in ["create", "update", "partial_update"]:
            return ProductCreateUpdateSerializer
        return ProductReadSerializer

    def _read(self, products, many=False):
        items = products if many else [products]
        signed = resolve_signed_urls(items, MEDIA_FIELDS, request=self.request)
        serializer = ProductReadSerializer(
            products, many=many, context={"request": self.request, "signed_urls": signed}
        )
        return serializer.data

    # ?low_stock=true&sort=recent|name|price&search=
    def list(self, request, *args, **kwargs):
        products = owner_catalog(
            self.get_queryset(),
            low_stock=request.query_params.get("low_stock") == "true",
            sort_key=request.query_params.get("sort", "recent"),
            query=request.query_params.get("search", ""),
        )
        return Response(self._read(products, many=True), status=status.HTTP_200_OK)

    def retrieve(self, request, *args, **kwargs):
        return Response(self._read(self.get_object()))

    def create(self, request, *args, **kwargs):
        shop = get_owner_shop(request.user)
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product = serializer.save(shop=shop)
        logger.info("Product %s created in shop %s", product.id, shop.id)
        return Response(self._read(product), status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        product = serializer.save()
        return Response(self._read(product))

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        logger.info("Product %s deleted from shop %s", instance.id, instance.shop_id)
        self.perform_destroy(instance)
        return Response(status=status.HTTP_204_NO_CONTENT)
