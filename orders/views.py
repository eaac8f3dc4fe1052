import logging

from django.db.models import Q
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.parsers import JSONParser, FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import IsShopOwner
from mediafiles.batch import resolve_signed_urls
from shops.utils.owner import get_owner_shop
from shops.utils.whatsapp import order_reminder_message, whatsapp_link
from .models import Order
from .serializers import (
    MEDIA_FIELDS,
    OrderReadSerializer,
    OrderCreateSerializer,
    OrderUpdateSerializer,
    OrderStatusSerializer,
)
from .stats import order_stats

logger = logging.getLogger("orders")


class OrderViewSet(viewsets.ModelViewSet):
    serializer_class = OrderReadSerializer
    parser_classes = [JSONParser, FormParser, MultiPartParser]
    permission_classes = [IsAuthenticated, IsShopOwner]

    def get_queryset(self):
        shop = get_owner_shop(self.request.user)
        return Order.objects.filter(shop=shop).order_by("-created_at", "-id")

    def get_serializer_class(self):
        if self.action == "create":
            return OrderCreateSerializer
        if self.action in ["update", "partial_update"]:
            return OrderUpdateSerializer
        return OrderReadSerializer

    def get_serializer_context(self):
        context = super().get_serializer_context()
        if self.action in ["create", "update", "partial_update"]:
            context["shop"] = get_owner_shop(self.request.user)
        return context

    def _read(self, orders, many=False):
        items = orders if many else [orders]
        signed = resolve_signed_urls(items, MEDIA_FIELDS, request=self.request)
        serializer = OrderReadSerializer(
            orders, many=many, context={"request": self.request, "signed_urls": signed}
        )
        return serializer.data

    # ?status=pending|paid|delivered|cancelled|all&search=
    def filter_queryset(self, queryset):
        status_param = self.request.query_params.get("status")
        if status_param and status_param != "all":
            queryset = queryset.filter(status=status_param)

        search = (self.request.query_params.get("search") or "").strip()
        if search:
            queryset = queryset.filter(
                Q(client_name__icontains=search)
                | Q(product_name__icontains=search)
                | Q(client_phone__contains=search)
            )
        return queryset

    @swagger_auto_schema(manual_parameters=[
        openapi.Parameter("status", openapi.IN_QUERY, type=openapi.TYPE_STRING),
        openapi.Parameter("search", openapi.IN_QUERY, type=openapi.TYPE_STRING),
    ])
    def list(self, request, *args, **kwargs):
        orders = list(self.filter_queryset(self.get_queryset()))
        return Response(self._read(orders, many=True), status=status.HTTP_200_OK)

    def retrieve(self, request, *args, **kwargs):
        return Response(self._read(self.get_object()))

    def create(self, request, *args, **kwargs):
        shop = get_owner_shop(request.user)
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = serializer.save(shop=shop)
        logger.info("Order %s created in shop %s (%s)", order.id, shop.id, order.status)
        return Response(self._read(order), status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        order = serializer.save()
        return Response(self._read(order))

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        logger.info("Order %s deleted from shop %s", instance.id, instance.shop_id)
        self.perform_destroy(instance)
        return Response(status=status.HTTP_204_NO_CONTENT)

    ############# (order status) ################################
    def _update_status(self, request, new_status):
        order = self.get_object()
        previous = order.status
        serializer = OrderStatusSerializer(order, data={"status": new_status}, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info("Order %s: %s -> %s", order.id, previous, new_status)
        return Response(self._read(order), status=status.HTTP_200_OK)

    # [POST orders/{id}/pay/]
    @action(detail=True, methods=["post"])
    def pay(self, request, pk=None):
        return self._update_status(request, Order.Status.PAID)

    # [POST orders/{id}/deliver/]
    @action(detail=True, methods=["post"])
    def deliver(self, request, pk=None):
        return self._update_status(request, Order.Status.DELIVERED)

    # [POST orders/{id}/cancel/]
    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        return self._update_status(request, Order.Status.CANCELLED)

    # [PATCH orders/{id}/status/] {"status": "..."}
    @swagger_auto_schema(request_body=OrderStatusSerializer)
    @action(detail=True, methods=["patch"], url_path="status")
    def change_status(self, request, pk=None):
        return self._update_status(request, request.data.get("status"))

    ##########################################################

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return Response(order_stats(self.get_queryset()))

    # WhatsApp link reminding the client of an open order
    @action(detail=True, methods=["get"])
    def reminder(self, request, pk=None):
        order = self.get_object()
        if not order.client_phone:
            return Response(
                {"detail": "Aucun numéro de téléphone pour ce client."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        if order.is_terminal:
            return Response(
                {"detail": "Cette commande est terminée, aucun rappel nécessaire."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        message = order_reminder_message(order)
        return Response({
            "whatsapp_url": whatsapp_link(order.client_phone, message),
            "message": message,
        })
