from rest_framework import serializers

from mediafiles.validators import validate_image_upload
from products.models import Product
from products.serializers import SignedMediaMixin
from .models import Order

MEDIA_FIELDS = ["payment_proof"]


class OrderReadSerializer(SignedMediaMixin, serializers.ModelSerializer):
    media_fields = MEDIA_FIELDS
    status_label = serializers.CharField(source="get_status_display", read_only=True)
    allowed_transitions = serializers.ListField(child=serializers.CharField(), read_only=True)

    class Meta:
        model = Order
        fields = [
            "id", "shop", "client_name", "client_phone",
            "product", "product_name", "quantity", "unit_price", "total_amount",
            "status", "status_label", "allowed_transitions",
            "payment_proof", "notes", "created_at", "updated_at",
        ]
        read_only_fields = fields


###########################################################
class OrderCreateSerializer(serializers.ModelSerializer):
    product = serializers.PrimaryKeyRelatedField(
        queryset=Product.objects.all(), required=False, allow_null=True
    )
    product_name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    unit_price = serializers.IntegerField(required=False)
    quantity = serializers.IntegerField(required=False, default=1)
    payment_proof = serializers.ImageField(required=False, allow_null=True, validators=[validate_image_upload])

    class Meta:
        model = Order
        fields = [
            "client_name", "client_phone", "product", "product_name",
            "quantity", "unit_price", "status", "payment_proof", "notes",
        ]
        extra_kwargs = {
            "client_phone": {"required": False, "allow_null": True, "allow_blank": True},
            "notes": {"required": False, "allow_null": True, "allow_blank": True},
            "status": {"required": False},
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # products are limited to the caller's shop
        shop = self.context.get("shop")
        if shop is not None:
            self.fields["product"].queryset = Product.objects.filter(shop=shop)

    def validate_client_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Le nom du client est obligatoire.")
        return value

    def validate_quantity(self, value):
        if value < 1:
            raise serializers.ValidationError("La quantité doit être au moins 1.")
        return value

    def validate_unit_price(self, value):
        if value <= 0:
            raise serializers.ValidationError("Le prix unitaire doit être supérieur à 0.")
        return value

    def validate(self, attrs):
        product = attrs.get("product")
        current = self.instance

        # name and price default to the linked product
        if not (attrs.get("product_name") or "").strip():
            if product is not None:
                attrs["product_name"] = product.name
            elif current is None or "product_name" in attrs:
                raise serializers.ValidationError({"product_name": "Le nom du produit est obligatoire."})
        else:
            attrs["product_name"] = attrs["product_name"].strip()

        if attrs.get("unit_price") is None:
            if product is not None:
                attrs["unit_price"] = product.price
            elif current is None:
                raise serializers.ValidationError({"unit_price": "Le prix unitaire est obligatoire."})
            else:
                attrs.pop("unit_price", None)

        if "payment_proof" in attrs and attrs["payment_proof"] is None:
            attrs["payment_proof"] = ""
        return attrs


class OrderUpdateSerializer(OrderCreateSerializer):
    """Edit form: status only moves through the transition endpoints."""

    class Meta(OrderCreateSerializer.Meta):
        read_only_fields = ["status"]
        extra_kwargs = {
            "client_name": {"required": False},
            "client_phone": {"required": False, "allow_null": True, "allow_blank": True},
            "notes": {"required": False, "allow_null": True, "allow_blank": True},
        }

    quantity = serializers.IntegerField(required=False)


###########################################################
class OrderStatusSerializer(serializers.ModelSerializer):
    class Meta:
        model = Order
        fields = ["status"]

    def validate(self, attrs):
        order = self.instance
        new_status = attrs.get("status")

        if order.is_terminal:
            raise serializers.ValidationError(
                f"La commande est déjà {order.get_status_display().lower()}, son statut ne peut plus changer."
            )

        if not Order.can_transition(order.status, new_status):
            raise serializers.ValidationError(
                f"Transition {order.status} → {new_status} non autorisée."
            )
        return attrs

    def update(self, instance, validated_data):
        instance.status = validated_data["status"]
        instance.save(update_fields=["status"])
        return instance
