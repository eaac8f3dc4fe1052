from rest_framework import serializers

from mediafiles.validators import validate_image_upload, validate_video_upload
from .models import Product

MEDIA_FIELDS = ["photo", "video"]


class SignedMediaMixin:
    """
    Adds ``<field>_url`` entries from ``context["signed_urls"]``, a map built
    by ``mediafiles.batch.resolve_signed_urls`` for the whole page at once.
    """
    media_fields = []

    def to_representation(self, instance):
        data = super().to_representation(instance)
        signed = self.context.get("signed_urls", {}).get(instance.pk, {})
        for field in self.media_fields:
            data.pop(field, None)
            data[f"{field}_url"] = signed.get(f"{field}_url")
        return data


class ProductReadSerializer(SignedMediaMixin, serializers.ModelSerializer):
    media_fields = MEDIA_FIELDS
    is_available = serializers.BooleanField(read_only=True)
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id", "shop", "name", "price", "stock",
            "photo", "video", "description", "category",
            "is_available", "is_low_stock",
            "created_at", "updated_at",
        ]
        read_only_fields = fields


class PublicProductSerializer(SignedMediaMixin, serializers.ModelSerializer):
    media_fields = MEDIA_FIELDS
    is_available = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id", "name", "price", "stock", "photo", "video",
            "description", "category", "is_available", "created_at",
        ]
        read_only_fields = fields


class ProductCreateUpdateSerializer(serializers.ModelSerializer):
    photo = serializers.ImageField(required=False, allow_null=True, validators=[validate_image_upload])
    video = serializers.FileField(required=False, allow_null=True, validators=[validate_video_upload])

    class Meta:
        model = Product
        fields = [
            "name",
            "price",
            "stock",
            "photo",
            "video",
            "description",
            "category",
        ]
        extra_kwargs = {
            "description": {"required": False, "allow_blank": True},
            "category": {"required": False, "allow_blank": True},
            "stock": {"required": False, "allow_null": True},
        }

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Le nom du produit est obligatoire.")
        return value

    def validate_price(self, value):
        if value <= 0:
            raise serializers.ValidationError("Le prix doit être supérieur à 0.")
        return value

    def validate(self, attrs):
        # an explicit null clears the stored file
        for field in MEDIA_FIELDS:
            if field in attrs and attrs[field] is None:
                attrs[field] = ""
        return attrs
