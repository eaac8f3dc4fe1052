from django.db import IntegrityError, transaction
from rest_framework import serializers

from mediafiles.validators import validate_image_upload
from products.serializers import SignedMediaMixin
from .models import Shop
from .utils.slug import unique_slug, is_valid_slug

SLUG_TAKEN = "Ce lien est déjà utilisé par une autre boutique."


class ShopSerializer(SignedMediaMixin, serializers.ModelSerializer):
    media_fields = ["photo"]
    owner = serializers.SerializerMethodField()

    def get_owner(self, obj):
        user = obj.owner
        return {
            'id': user.id,
            'email': user.email,
            'name': user.name,
            'phone': getattr(user, 'phone', ''),
        }

    class Meta:
        model = Shop
        fields = [
            "id", "owner", "name", "activity", "city", "slug", "theme",
            "photo", "description", "created_at", "updated_at",
        ]
        read_only_fields = fields


class PublicShopSerializer(SignedMediaMixin, serializers.ModelSerializer):
    media_fields = ["photo"]

    class Meta:
        model = Shop
        fields = ["id", "name", "activity", "city", "slug", "theme", "photo", "description"]
        read_only_fields = fields


def _required_text(value, label):
    value = (value or "").strip()
    if not value:
        raise serializers.ValidationError(f"{label} est obligatoire.")
    return value


class OnboardingSerializer(serializers.ModelSerializer):
    photo = serializers.ImageField(required=False, allow_null=True, validators=[validate_image_upload])

    class Meta:
        model = Shop
        fields = ["name", "activity", "city", "description", "theme", "photo"]
        extra_kwargs = {
            "description": {"required": False, "allow_blank": True},
            "theme": {"required": False},
        }

    def validate_name(self, value):
        return _required_text(value, "Le nom de la boutique")

    def validate_activity(self, value):
        return _required_text(value, "L'activité")

    def validate_city(self, value):
        return _required_text(value, "La ville")

    def create(self, validated_data):
        if validated_data.get("photo") is None:
            validated_data.pop("photo", None)
        validated_data["slug"] = unique_slug(
            validated_data["name"],
            exists=lambda s: Shop.objects.filter(slug=s).exists(),
        )
        try:
            with transaction.atomic():
                return Shop.objects.create(**validated_data)
        except IntegrityError:
            # slug taken between the check and the insert
            raise serializers.ValidationError({"slug": SLUG_TAKEN})


class ShopUpdateSerializer(OnboardingSerializer):
    """Settings page: profile fields, theme, slug and photo."""
    slug = serializers.CharField(max_length=50, required=False)

    class Meta(OnboardingSerializer.Meta):
        fields = ["name", "activity", "city", "description", "theme", "photo", "slug"]

    def validate_slug(self, value):
        value = value.strip().lower()
        if not is_valid_slug(value):
            raise serializers.ValidationError(
                "Le lien ne peut contenir que des lettres minuscules, des chiffres et des tirets."
            )
        taken = Shop.objects.filter(slug=value).exclude(pk=self.instance.pk if self.instance else None)
        if taken.exists():
            raise serializers.ValidationError(SLUG_TAKEN)
        return value

    def validate(self, attrs):
        # explicit null removes the photo
        if "photo" in attrs and attrs["photo"] is None:
            attrs["photo"] = ""
        return attrs

    def update(self, instance, validated_data):
        try:
            with transaction.atomic():
                return super().update(instance, validated_data)
        except IntegrityError:
            raise serializers.ValidationError({"slug": SLUG_TAKEN})
