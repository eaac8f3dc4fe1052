from rest_framework import serializers
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password

User = get_user_model()


class SignupSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, required=True, validators=[validate_password])
    password2 = serializers.CharField(write_only=True, required=True)

    class Meta:
        model = User
        fields = ('email', 'password', 'password2', 'name', 'phone')
        extra_kwargs = {
            "phone": {"required": False, "allow_null": True, "allow_blank": True},
        }

    def validate(self, attrs):
        if attrs['password'] != attrs['password2']:
            raise serializers.ValidationError({"password": "Les mots de passe ne correspondent pas."})
        return attrs

    def create(self, validated_data):
        validated_data.pop('password2')
        return User.objects.create_user(
            email=validated_data['email'],
            password=validated_data['password'],
            name=validated_data.get('name', ''),
            phone=validated_data.get('phone') or None,
        )


class UserSerializer(serializers.ModelSerializer):
    has_shop = serializers.BooleanField(read_only=True)
    shop_slug = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ('id', 'email', 'name', 'phone', 'phone_verified_at', 'has_shop', 'shop_slug', 'created_at')
        read_only_fields = ('id', 'email', 'phone_verified_at', 'created_at')

    def get_shop_slug(self, obj):
        return obj.shop.slug if obj.has_shop else None

    def update(self, instance, validated_data):
        # a new number has to be verified again
        if 'phone' in validated_data and validated_data['phone'] != instance.phone:
            instance.phone_verified_at = None
        return super().update(instance, validated_data)


class PasswordChangeSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True, min_length=6)
    confirm_password = serializers.CharField(write_only=True)

    def validate_current_password(self, value):
        user = self.context["request"].user
        if not user.check_password(value):
            raise serializers.ValidationError("Mot de passe actuel incorrect.")
        return value

    def validate(self, attrs):
        if attrs["new_password"] != attrs["confirm_password"]:
            raise serializers.ValidationError({"confirm_password": "Les mots de passe ne correspondent pas."})
        return attrs

    def save(self, **kwargs):
        user = self.context["request"].user
        user.set_password(self.validated_data["new_password"])
        user.save(update_fields=["password"])
        return user


class WhatsAppSendSerializer(serializers.Serializer):
    phone_number = serializers.CharField(max_length=30)


class WhatsAppVerifySerializer(serializers.Serializer):
    phone_number = serializers.CharField(max_length=30)
    code = serializers.CharField(max_length=6)
