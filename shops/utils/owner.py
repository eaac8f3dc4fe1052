from rest_framework import serializers

from shops.models import Shop


# Owner's shop, or a 400 asking to finish onboarding first
def get_owner_shop(user):
    try:
        return Shop.objects.get(owner=user)
    except Shop.DoesNotExist:
        raise serializers.ValidationError({
            "shop": "Aucune boutique n'est associée à ce compte. Configurez d'abord votre boutique."
        })
