from rest_framework.permissions import BasePermission


# Owner of the shop a row belongs to
class IsShopOwner(BasePermission):
    message = "Vous n'avez pas accès à cette boutique."

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        shop = obj if hasattr(obj, "owner_id") else getattr(obj, "shop", None)
        return shop is not None and shop.owner_id == request.user.id
