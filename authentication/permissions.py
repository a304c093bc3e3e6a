from rest_framework import permissions

from .models import Restaurant


class IsRestaurantOwner(permissions.BasePermission):
    """
    Only allow users that own a restaurant; stores it on request.restaurant
    """
    message = 'Restaurante não encontrado para este usuário.'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False

        restaurant = getattr(request, 'restaurant', None)
        if restaurant is None:
            restaurant = Restaurant.objects.filter(owner=request.user).first()
        if restaurant is None:
            return False

        request.restaurant = restaurant
        return True

    def has_object_permission(self, request, view, obj):
        return owning_restaurant(obj) == request.restaurant.id


def owning_restaurant(obj):
    """Walk unit/category/product/variation up to the restaurant id"""
    if hasattr(obj, 'restaurant_id'):
        return obj.restaurant_id
    if hasattr(obj, 'unit'):
        return obj.unit.restaurant_id
    if hasattr(obj, 'product'):
        return obj.product.unit.restaurant_id
    return None
