# =============== MIDDLEWARE FOR TENANT CONTEXT ===============
from django.utils.functional import SimpleLazyObject

from .models import Restaurant


def get_request_restaurant(request):
    user = getattr(request, 'user', None)
    if user is None or not user.is_authenticated:
        return None
    return Restaurant.objects.filter(owner=user).first()


class TenantContextMiddleware:
    """
    Middleware to set the session user's restaurant on request.tenant.
    JWT requests are authenticated later by DRF, so API views resolve
    the restaurant through IsRestaurantOwner instead.
    """
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.tenant = SimpleLazyObject(lambda: get_request_restaurant(request))

        response = self.get_response(request)
        return response
