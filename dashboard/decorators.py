from django.shortcuts import redirect
from django.contrib import messages

from authentication.middleware import get_request_restaurant


def restaurant_owner_access(view_func):
    def wrapper_func(request, *args, **kwargs):
        if not request.user.is_authenticated:
            messages.info(request, 'Faça login para acessar esta página')
            return redirect('SignIn')

        restaurant = get_request_restaurant(request)
        if restaurant is None:
            messages.info(request, 'Conclua o cadastro do seu restaurante')
            return redirect('setup')

        request.restaurant = restaurant
        return view_func(request, *args, **kwargs)

    return wrapper_func
