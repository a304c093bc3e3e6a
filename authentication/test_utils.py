"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from authentication.models import Restaurant, Unit
from menu.models import Category, Product, ProductVariation
from decimal import Decimal
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_lowercase + string.digits, k=length))

    @staticmethod
    def create_user(email=None, password='SenhaForte123!', **extra):
        """Create a test user"""
        if not email:
            email = f'dono_{TestDataFactory.random_string(6)}@test.com'
        return User.objects.create_user(email=email, password=password, **extra)

    @staticmethod
    def create_restaurant(owner=None, name=None, plan='basic', niche='pizzaria'):
        """Create a test restaurant"""
        if not owner:
            owner = TestDataFactory.create_user()
        if not name:
            name = f'Restaurante {TestDataFactory.random_string(6)}'
        return Restaurant.objects.create(
            owner=owner,
            name=name,
            phone='62999999999',
            plan=plan,
            niche=niche
        )

    @staticmethod
    def create_unit(restaurant=None, name='Unidade 1', slug=None, **fields):
        """Create a test unit"""
        if not restaurant:
            restaurant = TestDataFactory.create_restaurant()
        if not slug:
            slug = f'unidade-{TestDataFactory.random_string(8)}'
        return Unit.objects.create(
            restaurant=restaurant,
            name=name,
            slug=slug,
            **fields
        )

    @staticmethod
    def create_category(unit=None, name=None, order_index=0, type='food'):
        """Create a test category"""
        if not unit:
            unit = TestDataFactory.create_unit()
        if not name:
            name = f'Categoria {TestDataFactory.random_string(6)}'
        return Category.objects.create(
            unit=unit,
            name=name,
            type=type,
            order_index=order_index
        )

    @staticmethod
    def create_product(category=None, name=None, price_type='fixed', base_price=None,
                       order_index=0, is_active=True):
        """Create a test product in the category's unit"""
        if not category:
            category = TestDataFactory.create_category()
        if not name:
            name = f'Produto {TestDataFactory.random_string(6)}'
        if base_price is None and price_type == 'fixed':
            base_price = Decimal('29.90')
        return Product.objects.create(
            unit=category.unit,
            category=category,
            name=name,
            price_type=price_type,
            base_price=base_price if price_type == 'fixed' else None,
            order_index=order_index,
            is_active=is_active
        )

    @staticmethod
    def create_variation(product, name=None, price=None, order_index=0):
        """Create a test product variation"""
        if not name:
            name = f'Variação {TestDataFactory.random_string(4)}'
        if price is None:
            price = Decimal('49.90')
        return ProductVariation.objects.create(
            product=product,
            name=name,
            price=price,
            order_index=order_index
        )

    @staticmethod
    def create_tenant(plan='basic'):
        """Create owner, restaurant and one unit; returns (user, restaurant, unit)"""
        user = TestDataFactory.create_user()
        restaurant = TestDataFactory.create_restaurant(owner=user, plan=plan)
        unit = TestDataFactory.create_unit(restaurant=restaurant)
        return user, restaurant, unit


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
