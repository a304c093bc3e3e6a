from rest_framework import serializers
from django.contrib.auth import authenticate
from django.contrib.auth.password_validation import validate_password
from django.core import validators
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
import logging

from .models import CustomUser, Restaurant, Unit
from .utils import (
    generate_unit_slug, normalize_whatsapp, clean_slug, store_unit_logo
)

logger = logging.getLogger(__name__)


BASE_CATEGORIES_BY_NICHE = {
    'pizzaria': ['Destaques', 'Pizzas Salgadas', 'Pizzas Doces', 'Bebidas'],
    'hamburgueria': ['Destaques', 'Entradas', 'Hambúrgueres', 'Sobremesas', 'Bebidas'],
    'restaurante': ['Destaques', 'Entradas', 'Pratos Principais', 'Sobremesas', 'Bebidas'],
    'bar': [
        'Destaques', 'Petiscos', 'Porções para compartilhar', 'Pratos completos',
        'Drinks', 'Vinhos e destilados', 'Bebidas',
    ],
    'lanchonete': ['Destaques', 'Salgados', 'Doces', 'Porções', 'Cafés', 'Bebidas'],
    'outros': ['Destaques', 'Categoria 1', 'Categoria 2'],
}


def base_categories_for(niche):
    return BASE_CATEGORIES_BY_NICHE.get(niche) or BASE_CATEGORIES_BY_NICHE['outros']


class UserSerializer(serializers.ModelSerializer):
    full_name = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = CustomUser
        fields = ['id', 'email', 'first_name', 'last_name', 'full_name', 'date_joined']
        read_only_fields = ['id', 'email', 'date_joined']

    def get_full_name(self, obj):
        return f"{obj.first_name} {obj.last_name}".strip()


class SignupSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, validators=[validate_password])

    def validate_email(self, value):
        value = value.strip().lower()
        if CustomUser.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError('User with this email already exists')
        return value

    def create(self, validated_data):
        user = CustomUser.objects.create_user(
            email=validated_data['email'],
            password=validated_data['password'],
        )
        logger.info(f"New signup {user.email}")
        return user


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        email = attrs.get('email', '').strip().lower()
        password = attrs.get('password')

        user = authenticate(username=email, password=password)
        if not user:
            raise serializers.ValidationError('Invalid email or password')

        if not user.is_active:
            raise serializers.ValidationError('User account is disabled')

        attrs['user'] = user
        return attrs


class UnitSerializer(serializers.ModelSerializer):
    logo_url = serializers.ReadOnlyField()
    public_path = serializers.ReadOnlyField()
    slug = serializers.CharField(max_length=80, required=False, allow_blank=True)

    class Meta:
        model = Unit
        fields = [
            'id', 'name', 'slug', 'address', 'city', 'neighborhood',
            'instagram', 'whatsapp', 'maps_url', 'logo_url', 'public_path',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {
            'name': {'required': False, 'allow_blank': True},
            'address': {'required': False, 'allow_blank': True},
            'city': {'required': False, 'allow_blank': True},
            'neighborhood': {'required': False, 'allow_blank': True},
            'instagram': {'required': False, 'allow_blank': True},
            'whatsapp': {'required': False, 'allow_blank': True},
            'maps_url': {'required': False, 'allow_blank': True},
        }

    def validate_slug(self, value):
        slug = clean_slug(value)
        if not slug:
            raise serializers.ValidationError('Slug não pode ficar vazio.')
        try:
            validators.validate_slug(slug)
        except DjangoValidationError:
            raise serializers.ValidationError('Slug deve conter apenas letras, números, hífens ou sublinhados.')
        queryset = Unit.objects.filter(slug=slug)
        if self.instance:
            queryset = queryset.exclude(id=self.instance.id)
        if queryset.exists():
            raise serializers.ValidationError('Slug já está em uso por outra unidade.')
        return slug

    def validate_whatsapp(self, value):
        return normalize_whatsapp(value)

    def validate(self, attrs):
        for field in ('name', 'address', 'city', 'neighborhood', 'instagram'):
            if field in attrs:
                attrs[field] = (attrs[field] or '').strip()
        return attrs

    def create(self, validated_data):
        restaurant = validated_data['restaurant']
        if not validated_data.get('slug'):
            validated_data['slug'] = generate_unit_slug(
                restaurant.name, validated_data.get('name', '')
            )
        unit = super().create(validated_data)
        logger.info(f"Created unit {unit.id} ({unit.slug}) for restaurant {restaurant.id}")
        return unit

    def update(self, instance, validated_data):
        unit = super().update(instance, validated_data)
        logger.info(f"Updated unit {unit.id} ({unit.slug})")
        return unit


class RestaurantSerializer(serializers.ModelSerializer):
    units = UnitSerializer(many=True, read_only=True)
    unit_limit = serializers.ReadOnlyField()

    class Meta:
        model = Restaurant
        fields = [
            'id', 'name', 'phone', 'plan', 'niche', 'unit_limit',
            'owner_first_name', 'owner_last_name', 'owner_document',
            'owner_phone', 'owner_address', 'units', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'plan', 'unit_limit', 'units', 'created_at', 'updated_at']


class AccountSerializer(serializers.ModelSerializer):
    """Owner details shown on the account page"""
    email = serializers.EmailField(source='owner.email', read_only=True)

    class Meta:
        model = Restaurant
        fields = [
            'id', 'name', 'email', 'owner_first_name', 'owner_last_name',
            'owner_document', 'owner_phone', 'owner_address'
        ]
        read_only_fields = ['id', 'name', 'email']
        extra_kwargs = {
            field: {'required': False, 'allow_blank': True}
            for field in (
                'owner_first_name', 'owner_last_name', 'owner_document',
                'owner_phone', 'owner_address',
            )
        }

    def validate(self, attrs):
        return {key: (value or '').strip() for key, value in attrs.items()}


class TenantSetupSerializer(serializers.Serializer):
    restaurant_name = serializers.CharField(max_length=255)
    phone = serializers.CharField(max_length=30)
    niche = serializers.CharField(max_length=30, required=False, allow_blank=True, default='pizzaria')
    unit_name = serializers.CharField(max_length=255)
    address = serializers.CharField(max_length=255)
    instagram = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def validate_niche(self, value):
        niche = (value or '').strip().lower()
        return niche if niche in BASE_CATEGORIES_BY_NICHE else 'outros'

    def validate(self, attrs):
        owner = self.context['owner']
        if Restaurant.objects.filter(owner=owner).exists():
            raise serializers.ValidationError('Este usuário já possui um restaurante.')
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        from menu.models import Category

        owner = self.context['owner']
        restaurant = Restaurant.objects.create(
            owner=owner,
            name=validated_data['restaurant_name'].strip(),
            phone=validated_data['phone'].strip(),
            niche=validated_data['niche'],
            plan='basic',
        )

        unit_name = validated_data['unit_name'].strip()
        unit = Unit.objects.create(
            restaurant=restaurant,
            name=unit_name,
            address=validated_data['address'].strip(),
            instagram=(validated_data.get('instagram') or '').strip(),
            slug=generate_unit_slug(restaurant.name, unit_name),
        )

        Category.objects.bulk_create([
            Category(unit=unit, name=name, type='normal', order_index=idx)
            for idx, name in enumerate(base_categories_for(restaurant.niche))
        ])

        logger.info(f"Tenant setup: restaurant {restaurant.id}, unit {unit.slug}")
        return {'restaurant': restaurant, 'unit': unit}


class LogoUploadSerializer(serializers.Serializer):
    file = serializers.FileField(required=False)

    def save(self, unit):
        return store_unit_logo(unit, self.validated_data.get('file'))
