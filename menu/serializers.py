from rest_framework import serializers
from django.db import transaction
import logging

from authentication.models import Unit
from .models import Category, Product, ProductVariation
from .utils import parse_order_index, parse_price, format_brl
from .public import display_price

logger = logging.getLogger(__name__)


class OrderIndexField(serializers.Field):
    """Integer position; blank input means 0"""
    def __init__(self, **kwargs):
        kwargs.setdefault('required', False)
        super().__init__(**kwargs)

    def validate_empty_values(self, data):
        if data is None:
            return (True, 0)
        return super().validate_empty_values(data)

    def to_internal_value(self, data):
        return parse_order_index(data)

    def to_representation(self, value):
        return int(value or 0)


class PriceField(serializers.Field):
    """Decimal price that also accepts Brazilian '29,90' input"""
    def to_internal_value(self, data):
        value = parse_price(data)
        if value is None and not self.allow_null:
            raise serializers.ValidationError('Preço obrigatório.')
        return value

    def to_representation(self, value):
        if value is None:
            return None
        return f"{value:.2f}"


def replace_variations(product, variations):
    """
    Delete every variation of the product and insert the given list,
    order_index following list position.
    """
    with transaction.atomic():
        product.variations.all().delete()
        created = ProductVariation.objects.bulk_create([
            ProductVariation(
                product=product,
                name=item['name'],
                price=item['price'],
                order_index=idx,
            )
            for idx, item in enumerate(variations)
        ])
    logger.info(f"Replaced variations of product {product.id}: {len(created)} item(s)")
    return created


# =============== CATEGORY ===============

class CategorySerializer(serializers.ModelSerializer):
    order_index = OrderIndexField()
    products_count = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = ['id', 'name', 'type', 'order_index', 'products_count', 'created_at']
        read_only_fields = ['id', 'created_at', 'products_count']
        extra_kwargs = {
            'type': {'required': False},
            'name': {'error_messages': {'blank': 'Nome da categoria obrigatório.', 'required': 'Nome da categoria obrigatório.'}},
        }

    def get_products_count(self, obj):
        return obj.products.count()

    def validate_type(self, value):
        return (value or '').strip() or 'food'


# =============== VARIATION ===============

class ProductVariationSerializer(serializers.ModelSerializer):
    price = PriceField()

    class Meta:
        model = ProductVariation
        fields = ['id', 'name', 'price', 'order_index']
        read_only_fields = ['id', 'order_index']
        extra_kwargs = {
            'name': {'error_messages': {'blank': 'Nome da variação obrigatório.', 'required': 'Nome da variação obrigatório.'}},
        }


class VariationListSerializer(serializers.Serializer):
    """Body of PUT /products/<id>/variations/"""
    variations = ProductVariationSerializer(many=True)

    def validate(self, attrs):
        product = self.context['product']
        if not product.is_variable and attrs['variations']:
            raise serializers.ValidationError(
                {'variations': 'Somente produtos de preço variável têm variações.'}
            )
        return attrs

    def save(self):
        return replace_variations(self.context['product'], self.validated_data['variations'])


# =============== PRODUCT ===============

class ProductSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source='category.name', read_only=True)
    base_price = PriceField(allow_null=True)
    order_index = OrderIndexField()
    variations = serializers.SerializerMethodField()
    display_price = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            'id', 'unit', 'category', 'category_name', 'name', 'description',
            'price_type', 'base_price', 'display_price', 'thumbnail_url',
            'video_url', 'order_index', 'is_active', 'variations',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_variations(self, obj):
        return ProductVariationSerializer(obj.sorted_variations(), many=True).data

    def get_display_price(self, obj):
        return display_price(obj)


class ProductCreateUpdateSerializer(serializers.ModelSerializer):
    category = serializers.PrimaryKeyRelatedField(queryset=Category.objects.none())
    base_price = PriceField(required=False, allow_null=True)
    order_index = OrderIndexField()
    variations = ProductVariationSerializer(many=True, required=False)

    class Meta:
        model = Product
        fields = [
            'category', 'name', 'description', 'price_type', 'base_price',
            'thumbnail_url', 'video_url', 'order_index', 'is_active', 'variations'
        ]
        extra_kwargs = {
            'name': {'error_messages': {'blank': 'Nome do produto obrigatório.', 'required': 'Nome do produto obrigatório.'}},
            'description': {'required': False, 'allow_blank': True},
            'thumbnail_url': {'required': False, 'allow_blank': True},
            'video_url': {'required': False, 'allow_blank': True},
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        unit = self.get_unit()
        if unit is not None:
            self.fields['category'].queryset = Category.objects.filter(unit=unit)

    def get_unit(self):
        if self.instance is not None and isinstance(self.instance, Product):
            return self.instance.unit
        unit = self.context.get('unit')
        return unit if isinstance(unit, Unit) else None

    def validate_description(self, value):
        return (value or '').strip()

    def validate(self, attrs):
        instance = self.instance
        price_type = attrs.get('price_type', instance.price_type if instance else 'fixed')

        if 'base_price' in attrs:
            base_price = attrs['base_price']
        else:
            base_price = instance.base_price if instance else None

        if price_type == 'fixed':
            if base_price is None:
                raise serializers.ValidationError(
                    {'base_price': 'Preço obrigatório para produto de preço fixo.'}
                )
        else:
            attrs['base_price'] = None

        return attrs

    @transaction.atomic
    def create(self, validated_data):
        variations = validated_data.pop('variations', None)
        product = Product.objects.create(unit=self.get_unit(), **validated_data)

        if product.is_variable and variations:
            replace_variations(product, variations)

        logger.info(f"Created product {product.id} ({product.name}) in unit {product.unit_id}")
        return product

    @transaction.atomic
    def update(self, instance, validated_data):
        variations = validated_data.pop('variations', None)

        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()

        if instance.price_type == 'fixed':
            instance.variations.all().delete()
        elif variations is not None:
            replace_variations(instance, variations)

        logger.info(f"Updated product {instance.id} ({instance.name})")
        return instance

    def to_representation(self, instance):
        return ProductSerializer(instance, context=self.context).data


# =============== PUBLIC MENU ===============

class PublicVariationSerializer(serializers.ModelSerializer):
    price = PriceField()
    display_price = serializers.SerializerMethodField()

    class Meta:
        model = ProductVariation
        fields = ['id', 'name', 'price', 'display_price', 'order_index']

    def get_display_price(self, obj):
        return format_brl(obj.price)


class PublicProductSerializer(serializers.ModelSerializer):
    base_price = PriceField(allow_null=True)
    display_price = serializers.CharField(read_only=True)
    variations = PublicVariationSerializer(source='variation_list', many=True, read_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'category_id', 'name', 'description', 'price_type', 'base_price',
            'display_price', 'thumbnail_url', 'video_url', 'order_index', 'variations'
        ]


class PublicSectionSerializer(serializers.Serializer):
    id = serializers.UUIDField(source='category.id')
    name = serializers.CharField(source='category.name')
    slug = serializers.CharField()
    order_index = serializers.IntegerField(source='category.order_index')
    products = PublicProductSerializer(many=True)


class PublicUnitSerializer(serializers.ModelSerializer):
    logo_url = serializers.ReadOnlyField()
    restaurant_name = serializers.CharField(source='restaurant.name', read_only=True)

    class Meta:
        model = Unit
        fields = [
            'id', 'restaurant_name', 'name', 'slug', 'address', 'city',
            'neighborhood', 'instagram', 'whatsapp', 'maps_url', 'logo_url'
        ]


class PublicMenuSerializer(serializers.Serializer):
    unit = PublicUnitSerializer()
    links = serializers.ListField(child=serializers.DictField())
    featured = PublicSectionSerializer(allow_null=True)
    categories = PublicSectionSerializer(many=True)
