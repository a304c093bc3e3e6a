from rest_framework import generics, status, filters
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from django.shortcuts import get_object_or_404
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, OpenApiExample
import logging

from authentication.models import Unit
from authentication.permissions import IsRestaurantOwner
from .models import Category, Product
from .serializers import (
    CategorySerializer, ProductSerializer, ProductCreateUpdateSerializer,
    VariationListSerializer, ProductVariationSerializer, PublicMenuSerializer
)
from .public import get_public_unit, build_public_menu

logger = logging.getLogger(__name__)


class UnitContextMixin:
    """Resolve the unit from the URL, scoped to the owner's restaurant"""
    permission_classes = [IsRestaurantOwner]

    def get_unit(self):
        if not hasattr(self, '_unit'):
            self._unit = get_object_or_404(
                Unit,
                id=self.kwargs['unit_id'],
                restaurant=self.request.restaurant,
            )
        return self._unit

    def get_queryset(self):
        if getattr(self, 'swagger_fake_view', False):
            return super().get_queryset().none()
        return super().get_queryset().filter(unit=self.get_unit())

    def perform_create(self, serializer):
        serializer.save(unit=self.get_unit())

    def get_serializer_context(self):
        context = super().get_serializer_context()
        if getattr(self.request, 'restaurant', None) is not None:
            context['unit'] = self.get_unit()
        return context


# Category Views
class CategoryListCreateView(UnitContextMixin, generics.ListCreateAPIView):
    """
    get: List the unit's categories by order_index
    post: Create a category
    """
    queryset = Category.objects.all()
    serializer_class = CategorySerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['type']
    search_fields = ['name']
    ordering_fields = ['order_index', 'name', 'created_at']
    ordering = ['order_index', 'created_at']

    def perform_create(self, serializer):
        super().perform_create(serializer)
        logger.info(f"Created category {serializer.instance.id} ({serializer.instance.name}) in unit {self.get_unit().id}")


class CategoryDetailView(UnitContextMixin, generics.RetrieveUpdateDestroyAPIView):
    """
    get: Category details
    put/patch: Update category
    delete: Delete category and its products
    """
    queryset = Category.objects.all()
    serializer_class = CategorySerializer

    def perform_update(self, serializer):
        serializer.save()
        logger.info(f"Updated category {serializer.instance.id}")

    def perform_destroy(self, instance):
        logger.info(f"Deleting category {instance.id} ({instance.name}) from unit {instance.unit_id}")
        instance.delete()


# Product Views
class ProductListCreateView(UnitContextMixin, generics.ListCreateAPIView):
    """
    get: List the unit's products
    post: Create a product (with variations when price_type is variable)
    """
    queryset = Product.objects.select_related('category').prefetch_related('variations')
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['category', 'is_active', 'price_type']
    search_fields = ['name', 'description']
    ordering_fields = ['order_index', 'name', 'base_price', 'created_at']
    ordering = ['order_index', 'created_at']

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return ProductCreateUpdateSerializer
        return ProductSerializer

    @extend_schema(
        summary="Create Product",
        request=ProductCreateUpdateSerializer,
        responses={201: ProductSerializer},
        examples=[
            OpenApiExample(
                'Fixed price',
                value={"category": "<category-uuid>", "name": "Coca-Cola lata", "price_type": "fixed", "base_price": "6,50"}
            ),
            OpenApiExample(
                'Variable price',
                value={
                    "category": "<category-uuid>",
                    "name": "Pizza Margherita",
                    "price_type": "variable",
                    "variations": [
                        {"name": "Média", "price": "49,90"},
                        {"name": "Grande", "price": "59,90"}
                    ]
                }
            )
        ]
    )
    def post(self, request, *args, **kwargs):
        return super().post(request, *args, **kwargs)

    def perform_create(self, serializer):
        serializer.save()


class ProductDetailView(generics.RetrieveUpdateDestroyAPIView):
    """
    get: Product details with variations
    put/patch: Update product; a 'variations' list replaces the current ones
    delete: Delete product
    """
    permission_classes = [IsRestaurantOwner]

    def get_queryset(self):
        if getattr(self, 'swagger_fake_view', False):
            return Product.objects.none()
        return (
            Product.objects
            .filter(unit__restaurant=self.request.restaurant)
            .select_related('category', 'unit')
            .prefetch_related('variations')
        )

    def get_serializer_class(self):
        if self.request.method in ['PUT', 'PATCH']:
            return ProductCreateUpdateSerializer
        return ProductSerializer

    def perform_destroy(self, instance):
        logger.info(f"Deleting product {instance.id} ({instance.name})")
        instance.delete()


@extend_schema(
    summary="Replace product variations",
    description="Deletes every variation of the product and inserts the given list in order.",
    request=VariationListSerializer,
    responses={200: ProductVariationSerializer(many=True)},
)
@api_view(['PUT'])
@permission_classes([IsRestaurantOwner])
def replace_product_variations(request, pk):
    product = get_object_or_404(Product, id=pk, unit__restaurant=request.restaurant)

    serializer = VariationListSerializer(data=request.data, context={'product': product})
    serializer.is_valid(raise_exception=True)
    serializer.save()

    return Response(
        ProductVariationSerializer(product.sorted_variations(), many=True).data,
        status=status.HTTP_200_OK,
    )


# Public menu
@extend_schema(
    summary="Public menu",
    description="Menu of a unit by its public slug: featured section, categories, products and footer links.",
    responses={200: PublicMenuSerializer, 404: {'description': 'Unidade não encontrada'}},
)
@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def public_menu(request, slug):
    unit = get_public_unit(slug)
    menu = build_public_menu(unit)
    return Response(PublicMenuSerializer(menu, context={'request': request}).data)
