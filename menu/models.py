from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid

from authentication.models import Unit


class Category(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    unit = models.ForeignKey(Unit, on_delete=models.CASCADE, related_name='categories')
    name = models.CharField(max_length=120)
    type = models.CharField(max_length=30, default='food')
    order_index = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return str(self.name)

    class Meta:
        db_table = 'categories'
        ordering = ['order_index', 'created_at']
        verbose_name_plural = "Categories"


class Product(models.Model):
    PRICE_TYPE_CHOICES = [
        ("fixed", "Fixed"),
        ("variable", "Variable"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    unit = models.ForeignKey(Unit, on_delete=models.CASCADE, related_name='products')
    category = models.ForeignKey(Category, on_delete=models.CASCADE, related_name="products")
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')

    price_type = models.CharField(max_length=10, choices=PRICE_TYPE_CHOICES, default='fixed')
    base_price = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(Decimal('0'))]
    )

    thumbnail_url = models.URLField(max_length=500, blank=True)
    video_url = models.URLField(max_length=500, blank=True)

    order_index = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    @property
    def is_variable(self):
        return self.price_type == 'variable'

    def sorted_variations(self):
        return sorted(self.variations.all(), key=lambda v: (v.order_index, v.id))

    class Meta:
        db_table = 'products'
        ordering = ['order_index', 'created_at']


class ProductVariation(models.Model):
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='variations')
    name = models.CharField(max_length=120)
    price = models.DecimalField(
        max_digits=10, decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))]
    )
    order_index = models.IntegerField(default=0)

    def __str__(self):
        return f"{self.product.name} - {self.name}"

    class Meta:
        db_table = 'product_variations'
        ordering = ['order_index', 'id']
