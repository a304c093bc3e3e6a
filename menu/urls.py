from django.urls import path
from . import views


urlpatterns = [
    # Category URLs
    path('units/<uuid:unit_id>/categories/', views.CategoryListCreateView.as_view(), name='category-list-create'),
    path('units/<uuid:unit_id>/categories/<uuid:pk>/', views.CategoryDetailView.as_view(), name='category-detail'),

    # Product URLs
    path('units/<uuid:unit_id>/products/', views.ProductListCreateView.as_view(), name='product-list-create'),
    path('products/<uuid:pk>/', views.ProductDetailView.as_view(), name='product-detail'),
    path('products/<uuid:pk>/variations/', views.replace_product_variations, name='product-variations'),

    # Public menu
    path('public/units/<str:slug>/menu/', views.public_menu, name='public-menu'),
]
