from django.urls import path
from django.views.generic import RedirectView
from .import views

urlpatterns = [
    path('', RedirectView.as_view(pattern_name='dashboard', permanent=False), name='index'),
    path('SignIn', views.signin, name='SignIn'),
    path('SignUp', views.signup, name='SignUp'),
    path('SignOut', views.SignOut, name='SignOut'),
    path('setup/', views.setup, name='setup'),

    path('dashboard/', views.dashboard, name='dashboard'),
    path('dashboard/account/', views.account, name='account_page'),

    path('dashboard/units/add/', views.add_unit, name='add_unit'),
    path('dashboard/units/<uuid:unit_id>/', views.unit_page, name='unit_page'),
    path('dashboard/units/<uuid:unit_id>/logo/', views.unit_logo, name='unit_logo'),

    path('dashboard/units/<uuid:unit_id>/categories/add/', views.add_category, name='add_category'),
    path('dashboard/categories/<uuid:pk>/edit/', views.edit_category, name='edit_category'),
    path('dashboard/categories/<uuid:pk>/delete/', views.delete_category, name='delete_category'),

    path('dashboard/units/<uuid:unit_id>/products/add/', views.add_product, name='add_product'),
    path('dashboard/products/<uuid:pk>/edit/', views.edit_product, name='edit_product'),
    path('dashboard/products/<uuid:pk>/delete/', views.delete_product, name='delete_product'),
]
