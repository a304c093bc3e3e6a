from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from . import views

urlpatterns = [
    # =============== AUTHENTICATION ===============
    path('auth/signup/', views.signup, name='signup'),
    path('auth/login/', views.login, name='token_obtain_pair'),
    path('auth/refresh/', TokenRefreshView.as_view(), name='token_refresh'),

    # =============== TENANT ===============
    path('setup/', views.setup_tenant, name='setup_tenant'),
    path('tenant/', views.tenant_context, name='tenant_context'),
    path('account/', views.AccountView.as_view(), name='account'),

    # =============== UNITS ===============
    path('units/', views.UnitListCreateView.as_view(), name='unit_list_create'),
    path('units/<uuid:unit_id>/', views.UnitDetailView.as_view(), name='unit_detail'),
    path('units/<uuid:unit_id>/logo/', views.upload_unit_logo, name='unit_logo_upload'),

    # =============== SYSTEM ===============
    path('health/', views.health_check, name='health_check'),
]
