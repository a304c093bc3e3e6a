from rest_framework import generics, status, permissions
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.response import Response
from rest_framework.exceptions import ValidationError
from rest_framework_simplejwt.tokens import RefreshToken
from django.db import connection
from django.utils import timezone
from drf_spectacular.utils import extend_schema, OpenApiExample
import logging

from .models import Unit
from .serializers import (
    UserSerializer, SignupSerializer, LoginSerializer, UnitSerializer,
    RestaurantSerializer, AccountSerializer, TenantSetupSerializer,
    LogoUploadSerializer
)
from .permissions import IsRestaurantOwner
from .utils import get_tenant_context, ensure_restaurant

logger = logging.getLogger(__name__)


def token_payload(user):
    """JWT pair plus the tenant context the dashboard boots with"""
    refresh = RefreshToken.for_user(user)
    payload = {
        'refresh': str(refresh),
        'access': str(refresh.access_token),
        'user': UserSerializer(user).data,
        'restaurant': None,
        'units': [],
    }
    restaurant = getattr(user, 'restaurant', None)
    if restaurant is not None:
        refresh['restaurant_id'] = str(restaurant.id)
        payload['refresh'] = str(refresh)
        payload['access'] = str(refresh.access_token)
        payload['restaurant'] = RestaurantSerializer(restaurant).data
        payload['units'] = payload['restaurant']['units']
    return payload


# =============== AUTHENTICATION VIEWS ===============

@extend_schema(
    summary="Sign up",
    description="Create an owner account with email and password. Returns JWT tokens.",
    request=SignupSerializer,
    responses={201: {'type': 'object'}, 400: {'description': 'Email taken or weak password'}},
    examples=[
        OpenApiExample('Signup', value={"email": "dono@pizzaria.com", "password": "SenhaForte123!"})
    ]
)
@api_view(['POST'])
@permission_classes([permissions.AllowAny])
def signup(request):
    serializer = SignupSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = serializer.save()
    return Response(token_payload(user), status=status.HTTP_201_CREATED)


@extend_schema(
    summary="Login",
    description="Authenticate with email and password. Returns JWT tokens with tenant context.",
    request=LoginSerializer,
    responses={200: {'type': 'object'}, 400: {'description': 'Invalid credentials'}},
)
@api_view(['POST'])
@permission_classes([permissions.AllowAny])
def login(request):
    serializer = LoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = serializer.validated_data['user']

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])
    logger.info(f"Login {user.email}")

    return Response(token_payload(user), status=status.HTTP_200_OK)


# =============== TENANT VIEWS ===============

@extend_schema(
    summary="Tenant setup",
    description="""
    Create the owner's restaurant, its first unit (with an automatic public slug)
    and the base categories for the chosen niche.
    """,
    request=TenantSetupSerializer,
    responses={201: {'type': 'object'}, 400: {'description': 'Missing fields or restaurant already exists'}},
    examples=[
        OpenApiExample(
            'Pizzaria setup',
            value={
                "restaurant_name": "Pedacci",
                "phone": "62999999999",
                "niche": "pizzaria",
                "unit_name": "Setor Oeste",
                "address": "Rua X, Setor Oeste, Goiânia",
                "instagram": "@pedacci"
            }
        )
    ]
)
@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def setup_tenant(request):
    serializer = TenantSetupSerializer(data=request.data, context={'owner': request.user})
    serializer.is_valid(raise_exception=True)
    result = serializer.save()
    unit = result['unit']

    return Response({
        'restaurant': RestaurantSerializer(result['restaurant']).data,
        'unit': UnitSerializer(unit).data,
        'slug': unit.slug,
        'unit_url': unit.public_path,
    }, status=status.HTTP_201_CREATED)


@extend_schema(
    summary="Tenant context",
    description="The authenticated owner, their restaurant and units (oldest first).",
)
@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def tenant_context(request):
    user, restaurant, units = get_tenant_context(request.user)
    return Response({
        'user': UserSerializer(user).data,
        'restaurant': RestaurantSerializer(restaurant).data,
        'units': UnitSerializer(units, many=True).data,
    })


class AccountView(generics.RetrieveUpdateAPIView):
    """
    Owner details of the current restaurant.
    A base restaurant is created on first access when the owner has none.
    """
    serializer_class = AccountSerializer
    permission_classes = [permissions.IsAuthenticated]
    http_method_names = ['get', 'put', 'patch', 'head', 'options']

    def get_object(self):
        return ensure_restaurant(self.request.user)

    def perform_update(self, serializer):
        serializer.save()
        logger.info(f"Updated account details for restaurant {serializer.instance.id}")


# =============== UNIT VIEWS ===============

class UnitListCreateView(generics.ListCreateAPIView):
    """
    get: List the current restaurant's units, oldest first
    post: Create a unit (limited by plan)
    """
    serializer_class = UnitSerializer
    permission_classes = [IsRestaurantOwner]

    def get_queryset(self):
        if getattr(self, 'swagger_fake_view', False):
            return Unit.objects.none()
        return Unit.objects.filter(restaurant=self.request.restaurant).order_by('created_at')

    @extend_schema(
        summary="Create Unit",
        description="BASIC plan allows a single unit; PRO is unlimited.",
        request=UnitSerializer,
        responses={201: UnitSerializer, 400: {'description': 'Plan limit reached or invalid data'}},
    )
    def post(self, request, *args, **kwargs):
        return super().post(request, *args, **kwargs)

    def perform_create(self, serializer):
        restaurant = self.request.restaurant
        if not restaurant.can_add_unit():
            raise ValidationError(
                f'Seu plano {restaurant.plan.upper()} permite apenas {restaurant.unit_limit} unidade(s). '
                'Faça upgrade para PRO para adicionar mais unidades.'
            )
        serializer.save(restaurant=restaurant)


class UnitDetailView(generics.RetrieveUpdateAPIView):
    """
    get: Unit details
    put/patch: Update unit (slug must stay non-empty and unique)
    """
    serializer_class = UnitSerializer
    permission_classes = [IsRestaurantOwner]
    lookup_field = 'id'
    lookup_url_kwarg = 'unit_id'

    def get_queryset(self):
        if getattr(self, 'swagger_fake_view', False):
            return Unit.objects.none()
        return Unit.objects.filter(restaurant=self.request.restaurant)


@extend_schema(
    summary="Upload unit logo",
    description="Image files only, up to 3MB. Replaces the current logo.",
    request={'multipart/form-data': {'type': 'object', 'properties': {'file': {'type': 'string', 'format': 'binary'}}}},
    responses={200: {'type': 'object'}, 400: {'type': 'object'}},
)
@api_view(['POST'])
@permission_classes([IsRestaurantOwner])
@parser_classes([MultiPartParser, FormParser])
def upload_unit_logo(request, unit_id):
    unit = generics.get_object_or_404(Unit, id=unit_id, restaurant=request.restaurant)

    serializer = LogoUploadSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    result = serializer.save(unit)

    if not result['ok']:
        return Response(result, status=status.HTTP_400_BAD_REQUEST)
    return Response(result, status=status.HTTP_200_OK)


# =============== SYSTEM ===============

@extend_schema(
    summary="System Health Check",
    description="Check system health and database connectivity",
)
@api_view(['GET'])
@permission_classes([permissions.AllowAny])
def health_check(request):
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return Response({
            'status': 'unhealthy',
            'timestamp': timezone.now().isoformat(),
            'database': 'disconnected',
        }, status=status.HTTP_503_SERVICE_UNAVAILABLE)

    return Response({
        'status': 'healthy',
        'timestamp': timezone.now().isoformat(),
        'database': 'connected',
        'version': '1.0.0'
    })
