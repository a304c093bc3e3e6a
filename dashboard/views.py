from django.shortcuts import render, redirect, get_object_or_404
from django.contrib.auth import authenticate, logout, login, get_user_model
from django.contrib.auth.decorators import login_required
from django.contrib import messages
from django.db.models import Prefetch
from django.http import Http404
from django.urls import reverse
from django.views.decorators.http import require_POST
from rest_framework.exceptions import ValidationError as DRFValidationError
import logging

from .decorators import restaurant_owner_access
from .forms import (
    SignInForm, SignUpForm, SetupForm, CategoryForm, ProductForm,
    UnitForm, NewUnitForm, AccountForm, LogoForm, drf_message
)
from authentication.models import Restaurant, Unit
from authentication.serializers import TenantSetupSerializer
from authentication.utils import generate_unit_slug, store_unit_logo, ensure_restaurant
from fymenu.conf import get_setting
from menu.models import Category, Product, ProductVariation
from menu.public import UnitNotFound, get_public_unit, build_public_menu
from menu.utils import format_brl, variation_lines

logger = logging.getLogger(__name__)

User = get_user_model()


def form_error_text(form):
    """Flatten form errors into a single flash message"""
    parts = []
    for field, errors in form.errors.items():
        label = form.fields[field].label if field in form.fields else ''
        text = ' '.join(str(e) for e in errors)
        parts.append(f"{label}: {text}" if label else text)
    return ' | '.join(parts)


def back_to_dashboard(unit_id=None):
    url = reverse('dashboard')
    if unit_id:
        url = f"{url}?unit={unit_id}"
    return redirect(url)


def public_url(request, unit):
    base = get_setting('PUBLIC_BASE_URL')
    if base:
        return f"{base.rstrip('/')}{unit.public_path}"
    return request.build_absolute_uri(unit.public_path)


# =============== AUTH ===============

def signin(request):
    if request.user.is_authenticated:
        return redirect('dashboard')

    form = SignInForm(request.POST or None)
    if request.method == "POST":
        if form.is_valid():
            user = authenticate(
                request,
                username=form.cleaned_data['email'].strip().lower(),
                password=form.cleaned_data['password'],
            )
            if user is not None:
                login(request, user)
                return redirect('dashboard')
        messages.error(request, 'Email ou senha incorretos')
        return redirect('SignIn')
    return render(request, "login.html", {"form": form})


def signup(request):
    form = SignUpForm(request.POST or None)
    if request.method == "POST":
        if form.is_valid():
            user = User.objects.create_user(
                email=form.cleaned_data['email'],
                password=form.cleaned_data['password'],
            )
            login(request, user, backend='django.contrib.auth.backends.ModelBackend')
            logger.info(f"Signed up {user.email}")
            messages.success(request, 'Conta criada. Agora cadastre seu restaurante.')
            return redirect('setup')
        messages.error(request, form_error_text(form))
    return render(request, "signup.html", {"form": form})


def SignOut(request):
    logout(request)
    return redirect("SignIn")


@login_required
def setup(request):
    if Restaurant.objects.filter(owner=request.user).exists():
        return redirect('dashboard')

    form = SetupForm(request.POST or None)
    if request.method == "POST":
        if not form.is_valid():
            messages.error(request, form_error_text(form))
            return render(request, "setup.html", {"form": form})

        serializer = TenantSetupSerializer(data=form.cleaned_data, context={'owner': request.user})
        try:
            serializer.is_valid(raise_exception=True)
            result = serializer.save()
        except DRFValidationError as exc:
            messages.error(request, drf_message(exc))
            return render(request, "setup.html", {"form": form})

        unit = result['unit']
        messages.success(request, f"Restaurante criado! Seu cardápio: {public_url(request, unit)}")
        return back_to_dashboard(unit.id)

    return render(request, "setup.html", {"form": form})


# =============== DASHBOARD ===============

@restaurant_owner_access
def dashboard(request):
    restaurant = request.restaurant
    units = list(restaurant.units.order_by('created_at'))

    selected = None
    requested = request.GET.get('unit')
    if requested:
        selected = next((u for u in units if str(u.id) == requested), None)
    if selected is None and units:
        selected = units[0]

    categories = []
    if selected is not None:
        categories = list(
            Category.objects.filter(unit=selected)
            .order_by('order_index', 'created_at')
            .prefetch_related(Prefetch(
                'products',
                queryset=Product.objects.order_by('order_index', 'created_at').prefetch_related(
                    Prefetch('variations', queryset=ProductVariation.objects.order_by('order_index', 'id'))
                ),
            ))
        )
        for category in categories:
            for product in category.products.all():
                product.variation_text = variation_lines(product)
                product.price_text = '' if product.base_price is None else str(product.base_price).replace('.', ',')
                product.price_label = format_brl(product.base_price)

    context = {
        'restaurant': restaurant,
        'units': units,
        'unit': selected,
        'categories': categories,
        'public_url': public_url(request, selected) if selected else '',
        'can_add_unit': restaurant.can_add_unit(),
        'unit_limit': restaurant.unit_limit,
        'category_form': CategoryForm(),
        'product_form': ProductForm(unit=selected) if selected else None,
        'new_unit_form': NewUnitForm(),
        'price_type_choices': Product.PRICE_TYPE_CHOICES,
    }
    return render(request, 'dashboard.html', context)


# =============== UNITS ===============

@restaurant_owner_access
@require_POST
def add_unit(request):
    restaurant = request.restaurant
    if not restaurant.can_add_unit():
        messages.error(
            request,
            f'Seu plano {restaurant.plan.upper()} permite apenas {restaurant.unit_limit} unidade(s). '
            'Faça upgrade para PRO para adicionar mais unidades.'
        )
        return back_to_dashboard()

    form = NewUnitForm(request.POST)
    if not form.is_valid():
        messages.error(request, form_error_text(form))
        return back_to_dashboard()

    unit = form.save(commit=False)
    unit.restaurant = restaurant
    try:
        unit.slug = generate_unit_slug(restaurant.name, unit.name)
    except DRFValidationError as exc:
        messages.error(request, drf_message(exc))
        return back_to_dashboard()
    unit.save()

    logger.info(f"Created unit {unit.id} ({unit.slug}) for restaurant {restaurant.id}")
    messages.success(request, 'Unidade criada')
    return back_to_dashboard(unit.id)


@restaurant_owner_access
def unit_page(request, unit_id):
    unit = get_object_or_404(Unit, id=unit_id, restaurant=request.restaurant)

    if request.method == "POST":
        form = UnitForm(request.POST, instance=unit)
        if form.is_valid():
            form.save()
            logger.info(f"Updated unit {unit.id}")
            messages.success(request, 'Unidade atualizada')
        else:
            messages.error(request, form_error_text(form))
        return redirect('unit_page', unit_id=unit.id)

    context = {
        'restaurant': request.restaurant,
        'unit': unit,
        'form': UnitForm(instance=unit),
        'logo_form': LogoForm(),
        'public_url': public_url(request, unit),
    }
    return render(request, 'unit.html', context)


@restaurant_owner_access
@require_POST
def unit_logo(request, unit_id):
    unit = get_object_or_404(Unit, id=unit_id, restaurant=request.restaurant)

    result = store_unit_logo(unit, request.FILES.get('file'))
    if result['ok']:
        messages.success(request, 'Logo atualizada')
    else:
        messages.error(request, result['message'])
    return redirect('unit_page', unit_id=unit.id)


# =============== CATEGORIES ===============

@restaurant_owner_access
@require_POST
def add_category(request, unit_id):
    unit = get_object_or_404(Unit, id=unit_id, restaurant=request.restaurant)

    form = CategoryForm(request.POST)
    if form.is_valid():
        category = form.save(commit=False)
        category.unit = unit
        category.save()
        logger.info(f"Created category {category.id} ({category.name}) in unit {unit.id}")
        messages.success(request, 'Categoria criada')
    else:
        messages.error(request, form_error_text(form))
    return back_to_dashboard(unit.id)


@restaurant_owner_access
@require_POST
def edit_category(request, pk):
    category = get_object_or_404(Category, id=pk, unit__restaurant=request.restaurant)

    form = CategoryForm(request.POST, instance=category)
    if form.is_valid():
        form.save()
        logger.info(f"Updated category {category.id}")
        messages.success(request, 'Categoria atualizada')
    else:
        messages.error(request, form_error_text(form))
    return back_to_dashboard(category.unit_id)


@restaurant_owner_access
@require_POST
def delete_category(request, pk):
    category = get_object_or_404(Category, id=pk, unit__restaurant=request.restaurant)
    unit_id = category.unit_id
    logger.info(f"Deleting category {category.id} ({category.name}) from unit {unit_id}")
    category.delete()
    messages.success(request, 'Categoria removida')
    return back_to_dashboard(unit_id)


# =============== PRODUCTS ===============

@restaurant_owner_access
@require_POST
def add_product(request, unit_id):
    unit = get_object_or_404(Unit, id=unit_id, restaurant=request.restaurant)

    form = ProductForm(request.POST, unit=unit)
    if form.is_valid():
        product = form.save()
        logger.info(f"Created product {product.id} ({product.name}) in unit {unit.id}")
        messages.success(request, 'Produto criado')
    else:
        messages.error(request, form_error_text(form))
    return back_to_dashboard(unit.id)


@restaurant_owner_access
@require_POST
def edit_product(request, pk):
    product = get_object_or_404(Product, id=pk, unit__restaurant=request.restaurant)

    form = ProductForm(request.POST, instance=product)
    if form.is_valid():
        form.save()
        logger.info(f"Updated product {product.id} ({product.name})")
        messages.success(request, 'Produto atualizado')
    else:
        messages.error(request, form_error_text(form))
    return back_to_dashboard(product.unit_id)


@restaurant_owner_access
@require_POST
def delete_product(request, pk):
    product = get_object_or_404(Product, id=pk, unit__restaurant=request.restaurant)
    unit_id = product.unit_id
    logger.info(f"Deleting product {product.id} ({product.name})")
    product.delete()
    messages.success(request, 'Produto removido')
    return back_to_dashboard(unit_id)


# =============== ACCOUNT ===============

@login_required
def account(request):
    restaurant = ensure_restaurant(request.user)

    if request.method == "POST":
        form = AccountForm(request.POST, instance=restaurant)
        if form.is_valid():
            form.save()
            logger.info(f"Updated account details for restaurant {restaurant.id}")
            messages.success(request, 'Dados salvos')
        else:
            messages.error(request, form_error_text(form))
        return redirect('account_page')

    context = {
        'restaurant': restaurant,
        'form': AccountForm(instance=restaurant),
    }
    return render(request, 'account.html', context)


# =============== PUBLIC MENU ===============

def public_menu_page(request, slug):
    try:
        unit = get_public_unit(slug)
    except UnitNotFound:
        raise Http404("Unidade não encontrada")

    menu = build_public_menu(unit)
    context = {
        'unit': unit,
        'restaurant': unit.restaurant,
        'links': menu['links'],
        'featured': menu['featured'],
        'categories': menu['categories'],
        'sections': ([menu['featured']] if menu['featured'] else []) + menu['categories'],
    }
    return render(request, 'public_menu.html', context)
