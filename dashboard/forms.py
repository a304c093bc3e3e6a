from django import forms
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core import validators
from rest_framework.exceptions import ValidationError as DRFValidationError

from authentication.models import Restaurant, Unit
from authentication.utils import clean_slug, normalize_whatsapp
from menu.models import Category, Product
from menu.serializers import replace_variations
from menu.utils import parse_order_index, parse_price, parse_variation_lines, variation_lines

User = get_user_model()


def drf_message(exc):
    """First message of a DRF ValidationError, as plain text"""
    detail = exc.detail
    while isinstance(detail, (list, dict)):
        if not detail:
            return ''
        detail = list(detail.values())[0] if isinstance(detail, dict) else detail[0]
    return str(detail)


class SignInForm(forms.Form):
    email = forms.EmailField(
        widget=forms.EmailInput(attrs={"class": "form-control", "placeholder": "Email", "id": "email"})
    )
    password = forms.CharField(
        widget=forms.PasswordInput(attrs={"class": "form-control", "placeholder": "Senha", "id": "pass"})
    )


class SignUpForm(forms.Form):
    email = forms.EmailField(
        widget=forms.EmailInput(attrs={"class": "form-control", "placeholder": "Email", "id": "email"})
    )
    password = forms.CharField(
        widget=forms.PasswordInput(attrs={"class": "form-control", "placeholder": "Senha", "id": "pass"})
    )
    password2 = forms.CharField(
        widget=forms.PasswordInput(attrs={"class": "form-control", "placeholder": "Repita a senha", "id": "rpass"})
    )

    def clean_email(self):
        email = self.cleaned_data['email'].strip().lower()
        if User.objects.filter(email__iexact=email).exists():
            raise forms.ValidationError("Este email já está cadastrado.")
        return email

    def clean(self):
        cleaned_data = super().clean()
        pwd1 = cleaned_data.get("password")
        pwd2 = cleaned_data.get("password2")
        if pwd1 and pwd2 and pwd1 != pwd2:
            raise forms.ValidationError("As senhas não conferem.")
        if pwd1:
            validate_password(pwd1)
        return cleaned_data


class SetupForm(forms.Form):
    restaurant_name = forms.CharField(
        max_length=255,
        widget=forms.TextInput(attrs={"class": "form-control", "placeholder": "Nome do restaurante"})
    )
    phone = forms.CharField(
        max_length=30,
        widget=forms.TextInput(attrs={"class": "form-control", "placeholder": "(62) 99999-9999"})
    )
    niche = forms.ChoiceField(
        choices=Restaurant.NICHE_CHOICES,
        initial='pizzaria',
        widget=forms.Select(attrs={"class": "form-control"})
    )
    unit_name = forms.CharField(
        max_length=255,
        initial='Unidade 1',
        widget=forms.TextInput(attrs={"class": "form-control"})
    )
    address = forms.CharField(
        max_length=255,
        widget=forms.TextInput(attrs={"class": "form-control", "placeholder": "Endereço"})
    )
    instagram = forms.CharField(
        max_length=255,
        required=False,
        widget=forms.TextInput(attrs={"class": "form-control", "placeholder": "@seurestaurante"})
    )


class CategoryForm(forms.ModelForm):
    order_index = forms.CharField(
        required=False,
        widget=forms.TextInput(attrs={"class": "form-control", "placeholder": "0"})
    )

    class Meta:
        model = Category
        fields = ["name", "type", "order_index"]
        widgets = {
            "name": forms.TextInput(attrs={"class": "form-control"}),
            "type": forms.TextInput(attrs={"class": "form-control"}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["type"].required = False

    def clean_name(self):
        name = (self.cleaned_data.get("name") or "").strip()
        if not name:
            raise forms.ValidationError("Nome da categoria obrigatório.")
        return name

    def clean_type(self):
        return (self.cleaned_data.get("type") or "").strip() or "food"

    def clean_order_index(self):
        try:
            return parse_order_index(self.cleaned_data.get("order_index"))
        except DRFValidationError as exc:
            raise forms.ValidationError(drf_message(exc))


class ProductForm(forms.ModelForm):
    base_price = forms.CharField(
        required=False,
        widget=forms.TextInput(attrs={"class": "form-control", "placeholder": "29,90"})
    )
    order_index = forms.CharField(
        required=False,
        widget=forms.TextInput(attrs={"class": "form-control", "placeholder": "0"})
    )
    variations = forms.CharField(
        required=False,
        widget=forms.Textarea(attrs={"class": "form-control", "rows": 4, "placeholder": "Média;49,90\nGrande;59,90"})
    )

    class Meta:
        model = Product
        fields = [
            "category", "name", "description", "price_type", "base_price",
            "thumbnail_url", "video_url", "order_index", "is_active"
        ]
        widgets = {
            "category": forms.Select(attrs={"class": "form-control"}),
            "name": forms.TextInput(attrs={"class": "form-control"}),
            "description": forms.Textarea(attrs={"class": "form-control", "rows": 2}),
            "price_type": forms.Select(attrs={"class": "form-control"}),
            "thumbnail_url": forms.URLInput(attrs={"class": "form-control"}),
            "video_url": forms.URLInput(attrs={"class": "form-control"}),
            "is_active": forms.CheckboxInput(attrs={"class": "form-check-input"}),
        }

    def __init__(self, *args, **kwargs):
        unit = kwargs.pop("unit", None)
        super().__init__(*args, **kwargs)

        if unit is None and self.instance.pk:
            unit = self.instance.unit
        self.unit = unit
        if unit is not None:
            self.fields["category"].queryset = Category.objects.filter(unit=unit)

        self.fields["description"].required = False
        if self.instance.pk and not self.is_bound:
            self.initial["variations"] = variation_lines(self.instance)
            if self.instance.base_price is not None:
                self.initial["base_price"] = str(self.instance.base_price).replace('.', ',')

    def clean_name(self):
        name = (self.cleaned_data.get("name") or "").strip()
        if not name:
            raise forms.ValidationError("Nome do produto obrigatório.")
        return name

    def clean_description(self):
        return (self.cleaned_data.get("description") or "").strip()

    def clean_order_index(self):
        try:
            return parse_order_index(self.cleaned_data.get("order_index"))
        except DRFValidationError as exc:
            raise forms.ValidationError(drf_message(exc))

    def clean_base_price(self):
        try:
            return parse_price(self.cleaned_data.get("base_price"))
        except DRFValidationError as exc:
            raise forms.ValidationError(drf_message(exc))

    def clean_variations(self):
        try:
            lines = parse_variation_lines(self.cleaned_data.get("variations"))
        except DRFValidationError as exc:
            raise forms.ValidationError(drf_message(exc))

        variations = []
        for number, item in enumerate(lines, start=1):
            if not item['name']:
                raise forms.ValidationError(f"Linha {number}: nome da variação obrigatório.")
            try:
                price = parse_price(item['price'])
            except DRFValidationError as exc:
                raise forms.ValidationError(f"Linha {number}: {drf_message(exc)}")
            if price is None:
                raise forms.ValidationError(f"Linha {number}: preço obrigatório.")
            variations.append({'name': item['name'], 'price': price})
        return variations

    def clean(self):
        cleaned_data = super().clean()
        price_type = cleaned_data.get("price_type")
        if price_type == "fixed":
            if cleaned_data.get("base_price") is None and "base_price" not in self.errors:
                self.add_error("base_price", "Preço obrigatório para produto de preço fixo.")
        elif price_type == "variable":
            cleaned_data["base_price"] = None
        return cleaned_data

    def save(self, commit=True):
        product = super().save(commit=False)
        if self.unit is not None:
            product.unit = self.unit
        if not commit:
            return product

        product.save()
        if product.price_type == "fixed":
            product.variations.all().delete()
        else:
            replace_variations(product, self.cleaned_data.get("variations") or [])
        return product


class UnitForm(forms.ModelForm):
    slug = forms.CharField(
        max_length=80,
        required=False,
        widget=forms.TextInput(attrs={"class": "form-control"})
    )

    class Meta:
        model = Unit
        fields = [
            "name", "slug", "address", "city", "neighborhood",
            "instagram", "whatsapp", "maps_url"
        ]
        widgets = {
            "name": forms.TextInput(attrs={"class": "form-control"}),
            "address": forms.TextInput(attrs={"class": "form-control"}),
            "city": forms.TextInput(attrs={"class": "form-control"}),
            "neighborhood": forms.TextInput(attrs={"class": "form-control"}),
            "instagram": forms.TextInput(attrs={"class": "form-control", "placeholder": "@seurestaurante"}),
            "whatsapp": forms.TextInput(attrs={"class": "form-control", "placeholder": "62999999999"}),
            "maps_url": forms.URLInput(attrs={"class": "form-control"}),
        }

    def clean_slug(self):
        slug = clean_slug(self.cleaned_data.get("slug"))
        if not slug:
            raise forms.ValidationError("Slug não pode ficar vazio.")
        try:
            validators.validate_slug(slug)
        except forms.ValidationError:
            raise forms.ValidationError("Slug deve conter apenas letras, números, hífens ou sublinhados.")
        taken = Unit.objects.filter(slug=slug).exclude(pk=self.instance.pk)
        if taken.exists():
            raise forms.ValidationError("Este slug já está em uso.")
        return slug

    def clean_whatsapp(self):
        return normalize_whatsapp(self.cleaned_data.get("whatsapp"))

    def clean(self):
        cleaned_data = super().clean()
        for field in ["name", "address", "city", "neighborhood", "instagram", "maps_url"]:
            if isinstance(cleaned_data.get(field), str):
                cleaned_data[field] = cleaned_data[field].strip()
        return cleaned_data


class NewUnitForm(UnitForm):
    slug = None

    class Meta(UnitForm.Meta):
        fields = ["name", "address", "city", "neighborhood", "instagram", "whatsapp", "maps_url"]


class AccountForm(forms.ModelForm):
    class Meta:
        model = Restaurant
        fields = [
            "owner_first_name", "owner_last_name", "owner_document",
            "owner_phone", "owner_address"
        ]
        widgets = {
            "owner_first_name": forms.TextInput(attrs={"class": "form-control"}),
            "owner_last_name": forms.TextInput(attrs={"class": "form-control"}),
            "owner_document": forms.TextInput(attrs={"class": "form-control", "placeholder": "CPF/CNPJ"}),
            "owner_phone": forms.TextInput(attrs={"class": "form-control"}),
            "owner_address": forms.TextInput(attrs={"class": "form-control"}),
        }

    def clean(self):
        cleaned_data = super().clean()
        for field, value in cleaned_data.items():
            cleaned_data[field] = (value or "").strip()
        return cleaned_data


class LogoForm(forms.Form):
    file = forms.FileField(required=False)
