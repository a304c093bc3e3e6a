from django.db import models
from django.contrib.auth.models import AbstractUser, BaseUserManager
import uuid


class CustomUserManager(BaseUserManager):
    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('The Email field must be set')
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True.')

        return self.create_user(email, password, **extra_fields)


class TimeStampedModel(models.Model):
    """Base model with created_at and updated_at fields"""
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


# =============== USER ===============

class CustomUser(AbstractUser):
    """User that signs in with email + password"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True)

    username = None
    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []
    objects = CustomUserManager()

    class Meta:
        db_table = 'users'

    def __str__(self):
        return self.email


# =============== TENANT & UNIT MODELS ===============

class Restaurant(TimeStampedModel):
    """Tenant account - owns one or more units"""
    PLAN_CHOICES = [
        ('basic', 'Basic'),
        ('pro', 'Pro'),
    ]

    NICHE_CHOICES = [
        ('pizzaria', 'Pizzaria'),
        ('hamburgueria', 'Hamburgueria'),
        ('restaurante', 'Restaurante'),
        ('bar', 'Bar'),
        ('lanchonete', 'Lanchonete'),
        ('outros', 'Outros'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.OneToOneField(CustomUser, on_delete=models.CASCADE, related_name='restaurant')
    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=30, blank=True)
    plan = models.CharField(max_length=20, choices=PLAN_CHOICES, default='basic')
    niche = models.CharField(max_length=30, choices=NICHE_CHOICES, default='outros')

    # Owner details (account page)
    owner_first_name = models.CharField(max_length=150, blank=True)
    owner_last_name = models.CharField(max_length=150, blank=True)
    owner_document = models.CharField(max_length=50, blank=True)
    owner_phone = models.CharField(max_length=30, blank=True)
    owner_address = models.CharField(max_length=255, blank=True)

    class Meta:
        db_table = 'restaurants'

    def __str__(self):
        return self.name

    @property
    def unit_limit(self):
        """Max units allowed by the plan, None means unlimited"""
        from fymenu.conf import get_setting
        return get_setting('PLAN_UNIT_LIMITS').get(self.plan)

    def can_add_unit(self):
        limit = self.unit_limit
        if limit is None:
            return True
        return self.units.count() < limit


def unit_logo_path(instance, filename):
    # logos/<unit_id>/<filename>; the filename is built by the upload service
    return f"logos/{instance.id}/{filename}"


class Unit(TimeStampedModel):
    """Physical location of a restaurant, published under /u/<slug>/"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    restaurant = models.ForeignKey(Restaurant, on_delete=models.CASCADE, related_name='units')
    name = models.CharField(max_length=255, blank=True)
    slug = models.SlugField(max_length=80, unique=True)

    # Location & Contact
    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=120, blank=True)
    neighborhood = models.CharField(max_length=120, blank=True)
    instagram = models.CharField(max_length=255, blank=True)
    whatsapp = models.CharField(max_length=255, blank=True)
    maps_url = models.URLField(max_length=500, blank=True)

    logo = models.FileField(upload_to=unit_logo_path, blank=True)

    class Meta:
        db_table = 'units'
        ordering = ['created_at']

    def __str__(self):
        return f"{self.restaurant.name} - {self.name or self.slug}"

    @property
    def logo_url(self):
        if not self.logo:
            return ''
        return self.logo.url

    @property
    def public_path(self):
        return f"/u/{self.slug}/"
