"""
Test suite for accounts and tenancy
Tests: signup/login, tenant setup, slugs, units and plan limits, logo upload, account, error format
"""
import shutil
import tempfile
from unittest import mock

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.exceptions import ValidationError

from authentication.exceptions import TenantNotFound
from authentication.models import Restaurant, Unit
from authentication.serializers import base_categories_for
from authentication.test_utils import TestDataFactory, AuthenticatedAPIClient
from authentication.utils import (
    slugify_name, generate_unit_slug, normalize_whatsapp, get_tenant_context,
    ensure_restaurant
)
from menu.models import Category


class SlugAndContactUtilsTests(TestCase):
    """Test slug generation and contact normalization helpers"""

    def test_slugify_name_strips_accents_and_joins_with_dash(self):
        self.assertEqual(slugify_name('Pedacci Pizzaria - Setor Oeste'), 'pedacci-pizzaria-setor-oeste')
        self.assertEqual(slugify_name('Café  & Cia__Goiânia'), 'cafe-cia-goiania')

    def test_slugify_name_turns_punctuation_into_dash(self):
        self.assertEqual(slugify_name('D.Oro'), 'd-oro')
        self.assertEqual(slugify_name('Bebidas/Sucos'), 'bebidas-sucos')
        self.assertEqual(slugify_name("  --Pão d'Ouro!--  "), 'pao-d-ouro')

    def test_slugify_name_cuts_to_max_length(self):
        slug = slugify_name('a' * 30 + ' ' + 'b' * 30)
        self.assertLessEqual(len(slug), 40)
        self.assertFalse(slug.endswith('-'))

    def test_generate_unit_slug_has_four_digit_suffix(self):
        slug = generate_unit_slug('Pedacci', 'Setor Oeste')
        base, suffix = slug.rsplit('-', 1)
        self.assertEqual(base, 'pedacci-setor-oeste')
        self.assertTrue(1000 <= int(suffix) <= 9999)

    def test_generate_unit_slug_retries_on_collision(self):
        TestDataFactory.create_unit(slug='pedacci-centro-1111')
        with mock.patch('authentication.utils.random_suffix', side_effect=['1111', '2222']):
            slug = generate_unit_slug('Pedacci', 'Centro')
        self.assertEqual(slug, 'pedacci-centro-2222')

    def test_generate_unit_slug_gives_up_after_retries(self):
        TestDataFactory.create_unit(slug='pedacci-centro-1111')
        with mock.patch('authentication.utils.random_suffix', return_value='1111'):
            with self.assertRaises(ValidationError):
                generate_unit_slug('Pedacci', 'Centro')

    def test_normalize_whatsapp(self):
        self.assertEqual(normalize_whatsapp('(62) 99999-8888'), 'https://wa.me/5562999998888')
        self.assertEqual(normalize_whatsapp('55 62 99999-8888'), 'https://wa.me/5562999998888')
        self.assertEqual(normalize_whatsapp('https://wa.me/123'), 'https://wa.me/123')
        self.assertEqual(normalize_whatsapp('   '), '')
        self.assertEqual(normalize_whatsapp('sem número'), '')

    def test_base_categories_for_unknown_niche(self):
        self.assertEqual(base_categories_for('sorveteria'), ['Destaques', 'Categoria 1', 'Categoria 2'])


class TenantContextTests(TestCase):
    """Test tenant lookup helpers"""

    def test_get_tenant_context_orders_units_oldest_first(self):
        user, restaurant, first = TestDataFactory.create_tenant(plan='pro')
        second = TestDataFactory.create_unit(restaurant=restaurant, name='Unidade 2')

        ctx_user, ctx_restaurant, units = get_tenant_context(user)
        self.assertEqual(ctx_user, user)
        self.assertEqual(ctx_restaurant, restaurant)
        self.assertEqual([u.id for u in units], [first.id, second.id])

    def test_get_tenant_context_without_restaurant(self):
        user = TestDataFactory.create_user()
        with self.assertRaises(TenantNotFound):
            get_tenant_context(user)

    def test_ensure_restaurant_uses_email_local_part(self):
        user = TestDataFactory.create_user(email='pizzaria.do.ze@test.com')
        restaurant = ensure_restaurant(user)
        self.assertEqual(restaurant.name, 'pizzaria.do.ze')
        self.assertEqual(ensure_restaurant(user), restaurant)


class AuthAPITests(TestCase):
    """Test signup and login endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_signup_returns_tokens(self):
        response = self.client.post('/api/auth/signup/', {
            'email': 'Novo@Test.com',
            'password': 'SenhaForte123!'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data)
        self.assertIsNone(response.data['restaurant'])
        self.assertEqual(response.data['user']['email'], 'novo@test.com')

    def test_signup_duplicate_email(self):
        TestDataFactory.create_user(email='dup@test.com')
        response = self.client.post('/api/auth/signup/', {
            'email': 'dup@test.com',
            'password': 'SenhaForte123!'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(response.data['error'])
        self.assertIn('email', response.data['details'])

    def test_signup_weak_password(self):
        response = self.client.post('/api/auth/signup/', {
            'email': 'fraca@test.com',
            'password': '123'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data['details'])

    def test_login_includes_tenant_context(self):
        user, restaurant, unit = TestDataFactory.create_tenant()
        response = self.client.post('/api/auth/login/', {
            'email': user.email,
            'password': 'SenhaForte123!'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['restaurant']['id'], str(restaurant.id))
        self.assertEqual(response.data['units'][0]['slug'], unit.slug)

    def test_login_invalid_credentials(self):
        user = TestDataFactory.create_user()
        response = self.client.post('/api/auth/login/', {
            'email': user.email,
            'password': 'errada'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Validation error')


class TenantSetupAPITests(TestCase):
    """Test tenant onboarding"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.payload = {
            'restaurant_name': 'Pedacci',
            'phone': '62999999999',
            'niche': 'pizzaria',
            'unit_name': 'Setor Oeste',
            'address': 'Rua X, Setor Oeste',
            'instagram': '@pedacci'
        }

    def test_setup_creates_restaurant_unit_and_categories(self):
        response = self.client.post('/api/setup/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        restaurant = Restaurant.objects.get(owner=self.user)
        self.assertEqual(restaurant.plan, 'basic')
        unit = restaurant.units.get()
        self.assertTrue(unit.slug.startswith('pedacci-setor-oeste-'))
        self.assertEqual(response.data['unit_url'], f'/u/{unit.slug}/')

        names = list(Category.objects.filter(unit=unit).order_by('order_index').values_list('name', flat=True))
        self.assertEqual(names, ['Destaques', 'Pizzas Salgadas', 'Pizzas Doces', 'Bebidas'])
        self.assertTrue(all(c.type == 'normal' for c in Category.objects.filter(unit=unit)))

    def test_setup_requires_fields(self):
        payload = dict(self.payload, address='')
        response = self.client.post('/api/setup/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Restaurant.objects.filter(owner=self.user).exists())

    def test_setup_requires_unit_name(self):
        payload = dict(self.payload)
        del payload['unit_name']
        response = self.client.post('/api/setup/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('unit_name', response.data['details'])
        self.assertFalse(Restaurant.objects.filter(owner=self.user).exists())

    def test_setup_unknown_niche_seeds_generic_categories(self):
        payload = dict(self.payload, niche='sorveteria')
        response = self.client.post('/api/setup/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        restaurant = Restaurant.objects.get(owner=self.user)
        self.assertEqual(restaurant.niche, 'outros')
        names = list(
            Category.objects.filter(unit__restaurant=restaurant)
            .order_by('order_index').values_list('name', flat=True)
        )
        self.assertEqual(names, ['Destaques', 'Categoria 1', 'Categoria 2'])

    def test_setup_twice_fails(self):
        self.client.post('/api/setup/', self.payload, format='json')
        response = self.client.post('/api/setup/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Restaurant.objects.filter(owner=self.user).count(), 1)

    def test_setup_slug_exhaustion_rolls_back(self):
        TestDataFactory.create_unit(slug='pedacci-setor-oeste-1111')
        with mock.patch('authentication.utils.random_suffix', return_value='1111'):
            response = self.client.post('/api/setup/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Restaurant.objects.filter(owner=self.user).exists())

    def test_tenant_context_without_restaurant(self):
        response = self.client.get('/api/tenant/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Resource not found')


class UnitAPITests(TestCase):
    """Test unit endpoints"""

    def setUp(self):
        self.user, self.restaurant, self.unit = TestDataFactory.create_tenant()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_list_units_scoped_to_owner(self):
        TestDataFactory.create_tenant()
        response = self.client.get('/api/units/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        results = response.data['results'] if isinstance(response.data, dict) else response.data
        self.assertEqual([u['id'] for u in results], [str(self.unit.id)])

    def test_basic_plan_blocks_second_unit(self):
        response = self.client.post('/api/units/', {'name': 'Unidade 2'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('PRO', str(response.data['details']))
        self.assertEqual(self.restaurant.units.count(), 1)

    def test_pro_plan_creates_unit_with_generated_slug(self):
        self.restaurant.plan = 'pro'
        self.restaurant.save()
        response = self.client.post('/api/units/', {'name': 'Centro'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['slug'].startswith(f"{slugify_name(self.restaurant.name)}-centro-"))

    def test_update_unit(self):
        response = self.client.patch(f'/api/units/{self.unit.id}/', {
            'slug': '  Pedacci-Oeste ',
            'whatsapp': '62 99999-8888',
            'city': ' Goiânia '
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.unit.refresh_from_db()
        self.assertEqual(self.unit.slug, 'pedacci-oeste')
        self.assertEqual(self.unit.whatsapp, 'https://wa.me/5562999998888')
        self.assertEqual(self.unit.city, 'Goiânia')

    def test_update_unit_rejects_empty_or_taken_slug(self):
        other = TestDataFactory.create_unit(slug='ja-existe')
        response = self.client.patch(f'/api/units/{self.unit.id}/', {'slug': '   '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.patch(f'/api/units/{self.unit.id}/', {'slug': other.slug}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_unit_rejects_slug_outside_public_url(self):
        old_slug = self.unit.slug
        for bad in ['minha/loja', 'minha loja', 'loja?x=1']:
            response = self.client.patch(f'/api/units/{self.unit.id}/', {'slug': bad}, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertIn('slug', response.data['details'])
        self.unit.refresh_from_db()
        self.assertEqual(self.unit.slug, old_slug)

    def test_update_foreign_unit_not_found(self):
        _, _, foreign = TestDataFactory.create_tenant()
        response = self.client.patch(f'/api/units/{foreign.id}/', {'name': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_owner_without_restaurant_is_denied(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        response = client.get('/api/units/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_anonymous_is_rejected(self):
        response = AuthenticatedAPIClient().get('/api/units/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['message'], 'Authentication required')


class LogoUploadTests(TestCase):
    """Test unit logo upload"""

    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.override = override_settings(MEDIA_ROOT=self.media_root)
        self.override.enable()
        self.user, self.restaurant, self.unit = TestDataFactory.create_tenant()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.url = f'/api/units/{self.unit.id}/logo/'

    def tearDown(self):
        self.override.disable()
        shutil.rmtree(self.media_root, ignore_errors=True)

    def test_upload_logo(self):
        upload = SimpleUploadedFile('Logo.PNG', b'\x89PNG fake', content_type='image/png')
        response = self.client.post(self.url, {'file': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['ok'])
        self.unit.refresh_from_db()
        self.assertTrue(self.unit.logo.name.startswith(f'logos/{self.unit.id}/logo-'))
        self.assertTrue(self.unit.logo.name.endswith('.png'))

    def test_upload_requires_file(self):
        response = self.client.post(self.url, {}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Arquivo não enviado.')

    def test_upload_rejects_non_image(self):
        upload = SimpleUploadedFile('menu.pdf', b'%PDF', content_type='application/pdf')
        response = self.client.post(self.url, {'file': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['ok'])

    @override_settings(FYMENU={'LOGO_MAX_BYTES': 10})
    def test_upload_rejects_large_image(self):
        upload = SimpleUploadedFile('logo.png', b'x' * 11, content_type='image/png')
        response = self.client.post(self.url, {'file': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('3MB', response.data['message'])


class AccountAPITests(TestCase):
    """Test account endpoint"""

    def setUp(self):
        self.user = TestDataFactory.create_user(email='conta@test.com')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_get_creates_base_restaurant(self):
        response = self.client.get('/api/account/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'conta')
        self.assertEqual(response.data['email'], 'conta@test.com')

    def test_update_owner_details(self):
        response = self.client.patch('/api/account/', {
            'owner_first_name': ' Maria ',
            'owner_document': ''
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        restaurant = Restaurant.objects.get(owner=self.user)
        self.assertEqual(restaurant.owner_first_name, 'Maria')
        self.assertEqual(restaurant.owner_document, '')


class HealthCheckTests(TestCase):

    def test_health_check(self):
        response = AuthenticatedAPIClient().get('/api/health/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['database'], 'connected')


class UnitModelTests(TestCase):

    def test_public_path_and_empty_logo(self):
        unit = TestDataFactory.create_unit(slug='pedacci-oeste-1234')
        self.assertEqual(unit.public_path, '/u/pedacci-oeste-1234/')
        self.assertEqual(unit.logo_url, '')

    def test_unit_limit_by_plan(self):
        basic = TestDataFactory.create_restaurant(plan='basic')
        pro = TestDataFactory.create_restaurant(plan='pro')
        self.assertEqual(basic.unit_limit, 1)
        self.assertIsNone(pro.unit_limit)
        Unit.objects.create(restaurant=basic, slug='b-1')
        self.assertFalse(basic.can_add_unit())
        self.assertTrue(pro.can_add_unit())
