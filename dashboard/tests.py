"""
Test suite for the owner dashboard pages and the public menu page
"""
from decimal import Decimal

from django.contrib.messages import get_messages
from django.test import TestCase, Client
from django.urls import reverse

from authentication.models import Restaurant
from authentication.test_utils import TestDataFactory
from menu.models import Category, Product


def flashed(response):
    return [str(m) for m in get_messages(response.wsgi_request)]


class AccessTests(TestCase):
    """Test sign in, sign up and owner-only redirects"""

    def setUp(self):
        self.client = Client()

    def test_dashboard_requires_login(self):
        response = self.client.get(reverse('dashboard'))
        self.assertRedirects(response, reverse('SignIn'))

    def test_owner_without_restaurant_goes_to_setup(self):
        self.client.force_login(TestDataFactory.create_user())
        response = self.client.get(reverse('dashboard'))
        self.assertRedirects(response, reverse('setup'))

    def test_account_page_creates_base_restaurant(self):
        user = TestDataFactory.create_user(email='pizzaria.do.ze@test.com')
        self.client.force_login(user)
        response = self.client.get(reverse('account_page'))
        self.assertEqual(response.status_code, 200)
        restaurant = Restaurant.objects.get(owner=user)
        self.assertEqual(restaurant.name, 'pizzaria.do.ze')
        self.assertEqual(response.context['restaurant'], restaurant)

    def test_account_page_requires_login(self):
        response = self.client.get(reverse('account_page'))
        self.assertRedirects(response, f"{reverse('SignIn')}?next={reverse('account_page')}")

    def test_signin(self):
        user = TestDataFactory.create_user(email='dono@test.com')
        response = self.client.post(reverse('SignIn'), {'email': 'DONO@test.com', 'password': 'SenhaForte123!'})
        self.assertRedirects(response, reverse('dashboard'), fetch_redirect_response=False)
        self.assertEqual(self.client.session['_auth_user_id'], str(user.pk))

    def test_signin_wrong_password(self):
        TestDataFactory.create_user(email='dono@test.com')
        response = self.client.post(reverse('SignIn'), {'email': 'dono@test.com', 'password': 'errada'})
        self.assertRedirects(response, reverse('SignIn'))
        self.assertIn('Email ou senha incorretos', flashed(response))

    def test_signup_then_setup(self):
        response = self.client.post(reverse('SignUp'), {
            'email': 'novo@test.com',
            'password': 'SenhaForte123!',
            'password2': 'SenhaForte123!'
        })
        self.assertRedirects(response, reverse('setup'))

        response = self.client.post(reverse('setup'), {
            'restaurant_name': 'Pedacci',
            'phone': '62999999999',
            'niche': 'hamburgueria',
            'unit_name': 'Centro',
            'address': 'Rua Y',
            'instagram': ''
        })
        restaurant = Restaurant.objects.get(owner__email='novo@test.com')
        unit = restaurant.units.get()
        self.assertRedirects(response, f"{reverse('dashboard')}?unit={unit.id}")
        self.assertEqual(Category.objects.filter(unit=unit).count(), 5)

    def test_signup_password_mismatch(self):
        response = self.client.post(reverse('SignUp'), {
            'email': 'novo@test.com',
            'password': 'SenhaForte123!',
            'password2': 'OutraSenha123!'
        })
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Restaurant.objects.exists())


class DashboardMenuTests(TestCase):
    """Test category and product management pages"""

    def setUp(self):
        self.user, self.restaurant, self.unit = TestDataFactory.create_tenant()
        self.client = Client()
        self.client.force_login(self.user)
        self.category = TestDataFactory.create_category(unit=self.unit, name='Pizzas')

    def test_dashboard_renders_selected_unit(self):
        TestDataFactory.create_product(category=self.category, name='Margherita')
        response = self.client.get(reverse('dashboard'), {'unit': str(self.unit.id)})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context['unit'], self.unit)
        self.assertContains(response, 'Margherita')
        self.assertContains(response, 'Plano BASIC')

    def test_dashboard_ignores_foreign_unit_param(self):
        _, _, foreign_unit = TestDataFactory.create_tenant()
        response = self.client.get(reverse('dashboard'), {'unit': str(foreign_unit.id)})
        self.assertEqual(response.context['unit'], self.unit)

    def test_add_category(self):
        response = self.client.post(reverse('add_category', args=[self.unit.id]), {'name': 'Bebidas', 'order_index': ''})
        self.assertRedirects(response, f"{reverse('dashboard')}?unit={self.unit.id}")
        category = Category.objects.get(unit=self.unit, name='Bebidas')
        self.assertEqual(category.type, 'food')
        self.assertEqual(category.order_index, 0)

    def test_add_category_invalid_order_index(self):
        response = self.client.post(reverse('add_category', args=[self.unit.id]), {'name': 'Bebidas', 'order_index': 'x'})
        self.assertEqual(response.status_code, 302)
        self.assertFalse(Category.objects.filter(name='Bebidas').exists())
        self.assertTrue(any('order_index inválido' in m for m in flashed(response)))

    def test_add_category_order_index_too_large(self):
        response = self.client.post(
            reverse('add_category', args=[self.unit.id]),
            {'name': 'Bebidas', 'order_index': '99999999999999999999'}
        )
        self.assertEqual(response.status_code, 302)
        self.assertFalse(Category.objects.filter(name='Bebidas').exists())
        self.assertTrue(any('order_index inválido' in m for m in flashed(response)))

    def test_edit_and_delete_category(self):
        self.client.post(reverse('edit_category', args=[self.category.id]), {'name': 'Pizzas Salgadas', 'type': 'food', 'order_index': '2'})
        self.category.refresh_from_db()
        self.assertEqual(self.category.name, 'Pizzas Salgadas')
        self.assertEqual(self.category.order_index, 2)

        self.client.post(reverse('delete_category', args=[self.category.id]))
        self.assertFalse(Category.objects.filter(id=self.category.id).exists())

    def test_foreign_category_not_found(self):
        _, _, foreign_unit = TestDataFactory.create_tenant()
        foreign = TestDataFactory.create_category(unit=foreign_unit)
        response = self.client.post(reverse('delete_category', args=[foreign.id]))
        self.assertEqual(response.status_code, 404)
        self.assertTrue(Category.objects.filter(id=foreign.id).exists())

    def test_add_variable_product_from_textarea(self):
        response = self.client.post(reverse('add_product', args=[self.unit.id]), {
            'category': str(self.category.id),
            'name': 'Margherita',
            'price_type': 'variable',
            'base_price': '',
            'variations': 'Média;49,90\nGrande;59,90',
            'is_active': 'on'
        })
        self.assertEqual(response.status_code, 302)
        product = Product.objects.get(name='Margherita')
        self.assertEqual(product.unit, self.unit)
        self.assertIsNone(product.base_price)
        self.assertEqual(
            [(v.name, v.price, v.order_index) for v in product.sorted_variations()],
            [('Média', Decimal('49.90'), 0), ('Grande', Decimal('59.90'), 1)]
        )

    def test_add_product_bad_variation_line(self):
        self.client.post(reverse('add_product', args=[self.unit.id]), {
            'category': str(self.category.id),
            'name': 'Margherita',
            'price_type': 'variable',
            'variations': 'Média 49,90'
        })
        self.assertFalse(Product.objects.filter(name='Margherita').exists())

    def test_edit_product_to_fixed_clears_variations(self):
        product = TestDataFactory.create_product(category=self.category, price_type='variable')
        TestDataFactory.create_variation(product)

        self.client.post(reverse('edit_product', args=[product.id]), {
            'category': str(self.category.id),
            'name': product.name,
            'price_type': 'fixed',
            'base_price': '39,90',
            'variations': 'Ignorada;1,00',
            'is_active': 'on'
        })
        product.refresh_from_db()
        self.assertEqual(product.base_price, Decimal('39.90'))
        self.assertEqual(product.variations.count(), 0)

    def test_fixed_product_requires_price(self):
        self.client.post(reverse('add_product', args=[self.unit.id]), {
            'category': str(self.category.id),
            'name': 'Suco',
            'price_type': 'fixed',
            'base_price': ''
        })
        self.assertFalse(Product.objects.filter(name='Suco').exists())

    def test_delete_product(self):
        product = TestDataFactory.create_product(category=self.category)
        self.client.post(reverse('delete_product', args=[product.id]))
        self.assertFalse(Product.objects.filter(id=product.id).exists())


class DashboardUnitTests(TestCase):
    """Test unit page, unit creation and account page"""

    def setUp(self):
        self.user, self.restaurant, self.unit = TestDataFactory.create_tenant()
        self.client = Client()
        self.client.force_login(self.user)

    def test_unit_page_update(self):
        url = reverse('unit_page', args=[self.unit.id])
        self.assertEqual(self.client.get(url).status_code, 200)

        response = self.client.post(url, {
            'name': 'Setor Oeste',
            'slug': 'Pedacci-Oeste',
            'address': 'Rua X',
            'whatsapp': '62999998888'
        })
        self.assertRedirects(response, url)
        self.unit.refresh_from_db()
        self.assertEqual(self.unit.slug, 'pedacci-oeste')
        self.assertEqual(self.unit.whatsapp, 'https://wa.me/5562999998888')

    def test_unit_page_rejects_empty_slug(self):
        old_slug = self.unit.slug
        self.client.post(reverse('unit_page', args=[self.unit.id]), {'name': 'X', 'slug': '  '})
        self.unit.refresh_from_db()
        self.assertEqual(self.unit.slug, old_slug)

    def test_unit_page_rejects_slug_with_slash(self):
        old_slug = self.unit.slug
        response = self.client.post(reverse('unit_page', args=[self.unit.id]), {'name': 'X', 'slug': 'minha/loja'})
        self.assertEqual(response.status_code, 302)
        self.unit.refresh_from_db()
        self.assertEqual(self.unit.slug, old_slug)
        self.assertTrue(any('Slug deve conter' in m for m in flashed(response)))

    def test_add_unit_blocked_on_basic_plan(self):
        self.client.post(reverse('add_unit'), {'name': 'Centro'})
        self.assertEqual(self.restaurant.units.count(), 1)

    def test_add_unit_on_pro_plan(self):
        self.restaurant.plan = 'pro'
        self.restaurant.save()
        self.client.post(reverse('add_unit'), {'name': 'Centro'})
        self.assertEqual(self.restaurant.units.count(), 2)

    def test_account_page(self):
        response = self.client.post(reverse('account_page'), {'owner_first_name': ' Maria ', 'owner_last_name': 'Silva'})
        self.assertRedirects(response, reverse('account_page'))
        self.restaurant.refresh_from_db()
        self.assertEqual(self.restaurant.owner_first_name, 'Maria')


class PublicMenuPageTests(TestCase):
    """Test the server-rendered public menu"""

    def setUp(self):
        _, self.restaurant, self.unit = TestDataFactory.create_tenant()
        destaques = TestDataFactory.create_category(unit=self.unit, name='Destaques')
        pizzas = TestDataFactory.create_category(unit=self.unit, name='Pizzas', order_index=1)
        TestDataFactory.create_product(category=destaques, name='Combo da Casa')
        pizza = TestDataFactory.create_product(category=pizzas, name='Calabresa', price_type='variable')
        TestDataFactory.create_variation(pizza, name='Média', price=Decimal('49.90'))

    def test_public_page(self):
        response = Client().get(f'/u/{self.unit.slug}/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context['featured']['category'].name, 'Destaques')
        self.assertContains(response, 'Combo da Casa')
        self.assertContains(response, 'A partir de R$ 49,90')

    def test_public_page_unknown_slug(self):
        response = Client().get('/u/nao-existe/')
        self.assertEqual(response.status_code, 404)
