"""
Test suite for the menu module
Tests: price/order parsing, categories, products and variations, public menu assembly and API
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from rest_framework.exceptions import ValidationError

from authentication.test_utils import TestDataFactory, AuthenticatedAPIClient
from menu.models import Category, Product, ProductVariation
from menu.public import (
    build_public_menu, display_price, find_featured_section, footer_links,
    get_public_unit, whatsapp_link, UnitNotFound
)
from menu.utils import (
    format_brl, parse_order_index, parse_price, parse_variation_lines, variation_lines
)


class ParsingUtilsTests(TestCase):
    """Test order_index and price parsing"""

    def test_parse_order_index(self):
        self.assertEqual(parse_order_index(None), 0)
        self.assertEqual(parse_order_index(''), 0)
        self.assertEqual(parse_order_index(' 3 '), 3)
        self.assertEqual(parse_order_index(-2), -2)

    def test_parse_order_index_rejects_non_integers(self):
        for raw in ['abc', '1.5', 1.5, True, 'inf']:
            with self.assertRaises(ValidationError):
                parse_order_index(raw)

    def test_parse_order_index_rejects_out_of_range(self):
        self.assertEqual(parse_order_index('2147483647'), 2147483647)
        self.assertEqual(parse_order_index(-2147483647), -2147483647)
        for raw in ['99999999999999999999', 2147483648, '-2147483648']:
            with self.assertRaises(ValidationError):
                parse_order_index(raw)

    def test_parse_price_accepts_decimal_comma(self):
        self.assertEqual(parse_price('29,90'), Decimal('29.90'))
        self.assertEqual(parse_price('R$ 1.234,50'), Decimal('1234.50'))
        self.assertEqual(parse_price('29.9'), Decimal('29.90'))
        self.assertEqual(parse_price(10), Decimal('10.00'))
        self.assertIsNone(parse_price(''))
        self.assertIsNone(parse_price(None))

    def test_parse_price_rejects_invalid(self):
        for raw in ['abc', '-1', 'NaN', '1e20']:
            with self.assertRaises(ValidationError):
                parse_price(raw)

    def test_format_brl(self):
        self.assertEqual(format_brl(Decimal('29.9')), 'R$ 29,90')
        self.assertEqual(format_brl(Decimal('1234.5')), 'R$ 1.234,50')
        self.assertEqual(format_brl(None), '')

    def test_format_brl_reads_currency_setting(self):
        with self.settings(FYMENU={'CURRENCY': 'USD'}):
            self.assertEqual(format_brl(Decimal('5')), 'USD 5,00')

    def test_parse_variation_lines(self):
        lines = parse_variation_lines('Média;49,90\n\n  Grande ; 59,90 ')
        self.assertEqual(lines, [
            {'name': 'Média', 'price': '49,90'},
            {'name': 'Grande', 'price': '59,90'},
        ])
        with self.assertRaises(ValidationError):
            parse_variation_lines('Média 49,90')

    def test_variation_lines_follows_order_index(self):
        product = TestDataFactory.create_product(price_type='variable')
        TestDataFactory.create_variation(product, name='Grande', price=Decimal('59.90'), order_index=1)
        TestDataFactory.create_variation(product, name='Média', price=Decimal('49.90'), order_index=0)
        self.assertEqual(variation_lines(product), 'Média;49,90\nGrande;59,90')


class CategoryAPITests(TestCase):
    """Test category endpoints"""

    def setUp(self):
        self.user, self.restaurant, self.unit = TestDataFactory.create_tenant()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.url = f'/api/units/{self.unit.id}/categories/'

    def test_create_category_defaults(self):
        response = self.client.post(self.url, {'name': 'Pizzas', 'order_index': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        category = Category.objects.get(id=response.data['id'])
        self.assertEqual(category.unit, self.unit)
        self.assertEqual(category.type, 'food')
        self.assertEqual(category.order_index, 0)

    def test_create_category_requires_name(self):
        response = self.client.post(self.url, {'name': '   '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('name', response.data['details'])

    def test_create_category_invalid_order_index(self):
        response = self.client.post(self.url, {'name': 'Pizzas', 'order_index': '1.5'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('order_index', response.data['details'])

    def test_create_category_order_index_too_large(self):
        response = self.client.post(
            self.url, {'name': 'Pizzas', 'order_index': '99999999999999999999'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('order_index', response.data['details'])
        self.assertFalse(Category.objects.filter(unit=self.unit, name='Pizzas').exists())

    def test_list_categories_ordered(self):
        TestDataFactory.create_category(unit=self.unit, name='Bebidas', order_index=2)
        TestDataFactory.create_category(unit=self.unit, name='Destaques', order_index=0)
        TestDataFactory.create_category(unit=self.unit, name='Pizzas', order_index=1)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c['name'] for c in response.data], ['Destaques', 'Pizzas', 'Bebidas'])

    def test_update_category(self):
        category = TestDataFactory.create_category(unit=self.unit, name='Pizas')
        response = self.client.patch(f'{self.url}{category.id}/', {'name': 'Pizzas', 'order_index': '4'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        category.refresh_from_db()
        self.assertEqual(category.name, 'Pizzas')
        self.assertEqual(category.order_index, 4)

    def test_delete_category_cascades_products(self):
        category = TestDataFactory.create_category(unit=self.unit)
        product = TestDataFactory.create_product(category=category)
        response = self.client.delete(f'{self.url}{category.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Product.objects.filter(id=product.id).exists())

    def test_category_scoped_by_unit_and_owner(self):
        _, _, foreign_unit = TestDataFactory.create_tenant()
        foreign = TestDataFactory.create_category(unit=foreign_unit)

        response = self.client.patch(f'{self.url}{foreign.id}/', {'name': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        response = self.client.get(f'/api/units/{foreign_unit.id}/categories/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        response = self.client.delete(f'/api/units/{foreign_unit.id}/categories/{foreign.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertTrue(Category.objects.filter(id=foreign.id).exists())


class ProductAPITests(TestCase):
    """Test product endpoints and variation replace-on-save"""

    def setUp(self):
        self.user, self.restaurant, self.unit = TestDataFactory.create_tenant()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.category = TestDataFactory.create_category(unit=self.unit, name='Pizzas')
        self.url = f'/api/units/{self.unit.id}/products/'

    def test_create_fixed_product_with_comma_price(self):
        response = self.client.post(self.url, {
            'category': str(self.category.id),
            'name': 'Coca-Cola lata',
            'price_type': 'fixed',
            'base_price': '6,50'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['base_price'], '6.50')
        self.assertEqual(response.data['display_price'], 'R$ 6,50')
        product = Product.objects.get(id=response.data['id'])
        self.assertEqual(product.unit, self.unit)
        self.assertEqual(product.description, '')

    def test_fixed_product_requires_price(self):
        response = self.client.post(self.url, {
            'category': str(self.category.id),
            'name': 'Sem preço',
            'price_type': 'fixed'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('base_price', response.data['details'])

    def test_negative_price_rejected(self):
        response = self.client.post(self.url, {
            'category': str(self.category.id),
            'name': 'Negativo',
            'base_price': '-1,00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_variable_product_with_variations(self):
        response = self.client.post(self.url, {
            'category': str(self.category.id),
            'name': 'Margherita',
            'price_type': 'variable',
            'base_price': '99,00',
            'variations': [
                {'name': 'Grande', 'price': '59,90'},
                {'name': 'Média', 'price': '49,90'}
            ]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['base_price'])
        self.assertEqual([v['name'] for v in response.data['variations']], ['Grande', 'Média'])
        self.assertEqual([v['order_index'] for v in response.data['variations']], [0, 1])
        self.assertEqual(response.data['display_price'], 'A partir de R$ 49,90')

    def test_variation_requires_name(self):
        response = self.client.post(self.url, {
            'category': str(self.category.id),
            'name': 'Margherita',
            'price_type': 'variable',
            'variations': [{'name': '', 'price': '10'}]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_category_must_belong_to_unit(self):
        _, _, foreign_unit = TestDataFactory.create_tenant()
        foreign_category = TestDataFactory.create_category(unit=foreign_unit)
        response = self.client.post(self.url, {
            'category': str(foreign_category.id),
            'name': 'Intruso',
            'base_price': '10'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('category', response.data['details'])

    def test_update_replaces_variations(self):
        product = TestDataFactory.create_product(category=self.category, price_type='variable')
        old = TestDataFactory.create_variation(product, name='Broto')

        response = self.client.patch(f'/api/products/{product.id}/', {
            'variations': [{'name': 'Família', 'price': '79,90'}]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(ProductVariation.objects.filter(id=old.id).exists())
        self.assertEqual(list(product.variations.values_list('name', flat=True)), ['Família'])

    def test_update_without_variations_keeps_them(self):
        product = TestDataFactory.create_product(category=self.category, price_type='variable')
        TestDataFactory.create_variation(product, name='Broto')

        response = self.client.patch(f'/api/products/{product.id}/', {'name': 'Calabresa'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(product.variations.count(), 1)

    def test_switch_to_fixed_deletes_variations(self):
        product = TestDataFactory.create_product(category=self.category, price_type='variable')
        TestDataFactory.create_variation(product)

        response = self.client.patch(f'/api/products/{product.id}/', {
            'price_type': 'fixed',
            'base_price': '35,00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        product.refresh_from_db()
        self.assertEqual(product.base_price, Decimal('35.00'))
        self.assertEqual(product.variations.count(), 0)

    def test_replace_variations_endpoint(self):
        product = TestDataFactory.create_product(category=self.category, price_type='variable')
        TestDataFactory.create_variation(product, name='Broto')

        response = self.client.put(f'/api/products/{product.id}/variations/', {
            'variations': [
                {'name': 'Média', 'price': '49,90'},
                {'name': 'Grande', 'price': 59.9}
            ]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([(v['name'], v['price']) for v in response.data], [('Média', '49.90'), ('Grande', '59.90')])

    def test_replace_variations_on_fixed_product_rejected(self):
        product = TestDataFactory.create_product(category=self.category)
        response = self.client.put(f'/api/products/{product.id}/variations/', {
            'variations': [{'name': 'Média', 'price': '49,90'}]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_products_filter_by_category(self):
        other = TestDataFactory.create_category(unit=self.unit, name='Bebidas')
        TestDataFactory.create_product(category=self.category, name='Margherita', order_index=1)
        TestDataFactory.create_product(category=self.category, name='Calabresa', order_index=0)
        TestDataFactory.create_product(category=other, name='Suco')

        response = self.client.get(self.url, {'category': str(self.category.id)})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['name'] for p in response.data], ['Calabresa', 'Margherita'])

    def test_product_scoped_to_owner(self):
        _, _, foreign_unit = TestDataFactory.create_tenant()
        foreign = TestDataFactory.create_product(category=TestDataFactory.create_category(unit=foreign_unit))

        self.assertEqual(self.client.get(f'/api/products/{foreign.id}/').status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.delete(f'/api/products/{foreign.id}/').status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.put(f'/api/products/{foreign.id}/variations/', {'variations': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_product(self):
        product = TestDataFactory.create_product(category=self.category, price_type='variable')
        variation = TestDataFactory.create_variation(product)
        response = self.client.delete(f'/api/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(ProductVariation.objects.filter(id=variation.id).exists())


class PublicMenuAssemblyTests(TestCase):
    """Test the public menu read model"""

    def setUp(self):
        _, self.restaurant, self.unit = TestDataFactory.create_tenant()
        self.unit.instagram = '@pedacci'
        self.unit.address = 'Rua X, 10'
        self.unit.whatsapp = '62999998888'
        self.unit.save()

    def test_display_price(self):
        fixed = TestDataFactory.create_product(base_price=Decimal('29.90'))
        self.assertEqual(display_price(fixed), 'R$ 29,90')

        variable = TestDataFactory.create_product(price_type='variable')
        self.assertEqual(display_price(variable), 'Preço variável')
        TestDataFactory.create_variation(variable, price=Decimal('59.90'))
        TestDataFactory.create_variation(variable, price=Decimal('49.90'), order_index=1)
        self.assertEqual(display_price(variable), 'A partir de R$ 49,90')

    def test_footer_links(self):
        links = footer_links(self.unit)
        self.assertEqual([l['key'] for l in links], ['instagram', 'maps', 'whatsapp'])
        self.assertEqual(links[0]['href'], 'https://instagram.com/pedacci')
        self.assertEqual(links[1]['href'], 'https://www.google.com/maps/search/?api=1&query=Rua%20X%2C%2010')
        self.assertEqual(links[2]['href'], 'https://wa.me/5562999998888')

    def test_footer_links_prefer_maps_url_and_skip_empty(self):
        self.unit.maps_url = 'https://maps.app.goo.gl/abc'
        self.unit.instagram = ''
        self.unit.whatsapp = ''
        links = footer_links(self.unit)
        self.assertEqual(links, [{'key': 'maps', 'label': 'Maps', 'href': 'https://maps.app.goo.gl/abc'}])

    def test_whatsapp_link_keeps_country_code(self):
        self.assertEqual(whatsapp_link('https://wa.me/5562999998888'), 'https://wa.me/5562999998888')
        self.assertEqual(whatsapp_link(''), '')

    def test_build_public_menu(self):
        pizzas = TestDataFactory.create_category(unit=self.unit, name='Pizzas', order_index=1)
        destaques = TestDataFactory.create_category(unit=self.unit, name='Destaques', order_index=2)
        bebidas = TestDataFactory.create_category(unit=self.unit, name='Bebidas', order_index=3)
        TestDataFactory.create_category(unit=self.unit, name='Vazia', order_index=4)

        TestDataFactory.create_product(category=pizzas, name='Margherita')
        TestDataFactory.create_product(category=destaques, name='Combo')
        TestDataFactory.create_product(category=bebidas, name='Suco', is_active=False)

        menu = build_public_menu(self.unit)
        self.assertEqual(menu['featured']['category'], destaques)
        self.assertEqual([s['category'].name for s in menu['categories']], ['Pizzas'])
        self.assertEqual(menu['categories'][0]['slug'], 'pizzas')
        self.assertEqual(menu['categories'][0]['products'][0].display_price, 'R$ 29,90')

    def test_featured_falls_back_to_first_section(self):
        sections = [
            {'category': Category(name='Pizzas'), 'slug': 'pizzas', 'products': []},
            {'category': Category(name='Bebidas'), 'slug': 'bebidas', 'products': []},
        ]
        self.assertIs(find_featured_section(sections), sections[0])
        self.assertIsNone(find_featured_section([]))

    def test_featured_matches_singular_name_or_slug(self):
        by_name = [
            {'category': Category(name='Pizzas'), 'slug': 'pizzas', 'products': []},
            {'category': Category(name=' Destaque '), 'slug': 'destaque', 'products': []},
        ]
        self.assertIs(find_featured_section(by_name), by_name[1])

        pizzas = TestDataFactory.create_category(unit=self.unit, name='Pizzas', order_index=0)
        destaque = TestDataFactory.create_category(unit=self.unit, name='Destaque!', order_index=1)
        TestDataFactory.create_product(category=pizzas, name='Margherita')
        TestDataFactory.create_product(category=destaque, name='Combo')

        menu = build_public_menu(self.unit)
        self.assertEqual(menu['featured']['category'], destaque)
        self.assertEqual(menu['featured']['slug'], 'destaque')
        self.assertEqual([s['category'] for s in menu['categories']], [pizzas])

    def test_blank_category_names_are_dropped(self):
        blank = TestDataFactory.create_category(unit=self.unit, name='   ', order_index=0)
        pizzas = TestDataFactory.create_category(unit=self.unit, name='Pizzas', order_index=1)
        TestDataFactory.create_product(category=blank, name='Fantasma')
        TestDataFactory.create_product(category=pizzas, name='Margherita')

        menu = build_public_menu(self.unit)
        sections = [menu['featured']] + menu['categories']
        self.assertEqual([s['category'] for s in sections], [pizzas])
        self.assertEqual([p.name for p in sections[0]['products']], ['Margherita'])

    def test_get_public_unit_normalizes_slug(self):
        self.assertEqual(get_public_unit(f'  {self.unit.slug.upper()} '), self.unit)
        with self.assertRaises(UnitNotFound):
            get_public_unit('nao-existe')


class PublicMenuAPITests(TestCase):
    """Test the anonymous public menu endpoint"""

    def setUp(self):
        _, self.restaurant, self.unit = TestDataFactory.create_tenant()
        self.client = AuthenticatedAPIClient()
        destaques = TestDataFactory.create_category(unit=self.unit, name='Destaques', order_index=0)
        pizzas = TestDataFactory.create_category(unit=self.unit, name='Pizzas', order_index=1)
        TestDataFactory.create_product(category=destaques, name='Combo')
        pizza = TestDataFactory.create_product(category=pizzas, name='Margherita', price_type='variable')
        TestDataFactory.create_variation(pizza, name='Grande', price=Decimal('59.90'), order_index=1)
        TestDataFactory.create_variation(pizza, name='Média', price=Decimal('49.90'), order_index=0)

    def test_public_menu(self):
        response = self.client.get(f'/api/public/units/{self.unit.slug}/menu/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['unit']['restaurant_name'], self.restaurant.name)
        self.assertEqual(response.data['featured']['name'], 'Destaques')
        self.assertEqual(len(response.data['categories']), 1)

        pizza = response.data['categories'][0]['products'][0]
        self.assertEqual(pizza['display_price'], 'A partir de R$ 49,90')
        self.assertEqual([v['name'] for v in pizza['variations']], ['Média', 'Grande'])
        self.assertEqual(pizza['variations'][0]['display_price'], 'R$ 49,90')

    def test_public_menu_unknown_slug(self):
        response = self.client.get('/api/public/units/nao-existe/menu/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Resource not found')
        self.assertEqual(response.data['details']['detail'], 'Unidade não encontrada')
