# products/tests/test_products.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase
from rest_framework.test import APIClient

from permissions.roles import ROLE_ADMIN
from products.models import Product

User = get_user_model()


def make_product(**overrides):
    data = {
        "name": "Sony WH-1000XM5",
        "description": "Noise canceling headphones",
        "brand": "Sony",
        "category": Product.Category.HEADPHONES,
        "price": Decimal("29990.00"),
        "original_price": Decimal("34990.00"),
        "stock": 50,
    }
    data.update(overrides)
    return Product.objects.create(**data)


class ProductModelTests(TestCase):
    def test_product_string_representation(self):
        product = make_product()
        self.assertIn("Sony WH-1000XM5", str(product))

    def test_in_stock_flag(self):
        self.assertTrue(make_product(stock=1).in_stock)
        self.assertFalse(make_product(name="Sold out", stock=0).in_stock)


class PublicCatalogApiTests(TestCase):
    """
    GUARANTEES:
    - Anyone can browse active products
    - Inactive products are hidden from the storefront
    - Filters narrow the listing
    """

    def setUp(self):
        self.client = APIClient()
        self.headphones = make_product(is_featured=True)
        self.laptop = make_product(
            name="Dell XPS 15",
            brand="Dell",
            category=Product.Category.LAPTOPS,
            price=Decimal("149999.00"),
            stock=20,
        )
        self.hidden = make_product(name="Old model", is_active=False)

    def test_anonymous_list_returns_active_products(self):
        res = self.client.get("/api/products/")

        self.assertEqual(res.status_code, 200)
        ids = {row["id"] for row in res.data}
        self.assertEqual(ids, {str(self.headphones.id), str(self.laptop.id)})

    def test_filter_by_category(self):
        res = self.client.get("/api/products/", {"category": "Laptops"})

        self.assertEqual(res.status_code, 200)
        self.assertEqual([row["name"] for row in res.data], ["Dell XPS 15"])

    def test_filter_by_featured(self):
        res = self.client.get("/api/products/", {"is_featured": "true"})
        self.assertEqual([row["id"] for row in res.data], [str(self.headphones.id)])

    def test_search(self):
        res = self.client.get("/api/products/", {"q": "xps"})
        self.assertEqual([row["id"] for row in res.data], [str(self.laptop.id)])

    def test_inactive_product_detail_is_hidden(self):
        res = self.client.get(f"/api/products/{self.hidden.id}/")
        self.assertEqual(res.status_code, 404)

    def test_anonymous_cannot_create(self):
        res = self.client.post(
            "/api/products/",
            {"name": "Hack", "description": "x", "brand": "x", "category": "Gaming", "price": "1.00"},
            format="json",
        )
        self.assertEqual(res.status_code, 401)


class AdminCatalogApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(
            email="admin@example.com", password="x", role=ROLE_ADMIN
        )
        self.customer = User.objects.create_user(email="buyer@example.com", password="x")
        self.product = make_product(stock=5)

    def test_customer_cannot_create(self):
        self.client.force_authenticate(self.customer)
        res = self.client.post(
            "/api/products/",
            {"name": "PS5", "description": "Console", "brand": "Sony", "category": "Gaming", "price": "54990.00"},
            format="json",
        )
        self.assertEqual(res.status_code, 403)

    def test_admin_creates_product_with_opening_stock(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post(
            "/api/products/",
            {
                "name": "PlayStation 5",
                "description": "Console",
                "brand": "Sony",
                "category": "Gaming",
                "price": "54990.00",
                "images": ["https://example.com/ps5.jpg"],
                "stock": 12,
            },
            format="json",
        )

        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(Product.objects.get(id=res.data["id"]).stock, 12)

    def test_admin_cannot_overwrite_stock_directly(self):
        self.client.force_authenticate(self.admin)
        res = self.client.patch(
            f"/api/products/{self.product.id}/", {"stock": 100}, format="json"
        )

        self.assertEqual(res.status_code, 400)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 5)

    def test_admin_adjusts_stock(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post(
            f"/api/products/{self.product.id}/adjust-stock/", {"delta": 10}, format="json"
        )

        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(res.data["stock"], 15)

    def test_adjust_stock_below_zero_is_conflict(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post(
            f"/api/products/{self.product.id}/adjust-stock/", {"delta": -6}, format="json"
        )

        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["error"]["code"], "INSUFFICIENT_STOCK")
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 5)

    def test_admin_sees_inactive_products(self):
        make_product(name="Retired", is_active=False)
        self.client.force_authenticate(self.admin)

        res = self.client.get("/api/products/")
        self.assertEqual(len(res.data), 2)


class SeedProductsCommandTests(TestCase):
    def test_seed_products_is_idempotent(self):
        call_command("seed_products")
        first = Product.objects.count()
        call_command("seed_products")

        self.assertGreater(first, 0)
        self.assertEqual(Product.objects.count(), first)
        self.assertTrue(Product.objects.filter(is_featured=True).exists())
