import io
import shutil
import tempfile
from datetime import timedelta
from types import SimpleNamespace
from unittest import mock

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from PIL import Image
from rest_framework import status
from rest_framework.test import APITestCase

from shops.models import Shop
from .catalog import apply_catalog, catalog_summary, filter_products, owner_catalog, search_products, sort_products
from .models import Product

User = get_user_model()
MEDIA_ROOT = tempfile.mkdtemp()


def make_image(name="photo.png"):
    buffer = io.BytesIO()
    Image.new("RGB", (10, 10), "red").save(buffer, format="PNG")
    return SimpleUploadedFile(name, buffer.getvalue(), content_type="image/png")


def item(pk, name, price, stock=None, description="", category="", age_days=0):
    return SimpleNamespace(
        pk=pk, name=name, price=price, stock=stock,
        description=description, category=category,
        created_at=timezone.now() - timedelta(days=age_days),
    )


class CatalogTests(SimpleTestCase):
    def setUp(self):
        self.products = [
            item(1, "Robe wax", 15000, stock=5, category="Mode", age_days=3),
            item(2, "boubou brodé", 30000, stock=0, description="Coton", age_days=2),
            item(3, "Sac cuir", 8000, stock=2, category="Accessoires", age_days=1),
            item(4, "Parfum", 12000, stock=None, description="Senteur ROBE de nuit", age_days=0),
        ]

    def test_available_keeps_positive_stock_only(self):
        self.assertEqual([p.pk for p in filter_products(self.products, "available")], [1, 3])

    def test_lowstock_excludes_zero_and_untracked(self):
        self.assertEqual([p.pk for p in filter_products(self.products, "lowstock")], [3])

    def test_popular_orders_by_price(self):
        self.assertEqual([p.pk for p in filter_products(self.products, "popular")], [2, 1, 4, 3])

    def test_search_is_case_insensitive_substring(self):
        self.assertEqual([p.pk for p in search_products(self.products, "ROBE")], [1, 4])
        self.assertEqual([p.pk for p in search_products(self.products, "accessoires")], [3])
        self.assertEqual(len(search_products(self.products, "  ")), 4)

    def test_sorts(self):
        self.assertEqual([p.pk for p in sort_products(self.products, "newest")], [4, 3, 2, 1])
        self.assertEqual([p.pk for p in sort_products(self.products, "price-low")], [3, 4, 1, 2])
        self.assertEqual([p.pk for p in sort_products(self.products, "name")], [2, 4, 1, 3])

    def test_apply_catalog_pipeline_and_cap(self):
        result = apply_catalog(self.products, "available", "price-high")
        self.assertEqual([p.pk for p in result], [1, 3])

        # unknown keys fall back to all/newest
        result = apply_catalog(self.products, "bogus", "bogus", cap=2)
        self.assertEqual([p.pk for p in result], [4, 3])

    @override_settings(PRODUCT_DISPLAY_CAP=1)
    def test_default_cap_from_settings(self):
        self.assertEqual(len(apply_catalog(self.products)), 1)

    def test_owner_catalog(self):
        result = owner_catalog(self.products, low_stock=True, sort_key="price")
        self.assertEqual([p.pk for p in result], [2, 3])

    def test_summary(self):
        self.assertEqual(catalog_summary(self.products), {"count": 4, "available": 2, "min_price": 8000})
        self.assertEqual(catalog_summary([]), {"count": 0, "available": 0, "min_price": 0})


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class ProductApiTests(APITestCase):
    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        self.owner = User.objects.create_user(email="awa@example.com", password="boutique2025", name="Awa")
        self.shop = Shop.objects.create(owner=self.owner, name="Chez Awa", activity="Mode", city="Dakar", slug="chez-awa")
        self.list_url = reverse("products-list")
        self.client.force_authenticate(self.owner)

    def test_create_with_photo_and_list(self):
        response = self.client.post(self.list_url, {
            "name": "Robe wax",
            "price": 15000,
            "stock": 3,
            "photo": make_image(),
        }, format="multipart")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn("/api/media/signed/", response.data["photo_url"])
        self.assertIsNone(response.data["video_url"])
        self.assertNotIn("photo", response.data)

        product = Product.objects.get(pk=response.data["id"])
        self.assertTrue(product.photo.name.startswith("shop-photos/products/"))

        response = self.client.get(self.list_url, {"search": "wax"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_price_must_be_positive(self):
        response = self.client.post(self.list_url, {"name": "Robe", "price": 0}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("price", response.data)

    def test_low_stock_list(self):
        Product.objects.create(shop=self.shop, name="A", price=100, stock=1)
        Product.objects.create(shop=self.shop, name="B", price=100, stock=10)
        Product.objects.create(shop=self.shop, name="C", price=100, stock=None)

        response = self.client.get(self.list_url, {"low_stock": "true"})
        self.assertEqual([p["name"] for p in response.data], ["A"])

    def test_other_shop_products_are_hidden(self):
        other = User.objects.create_user(email="moussa@example.com", password="boutique2025", name="Moussa")
        other_shop = Shop.objects.create(owner=other, name="Moussa Shop", activity="Tech", city="Bamako", slug="moussa")
        foreign = Product.objects.create(shop=other_shop, name="Téléphone", price=50000)

        response = self.client.get(reverse("products-detail", args=[foreign.id]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_owner_without_shop(self):
        newcomer = User.objects.create_user(email="new@example.com", password="boutique2025", name="New")
        self.client.force_authenticate(newcomer)
        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("shop", response.data)

    @mock.patch("mediafiles.tasks.remove_stored_files.delay")
    def test_replacing_photo_schedules_old_file_removal(self, delay):
        product = Product.objects.create(shop=self.shop, name="Robe", price=1000, photo=make_image("old.png"))
        old_name = product.photo.name

        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.patch(
                reverse("products-detail", args=[product.id]),
                {"photo": make_image("new.png")},
                format="multipart",
            )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        delay.assert_called_once_with([old_name])

    @mock.patch("mediafiles.tasks.remove_stored_files.delay")
    def test_delete_removes_media_after_commit(self, delay):
        product = Product.objects.create(shop=self.shop, name="Robe", price=1000, photo=make_image())
        name = product.photo.name

        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.delete(reverse("products-detail", args=[product.id]))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Product.objects.filter(pk=product.id).exists())
        delay.assert_called_once_with([name])

    @mock.patch("mediafiles.tasks.remove_stored_files.delay", side_effect=OSError("broker down"))
    def test_delete_succeeds_when_broker_is_down(self, delay):
        product = Product.objects.create(shop=self.shop, name="Robe", price=1000, photo=make_image())

        with self.assertLogs("mediafiles.tasks", level="WARNING"):
            with self.captureOnCommitCallbacks(execute=True):
                response = self.client.delete(reverse("products-detail", args=[product.id]))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Product.objects.filter(pk=product.id).exists())

    def test_replaced_photo_is_scheduled_after_the_row_is_written(self):
        product = Product.objects.create(shop=self.shop, name="Robe", price=1000, photo=make_image("old.png"))
        old_name = product.photo.name
        seen = []

        def record(*names):
            stored = Product.objects.filter(pk=product.pk).values_list("photo", flat=True).get()
            seen.append((names, stored))

        with mock.patch("mediafiles.cleanup.schedule_file_removal", side_effect=record):
            product.photo = make_image("new.png")
            product.save()

        scheduled = [(names, stored) for names, stored in seen if names]
        self.assertEqual(len(scheduled), 1)
        names, stored = scheduled[0]
        self.assertEqual(names, (old_name,))
        self.assertEqual(stored, product.photo.name)
        self.assertNotEqual(stored, old_name)
