import io
import shutil
import tempfile
from types import SimpleNamespace
from unittest import mock
from urllib.parse import unquote

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import IntegrityError, transaction
from django.test import SimpleTestCase, override_settings
from django.urls import reverse
from PIL import Image
from rest_framework import status
from rest_framework.test import APITestCase

from orders.models import Order
from products.models import Product
from .models import Shop, DELETED_NAME
from .utils.metadata import product_metadata, shop_metadata
from .utils.slug import generate_slug, is_valid_slug, unique_slug
from .utils.whatsapp import format_amount, whatsapp_link

User = get_user_model()
MEDIA_ROOT = tempfile.mkdtemp()


def make_image(name="shop.png"):
    buffer = io.BytesIO()
    Image.new("RGB", (10, 10), "blue").save(buffer, format="PNG")
    return SimpleUploadedFile(name, buffer.getvalue(), content_type="image/png")


class SlugTests(SimpleTestCase):
    def test_generate_slug(self):
        self.assertEqual(generate_slug("Diabaté Sékou"), "diabate-sekou")
        self.assertEqual(generate_slug("  Chez   Awa & Fils!! "), "chez-awa-fils")
        self.assertTrue(generate_slug("!!").startswith("boutique-"))
        self.assertLessEqual(len(generate_slug("x" * 80)), 50)

    def test_unique_slug_appends_counter(self):
        taken = {"chez-awa", "chez-awa-2"}
        self.assertEqual(unique_slug("Chez Awa", exists=taken.__contains__), "chez-awa-3")
        self.assertEqual(unique_slug("Autre", exists=taken.__contains__), "autre")

    def test_is_valid_slug(self):
        self.assertTrue(is_valid_slug("chez-awa-2"))
        self.assertFalse(is_valid_slug("Chez Awa"))
        self.assertFalse(is_valid_slug("-awa"))
        self.assertFalse(is_valid_slug(""))


@override_settings(SITE_BASE_URL="https://shopshap.example", SITE_NAME="ShopShap")
class LinkAndMetadataTests(SimpleTestCase):
    def setUp(self):
        self.shop = SimpleNamespace(
            name="Chez Awa", activity="Mode", city="Dakar", slug="chez-awa", description="",
        )
        self.product = SimpleNamespace(
            id=7, name="Robe wax", price=15000, stock=0, description="", category="",
        )

    def test_whatsapp_link(self):
        self.assertEqual(format_amount(1500000), "1 500 000")
        self.assertEqual(whatsapp_link("+221 70-123", "Salut & merci"), "https://wa.me/22170123?text=Salut%20%26%20merci")
        self.assertEqual(whatsapp_link(None, "a"), "https://wa.me/?text=a")

    @override_settings(GOOGLE_SITE_VERIFICATION="abc123")
    def test_shop_metadata(self):
        meta = shop_metadata(self.shop, "https://cdn/photo.jpg")
        self.assertEqual(meta["title"], "Chez Awa - Mode à Dakar | ShopShap")
        self.assertEqual(meta["canonical"], "https://shopshap.example/chez-awa")
        self.assertEqual(meta["json_ld"]["@type"], "Store")
        self.assertEqual(meta["verification"], {"google": "abc123"})

    def test_product_metadata(self):
        meta = product_metadata(self.shop, self.product)
        self.assertEqual(meta["canonical"], "https://shopshap.example/chez-awa/product/7")
        self.assertEqual(meta["other"]["product:availability"], "out of stock")
        self.assertEqual(meta["json_ld"]["offers"]["priceCurrency"], "XOF")
        self.assertEqual(meta["open_graph"]["images"], [])


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class ShopApiTests(APITestCase):
    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        self.owner = User.objects.create_user(
            email="awa@example.com", password="boutique2025", name="Awa", phone="+221701234567",
        )
        self.client.force_authenticate(self.owner)
        self.onboarding_url = reverse("shop-onboarding")
        self.me_url = reverse("shop-me")

    def _onboard(self, **extra):
        data = {"name": "Chez Awa", "activity": "Mode", "city": "Dakar"}
        data.update(extra)
        return self.client.post(self.onboarding_url, data, format="multipart")

    def test_onboarding_creates_shop_with_slug(self):
        response = self._onboard(photo=make_image(), theme="ocean")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["shop"]["slug"], "chez-awa")
        self.assertEqual(response.data["shop"]["theme"], "ocean")
        self.assertIsNotNone(response.data["shop"]["photo_url"])

        # one shop per owner
        response = self._onboard()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_onboarding_picks_free_slug(self):
        other = User.objects.create_user(email="autre@example.com", password="boutique2025", name="Autre")
        Shop.objects.create(owner=other, name="Chez Awa", activity="Mode", city="Abidjan", slug="chez-awa")

        response = self._onboard()
        self.assertEqual(response.data["shop"]["slug"], "chez-awa-2")

    def test_onboarding_requires_fields(self):
        response = self._onboard(city="   ")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("city", response.data)

    def test_update_theme_and_slug(self):
        self._onboard()
        response = self.client.patch(self.me_url, {"theme": "luxury", "slug": "awa-couture"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["theme"], "luxury")
        self.assertEqual(response.data["slug"], "awa-couture")

        response = self.client.patch(self.me_url, {"theme": "neon"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.patch(self.me_url, {"slug": "Awa Couture"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_slug_clash_is_rejected(self):
        other = User.objects.create_user(email="autre@example.com", password="boutique2025", name="Autre")
        Shop.objects.create(owner=other, name="Prise", activity="Mode", city="Dakar", slug="prise")
        self._onboard()

        response = self.client.patch(self.me_url, {"slug": "prise"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("slug", response.data)

    def test_slug_uniqueness_is_enforced_by_database(self):
        other = User.objects.create_user(email="autre@example.com", password="boutique2025", name="Autre")
        Shop.objects.create(owner=other, name="Prise", activity="Mode", city="Dakar", slug="prise")
        with self.assertRaises(IntegrityError), transaction.atomic():
            Shop.objects.create(owner=self.owner, name="Prise", activity="Mode", city="Dakar", slug="prise")

    @mock.patch("mediafiles.tasks.remove_stored_files.delay")
    def test_photo_replacement_removes_previous_file(self, delay):
        self._onboard(photo=make_image("old.png"))
        old_name = Shop.objects.get(owner=self.owner).photo.name

        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.patch(self.me_url, {"photo": make_image("new.png")}, format="multipart")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        delay.assert_called_once_with([old_name])

    def test_soft_delete(self):
        self._onboard()
        response = self.client.delete(self.me_url)
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

        shop = Shop.objects.get(owner=self.owner)
        self.assertEqual(shop.name, DELETED_NAME)
        self.assertEqual(shop.city, "[SUPPRIMÉ]")
        self.assertTrue(shop.description.startswith("Compte supprimé le "))
        self.assertTrue(shop.is_deleted)

        self.owner.refresh_from_db()
        self.assertFalse(self.owner.is_active)

        # the public page is gone
        self.client.force_authenticate(None)
        response = self.client.get(reverse("public-shop", args=[shop.slug]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_dashboard_and_profile_stats(self):
        self._onboard()
        shop = Shop.objects.get(owner=self.owner)
        Product.objects.create(shop=shop, name="A", price=1000, stock=1)
        Product.objects.create(shop=shop, name="B", price=1000, stock=9)
        for i, state in enumerate(["pending", "paid", "delivered", "cancelled"]):
            Order.objects.create(shop=shop, client_name=f"C{i}", product_name="A", unit_price=1000, status=state)

        response = self.client.get(reverse("shop-dashboard"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_orders"], 4)
        self.assertEqual(response.data["pending_orders"], 1)
        self.assertEqual(response.data["total_revenue"], 2000)
        self.assertEqual(response.data["month_revenue"], 2000)
        self.assertEqual(response.data["product_count"], 2)
        self.assertEqual(response.data["low_stock_count"], 1)
        self.assertEqual(len(response.data["recent_orders"]), 3)

        response = self.client.get(reverse("shop-me-stats"))
        self.assertEqual(response.data["product_count"], 2)
        self.assertEqual(response.data["order_count"], 4)
        self.assertEqual(response.data["revenue"], 2000)

    def test_sold_out_products_are_not_low_stock(self):
        self._onboard()
        shop = Shop.objects.get(owner=self.owner)
        Product.objects.create(shop=shop, name="A", price=1000, stock=0)
        Product.objects.create(shop=shop, name="B", price=1000, stock=2)
        Product.objects.create(shop=shop, name="C", price=1000, stock=3)
        Product.objects.create(shop=shop, name="D", price=1000, stock=None)

        response = self.client.get(reverse("shop-dashboard"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["product_count"], 4)
        self.assertEqual(response.data["low_stock_count"], 1)

    def test_me_without_shop(self):
        response = self.client.get(self.me_url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("shop", response.data)


class PublicStorefrontTests(APITestCase):
    def setUp(self):
        owner = User.objects.create_user(
            email="awa@example.com", password="boutique2025", name="Awa", phone="+221701234567",
        )
        self.shop = Shop.objects.create(owner=owner, name="Chez Awa", activity="Mode", city="Dakar", slug="chez-awa")
        self.robe = Product.objects.create(shop=self.shop, name="Robe wax", price=15000, stock=3)
        self.sac = Product.objects.create(shop=self.shop, name="Sac", price=8000, stock=0)
        self.url = reverse("public-shop", args=["chez-awa"])

    def test_public_shop_page(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["shop"]["name"], "Chez Awa")
        self.assertEqual(len(response.data["products"]), 2)
        self.assertEqual(response.data["summary"], {"count": 2, "available": 1, "min_price": 8000})
        self.assertTrue(response.data["whatsapp_url"].startswith("https://wa.me/221701234567?text="))
        self.assertEqual(response.data["metadata"]["json_ld"]["@type"], "Store")

    def test_public_filters(self):
        response = self.client.get(self.url, {"filter": "available"})
        self.assertEqual([p["name"] for p in response.data["products"]], ["Robe wax"])

        response = self.client.get(self.url, {"sort": "price-low"})
        self.assertEqual([p["name"] for p in response.data["products"]], ["Sac", "Robe wax"])

        response = self.client.get(self.url, {"search": "WAX"})
        self.assertEqual([p["name"] for p in response.data["products"]], ["Robe wax"])

    def test_unknown_slug(self):
        response = self.client.get(reverse("public-shop", args=["inconnue"]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_public_product_page(self):
        response = self.client.get(reverse("public-product", args=["chez-awa", self.robe.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["product"]["name"], "Robe wax")
        self.assertIsNone(response.data["product"]["photo_url"])
        self.assertIn("15 000 FCFA", unquote(response.data["whatsapp_url"]))
        self.assertIn(f"/chez-awa/product/{self.robe.id}", unquote(response.data["whatsapp_url"]))
        self.assertEqual(response.data["metadata"]["json_ld"]["offers"]["price"], 15000)

    def test_product_of_another_shop(self):
        other = User.objects.create_user(email="moussa@example.com", password="boutique2025", name="Moussa")
        other_shop = Shop.objects.create(owner=other, name="Moussa", activity="Tech", city="Bamako", slug="moussa")
        foreign = Product.objects.create(shop=other_shop, name="Téléphone", price=50000)

        response = self.client.get(reverse("public-product", args=["chez-awa", foreign.id]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
