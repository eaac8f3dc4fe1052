from datetime import date, datetime
from types import SimpleNamespace
from urllib.parse import unquote

from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from products.models import Product
from shops.models import Shop
from .models import Order
from .stats import order_stats

User = get_user_model()


def make_shop(email="awa@example.com", slug="chez-awa"):
    owner = User.objects.create_user(email=email, password="boutique2025", name="Awa")
    shop = Shop.objects.create(owner=owner, name="Chez Awa", activity="Mode", city="Dakar", slug=slug)
    return owner, shop


class OrderModelTests(TestCase):
    def setUp(self):
        _, self.shop = make_shop()

    def test_total_follows_price_and_quantity(self):
        order = Order.objects.create(
            shop=self.shop, client_name="Fatou", product_name="Robe", quantity=3, unit_price=5000,
        )
        self.assertEqual(order.total_amount, 15000)

        order.quantity = 4
        order.save(update_fields=["quantity"])
        order.refresh_from_db()
        self.assertEqual(order.total_amount, 20000)

    def test_transition_table(self):
        S = Order.Status
        self.assertTrue(Order.can_transition(S.PENDING, S.PAID))
        self.assertTrue(Order.can_transition(S.PENDING, S.CANCELLED))
        self.assertTrue(Order.can_transition(S.PAID, S.DELIVERED))
        self.assertTrue(Order.can_transition(S.PAID, S.CANCELLED))
        self.assertFalse(Order.can_transition(S.PAID, S.PENDING))
        self.assertFalse(Order.can_transition(S.PENDING, S.DELIVERED))
        for terminal in (S.DELIVERED, S.CANCELLED):
            for target in S.values:
                self.assertFalse(Order.can_transition(terminal, target))


class OrderStatsTests(SimpleTestCase):
    def test_revenue_counts_paid_and_delivered(self):
        tz = timezone.get_current_timezone()
        this_month = timezone.make_aware(datetime(2025, 3, 10, 12), tz)
        last_month = timezone.make_aware(datetime(2025, 2, 27, 12), tz)
        orders = [
            SimpleNamespace(status="pending", total_amount=1000, created_at=this_month),
            SimpleNamespace(status="paid", total_amount=2000, created_at=this_month),
            SimpleNamespace(status="delivered", total_amount=4000, created_at=last_month),
            SimpleNamespace(status="cancelled", total_amount=8000, created_at=this_month),
        ]
        stats = order_stats(orders, today=date(2025, 3, 15))
        self.assertEqual(stats["total"], 4)
        self.assertEqual(stats["by_status"], {"pending": 1, "paid": 1, "delivered": 1, "cancelled": 1})
        self.assertEqual(stats["total_revenue"], 6000)
        self.assertEqual(stats["month_revenue"], 2000)


class OrderApiTests(APITestCase):
    def setUp(self):
        self.owner, self.shop = make_shop()
        self.product = Product.objects.create(shop=self.shop, name="Robe wax", price=15000, stock=4)
        self.list_url = reverse("order-list")
        self.client.force_authenticate(self.owner)

    def _order(self, **kwargs):
        data = dict(shop=self.shop, client_name="Fatou", client_phone="+221 77 000 00 00",
                    product_name="Robe", quantity=1, unit_price=1000)
        data.update(kwargs)
        return Order.objects.create(**data)

    def test_create_defaults_from_product(self):
        response = self.client.post(self.list_url, {
            "client_name": "Fatou",
            "product": self.product.id,
            "quantity": 2,
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["product_name"], "Robe wax")
        self.assertEqual(response.data["unit_price"], 15000)
        self.assertEqual(response.data["total_amount"], 30000)
        self.assertEqual(response.data["status"], "pending")
        self.assertEqual(response.data["allowed_transitions"], ["paid", "cancelled"])

    def test_create_in_any_status(self):
        response = self.client.post(self.list_url, {
            "client_name": "Fatou", "product_name": "Sac", "unit_price": 500, "status": "delivered",
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["status"], "delivered")

    def test_create_validation(self):
        response = self.client.post(self.list_url, {
            "client_name": "Fatou", "product_name": "Sac", "unit_price": 500, "quantity": 0,
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("quantity", response.data)

        response = self.client.post(self.list_url, {"client_name": "Fatou", "product_name": "Sac"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("unit_price", response.data)

    def test_product_from_another_shop_is_rejected(self):
        _, other_shop = make_shop("moussa@example.com", "moussa")
        foreign = Product.objects.create(shop=other_shop, name="Téléphone", price=50000)
        response = self.client.post(self.list_url, {"client_name": "Fatou", "product": foreign.id}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("product", response.data)

    def test_edit_recomputes_total_and_keeps_status(self):
        order = self._order(quantity=2, unit_price=1000)
        response = self.client.patch(reverse("order-detail", args=[order.id]), {
            "quantity": 5, "status": "delivered",
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_amount"], 5000)
        self.assertEqual(response.data["status"], "pending")

    def test_forward_workflow(self):
        order = self._order()
        response = self.client.post(reverse("order-pay", args=[order.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "paid")

        response = self.client.post(reverse("order-deliver", args=[order.id]))
        self.assertEqual(response.data["status"], "delivered")
        self.assertEqual(response.data["allowed_transitions"], [])

    def test_terminal_states_are_final(self):
        order = self._order(status=Order.Status.DELIVERED)
        response = self.client.post(reverse("order-cancel", args=[order.id]))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        order.refresh_from_db()
        self.assertEqual(order.status, Order.Status.DELIVERED)

    def test_generic_status_endpoint_rejects_backward_moves(self):
        order = self._order(status=Order.Status.PAID)
        url = reverse("order-change-status", args=[order.id])

        response = self.client.patch(url, {"status": "pending"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.patch(url, {"status": "cancelled"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "cancelled")

    def test_list_filters(self):
        self._order(client_name="Fatou Sow", product_name="Robe")
        self._order(client_name="Ibrahim", product_name="Sac cuir", status=Order.Status.PAID)
        self._order(client_name="Mariam", client_phone="0612345678", product_name="Parfum")

        response = self.client.get(self.list_url, {"status": "paid"})
        self.assertEqual([o["client_name"] for o in response.data], ["Ibrahim"])

        response = self.client.get(self.list_url, {"search": "SAC"})
        self.assertEqual([o["client_name"] for o in response.data], ["Ibrahim"])

        response = self.client.get(self.list_url, {"search": "061234"})
        self.assertEqual([o["client_name"] for o in response.data], ["Mariam"])

        response = self.client.get(self.list_url, {"status": "all"})
        self.assertEqual(len(response.data), 3)
        self.assertEqual(response.data[0]["client_name"], "Mariam")

    def test_stats_endpoint(self):
        self._order(unit_price=1000, status=Order.Status.PAID)
        self._order(unit_price=2000, status=Order.Status.PENDING)
        response = self.client.get(reverse("order-stats"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_revenue"], 1000)
        self.assertEqual(response.data["by_status"]["pending"], 1)

    def test_reminder_link(self):
        order = self._order(client_name="Fatou", quantity=2, unit_price=7500)
        response = self.client.get(reverse("order-reminder", args=[order.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["whatsapp_url"].startswith("https://wa.me/221770000000?text="))
        self.assertIn("15 000 FCFA", unquote(response.data["whatsapp_url"]))

    def test_reminder_refused_without_phone_or_when_terminal(self):
        no_phone = self._order(client_phone=None)
        response = self.client.get(reverse("order-reminder", args=[no_phone.id]))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        done = self._order(status=Order.Status.CANCELLED)
        response = self.client.get(reverse("order-reminder", args=[done.id]))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_orders_of_other_shops_are_hidden(self):
        _, other_shop = make_shop("moussa@example.com", "moussa")
        foreign = Order.objects.create(shop=other_shop, client_name="X", product_name="Y", unit_price=10)
        response = self.client.post(reverse("order-pay", args=[foreign.id]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        foreign.refresh_from_db()
        self.assertEqual(foreign.status, Order.Status.PENDING)
