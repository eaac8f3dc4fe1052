from datetime import timedelta
from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from .models import WhatsAppVerification
from .services.whatsapp_auth import VerificationError, normalize_phone_number

User = get_user_model()

TWILIO_SETTINGS = {
    "TWILIO_ACCOUNT_SID": "ACtest",
    "TWILIO_AUTH_TOKEN": "secret",
}


def twilio_response(status_code=201, payload=None):
    resp = mock.Mock()
    resp.status_code = status_code
    resp.content = b"{}"
    resp.json.return_value = payload if payload is not None else {"sid": "SM123"}
    return resp


class OwnerAuthTests(APITestCase):
    def setUp(self):
        self.signup_url = reverse('account-signup')  # /api/accounts/signup/
        self.login_url = reverse('account-login')    # /api/accounts/login/
        self.me_url = reverse('account-me')          # /api/accounts/me/
        self.password_url = reverse('account-password')
        self.token_refresh_url = reverse('token_refresh')
        self.logout_url = reverse('logout')

        self.user_data = {
            "email": "awa@example.com",
            "password": "boutique2025",
            "password2": "boutique2025",
            "name": "Awa Diop",
            "phone": "+221701234567",
        }

    def test_signup_login_me_logout_flow(self):
        # signup
        response = self.client.post(self.signup_url, self.user_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('accessToken', response.data['auth'])
        self.assertFalse(response.data['user']['has_shop'])

        # login
        response = self.client.post(self.login_url, {
            "email": self.user_data['email'],
            "password": self.user_data['password'],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        access_token = response.data['auth']['accessToken']
        refresh_token = response.data['auth']['refreshToken']

        # me (authenticated)
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {access_token}')
        response = self.client.get(self.me_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['email'], self.user_data['email'])
        self.assertIsNone(response.data['shop_slug'])

        # refresh
        response = self.client.post(self.token_refresh_url, {"refresh": refresh_token}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

        # logout blacklists the refresh token
        response = self.client.post(self.logout_url, {"refresh": refresh_token}, format='json')
        self.assertEqual(response.status_code, status.HTTP_205_RESET_CONTENT)

        response = self.client.post(self.token_refresh_url, {"refresh": refresh_token}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_signup_password_mismatch(self):
        data = dict(self.user_data, password2="autrechose")
        response = self.client.post(self.signup_url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data)

    def test_login_wrong_password(self):
        User.objects.create_user(email="awa@example.com", password="boutique2025", name="Awa")
        response = self.client.post(self.login_url, {
            "email": "awa@example.com", "password": "mauvais",
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_requires_authentication(self):
        response = self.client.get(self.me_url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_changing_phone_clears_verification(self):
        user = User.objects.create_user(
            email="awa@example.com", password="boutique2025", name="Awa",
            phone="+221701234567", phone_verified_at=timezone.now(),
        )
        self.client.force_authenticate(user)

        # same number: still verified
        response = self.client.patch(self.me_url, {"name": "Awa Diop", "phone": "+221701234567"}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(response.data['phone_verified_at'])

        response = self.client.patch(self.me_url, {"phone": "+22360123456"}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['phone_verified_at'])
        user.refresh_from_db()
        self.assertIsNone(user.phone_verified_at)

    def test_password_change(self):
        user = User.objects.create_user(email="awa@example.com", password="boutique2025", name="Awa")
        self.client.force_authenticate(user)

        # confirmation mismatch
        response = self.client.post(self.password_url, {
            "current_password": "boutique2025",
            "new_password": "nouveau123",
            "confirm_password": "nouveau124",
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        # too short
        response = self.client.post(self.password_url, {
            "current_password": "boutique2025",
            "new_password": "abc",
            "confirm_password": "abc",
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        # wrong current password
        response = self.client.post(self.password_url, {
            "current_password": "faux",
            "new_password": "nouveau123",
            "confirm_password": "nouveau123",
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(self.password_url, {
            "current_password": "boutique2025",
            "new_password": "nouveau123",
            "confirm_password": "nouveau123",
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        user.refresh_from_db()
        self.assertTrue(user.check_password("nouveau123"))


class PhoneNormalizationTests(TestCase):
    def test_prefixed_numbers_pick_their_country(self):
        self.assertEqual(normalize_phone_number("+221 70 123 45 67")[0], "+221701234567")
        self.assertEqual(normalize_phone_number("+221 70 123 45 67")[1].code, "SN")
        self.assertEqual(normalize_phone_number("+212612345678")[1].code, "MA")
        self.assertEqual(normalize_phone_number("22650123456")[1].code, "BF")

    def test_local_format_gets_prefix(self):
        phone, country = normalize_phone_number("0612345678")
        self.assertEqual(country.code, "MA")
        self.assertEqual(phone, "+212612345678")

    def test_unsupported_number(self):
        with self.assertRaises(VerificationError):
            normalize_phone_number("+33612345678")


@override_settings(**TWILIO_SETTINGS)
class WhatsAppVerificationTests(APITestCase):
    def setUp(self):
        self.send_url = reverse('whatsapp-send')
        self.verify_url = reverse('whatsapp-verify')
        self.phone = "+221701234567"

    @mock.patch("accounts.services.twilio.requests.post")
    def test_send_and_verify_attaches_phone(self, post):
        post.return_value = twilio_response()
        user = User.objects.create_user(email="awa@example.com", password="boutique2025", name="Awa")
        self.client.force_authenticate(user)

        response = self.client.post(self.send_url, {"phone_number": "+221 70 123 45 67"}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['formatted_number'], self.phone)
        self.assertEqual(post.call_args.kwargs['data']['To'], f"whatsapp:{self.phone}")

        code = WhatsAppVerification.objects.get(phone=self.phone).code
        response = self.client.post(self.verify_url, {"phone_number": self.phone, "code": code}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['whatsapp_verified'])

        user.refresh_from_db()
        self.assertEqual(user.phone, self.phone)
        self.assertIsNotNone(user.phone_verified_at)
        self.assertFalse(WhatsAppVerification.objects.filter(phone=self.phone).exists())

    def test_verify_signs_in_existing_owner(self):
        User.objects.create_user(
            email="awa@example.com", password="boutique2025", name="Awa",
            phone=self.phone, phone_verified_at=timezone.now() - timedelta(days=30),
        )
        WhatsAppVerification.objects.create(
            phone=self.phone, code="123456", expires_at=timezone.now() + timedelta(minutes=10),
        )
        response = self.client.post(self.verify_url, {"phone_number": self.phone, "code": "123456"}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('accessToken', response.data['auth'])

    def test_unverified_number_does_not_sign_in(self):
        User.objects.create_user(email="awa@example.com", password="boutique2025", name="Awa", phone=self.phone)
        WhatsAppVerification.objects.create(
            phone=self.phone, code="123456", expires_at=timezone.now() + timedelta(minutes=10),
        )
        response = self.client.post(self.verify_url, {"phone_number": self.phone, "code": "123456"}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotIn('auth', response.data)
        self.assertNotIn('user', response.data)

    def test_wrong_code_counts_attempts(self):
        WhatsAppVerification.objects.create(
            phone=self.phone, code="123456", expires_at=timezone.now() + timedelta(minutes=10),
        )
        response = self.client.post(self.verify_url, {"phone_number": self.phone, "code": "000000"}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], "Code incorrect. 2 tentative(s) restante(s).")

        self.client.post(self.verify_url, {"phone_number": self.phone, "code": "000000"}, format='json')
        response = self.client.post(self.verify_url, {"phone_number": self.phone, "code": "000000"}, format='json')
        self.assertEqual(response.data['message'], "Code incorrect. Trop de tentatives.")
        self.assertFalse(WhatsAppVerification.objects.filter(phone=self.phone).exists())

    def test_expired_code(self):
        WhatsAppVerification.objects.create(
            phone=self.phone, code="123456", expires_at=timezone.now() - timedelta(minutes=1),
        )
        response = self.client.post(self.verify_url, {"phone_number": self.phone, "code": "123456"}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(WhatsAppVerification.objects.filter(phone=self.phone).exists())

    @mock.patch("accounts.services.twilio.requests.post")
    def test_rate_limit(self, post):
        post.return_value = twilio_response()
        for _ in range(3):
            response = self.client.post(self.send_url, {"phone_number": self.phone}, format='json')
            self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.post(self.send_url, {"phone_number": self.phone}, format='json')
        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertEqual(post.call_count, 3)

    @mock.patch("accounts.services.twilio.requests.post")
    def test_twilio_error_code_message(self, post):
        post.return_value = twilio_response(400, {"code": 21614, "message": "not a WhatsApp number"})
        response = self.client.post(self.send_url, {"phone_number": self.phone}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], "Ce numéro ne peut pas recevoir de messages WhatsApp")

    @override_settings(TWILIO_ACCOUNT_SID="", TWILIO_AUTH_TOKEN="")
    def test_twilio_not_configured(self):
        response = self.client.post(self.send_url, {"phone_number": self.phone}, format='json')
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
