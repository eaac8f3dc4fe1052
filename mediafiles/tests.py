import shutil
import tempfile
from unittest import mock

from django.core import signing
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from rest_framework import serializers

from .batch import resolve_signed_urls
from .signing import create_signed_url, read_signed_token
from .tasks import remove_stored_files, schedule_file_removal
from .validators import validate_image_upload, validate_video_upload

MEDIA_ROOT = tempfile.mkdtemp()


class FakeFile:
    def __init__(self, name):
        self.name = name

    def __bool__(self):
        return bool(self.name)


class FakeRow:
    def __init__(self, pk, photo="", video=""):
        self.pk = pk
        self.photo = FakeFile(photo)
        self.video = FakeFile(video)


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class SignedUrlTests(TestCase):
    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        self.name = default_storage.save("shop-photos/test.txt", ContentFile(b"hello"))

    def test_signed_url_serves_file(self):
        url = create_signed_url(self.name)
        self.assertTrue(url.startswith("/api/media/signed/"))

        response = self.client.get(url)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(b"".join(response.streaming_content), b"hello")

    def test_token_carries_key(self):
        token = create_signed_url(self.name).rstrip("/").rsplit("/", 1)[-1]
        self.assertEqual(read_signed_token(token), self.name)

    def test_expired_token(self):
        token = create_signed_url(self.name).rstrip("/").rsplit("/", 1)[-1]
        with self.assertRaises(signing.SignatureExpired):
            read_signed_token(token, max_age=-1)

        with override_settings(SIGNED_URL_MAX_AGE=-1):
            response = self.client.get(f"/api/media/signed/{token}/")
        self.assertEqual(response.status_code, 403)

    def test_tampered_token(self):
        response = self.client.get("/api/media/signed/not-a-token/")
        self.assertEqual(response.status_code, 403)

    def test_missing_key(self):
        with self.assertRaises(FileNotFoundError):
            create_signed_url("shop-photos/absent.jpg")

        token = signing.TimestampSigner(salt="mediafiles.signed-url").sign_object(
            {"key": "shop-photos/absent.jpg"}, compress=True
        )
        response = self.client.get(f"/api/media/signed/{token}/")
        self.assertEqual(response.status_code, 404)


class BatchResolutionTests(TestCase):
    def test_one_failure_does_not_block_others(self):
        def signer(name, request=None):
            if name == "broken.jpg":
                raise RuntimeError("storage unavailable")
            return f"/signed/{name}"

        rows = [FakeRow(1, photo="a.jpg"), FakeRow(2, photo="broken.jpg", video="b.mp4"), FakeRow(3)]
        with self.assertLogs("mediafiles.batch", level="WARNING"):
            result = resolve_signed_urls(rows, ["photo", "video"], signer=signer)

        self.assertEqual(result[1], {"photo_url": "/signed/a.jpg", "video_url": None})
        self.assertEqual(result[2], {"photo_url": None, "video_url": "/signed/b.mp4"})
        self.assertEqual(result[3], {"photo_url": None, "video_url": None})

    def test_no_files_skips_signing(self):
        signer = mock.Mock()
        result = resolve_signed_urls([FakeRow(1)], ["photo"], signer=signer)
        self.assertEqual(result, {1: {"photo_url": None}})
        signer.assert_not_called()


class UploadValidatorTests(TestCase):
    def test_image_rules(self):
        image = SimpleUploadedFile("a.png", b"x" * 10, content_type="image/png")
        self.assertIs(validate_image_upload(image), image)

        with self.assertRaises(serializers.ValidationError):
            validate_image_upload(SimpleUploadedFile("a.pdf", b"x", content_type="application/pdf"))

        big = SimpleUploadedFile("big.png", b"x", content_type="image/png")
        big.size = 5 * 1024 * 1024 + 1
        with self.assertRaises(serializers.ValidationError):
            validate_image_upload(big)

    def test_video_rules(self):
        video = SimpleUploadedFile("a.mp4", b"x" * 10, content_type="video/mp4")
        self.assertIs(validate_video_upload(video), video)

        with self.assertRaises(serializers.ValidationError):
            validate_video_upload(SimpleUploadedFile("a.png", b"x", content_type="image/png"))


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class FileRemovalTests(TestCase):
    def test_remove_stored_files(self):
        name = default_storage.save("product-videos/old.mp4", ContentFile(b"data"))
        self.assertEqual(remove_stored_files([name]), "1 fichier(s) supprimé(s).")
        self.assertFalse(default_storage.exists(name))

    @mock.patch("mediafiles.tasks.remove_stored_files.delay")
    def test_removal_waits_for_commit(self, delay):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            schedule_file_removal("a.jpg", "", "b.jpg")
            delay.assert_not_called()

        self.assertEqual(len(callbacks), 1)
        delay.assert_called_once_with(["a.jpg", "b.jpg"])

    @mock.patch("mediafiles.tasks.remove_stored_files.delay", side_effect=OSError("broker down"))
    def test_broker_failure_is_logged_not_raised(self, delay):
        with self.assertLogs("mediafiles.tasks", level="WARNING"):
            with self.captureOnCommitCallbacks(execute=True):
                schedule_file_removal("a.jpg")
        delay.assert_called_once_with(["a.jpg"])
