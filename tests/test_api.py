import os
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient
from pydantic import ValidationError

from qr_fixtures import png_base64, render_qr, solid_image
from qrdecode.config import Settings
from qrdecode.main import app


class TestQRDecodeRoute(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(app)

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})

    def test_decode_found(self):
        response = self.client.post("/api/qr/decode", json={"image": png_base64(render_qr("HELLO"))})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "found")
        self.assertEqual(body["text"], "HELLO")
        self.assertEqual(body["strategy"], "hybrid")

    def test_decode_not_found(self):
        response = self.client.post("/api/qr/decode", json={"image": png_base64(solid_image(64, 64))})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "not_found")
        self.assertIsNone(response.json()["text"])

    def test_bad_input_is_400(self):
        response = self.client.post("/api/qr/decode", json={"image": "not base64 at all"})
        self.assertEqual(response.status_code, 400)
        self.assertIn("base64", response.json()["detail"])


class TestSettings(unittest.TestCase):
    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)
        self.assertEqual(settings.qr_engine, "zxing")
        self.assertTrue(settings.qr_try_harder)

    def test_environment_override(self):
        with patch.dict(os.environ, {"QR_ENGINE": "zbar", "QR_TRY_HARDER": "false"}):
            settings = Settings(_env_file=None)
        self.assertEqual(settings.qr_engine, "zbar")
        self.assertFalse(settings.qr_try_harder)

    def test_engine_name_normalised(self):
        with patch.dict(os.environ, {"QR_ENGINE": "ZBar"}):
            settings = Settings(_env_file=None)
        self.assertEqual(settings.qr_engine, "zbar")

    def test_unknown_engine_rejected(self):
        with patch.dict(os.environ, {"QR_ENGINE": "tesseract"}):
            with self.assertRaises(ValidationError):
                Settings(_env_file=None)


if __name__ == "__main__":
    unittest.main()
