import os
import unittest
from unittest.mock import AsyncMock, patch

import httpx
from fastapi.testclient import TestClient

import server as server_mod
from config.config import Config
from contracts.probe_result import ProbeResult


class TestServerModule(unittest.TestCase):
    def setUp(self):
        # Used without a context manager so the startup IP lookup never runs.
        self.client = TestClient(server_mod.app)

    def test_health_endpoint(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.text, "OK")

    def test_health_wrong_method(self):
        response = self.client.post("/health")
        self.assertEqual(response.status_code, 405)

    def test_health_head_not_allowed(self):
        response = self.client.head("/health")
        self.assertEqual(response.status_code, 405)

    def test_metrics_endpoint(self):
        response = self.client.get("/metrics")
        self.assertEqual(response.status_code, 200)
        self.assertIn("text/plain", response.headers["content-type"])
        self.assertIn("probes_total", response.text)

    def test_probe_wrong_method(self):
        for path in ("/api/test", "/test"):
            with self.subTest(path=path):
                response = self.client.get(path)
                self.assertEqual(response.status_code, 405)
                self.assertEqual(self.client.head(path).status_code, 405)

    def test_invalid_json(self):
        response = self.client.post(
            "/api/test", content=b"{not json", headers={"Content-Type": "application/json"}
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Invalid JSON"})

    def test_null_body_requires_url(self):
        with patch.object(server_mod.app.state.prober, "probe", new_callable=AsyncMock) as probe:
            response = self.client.post(
                "/api/test", content=b"null", headers={"Content-Type": "application/json"}
            )
            probe.assert_not_called()
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "URL is required"})

    def test_wrong_json_shape(self):
        response = self.client.post("/api/test", json={"url": 12})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Invalid JSON"})

    def test_validation_errors(self):
        cases = [
            ({"url": ""}, "URL is required"),
            ({"url": "   "}, "URL is required"),
            ({}, "URL is required"),
            ({"url": "example.com"}, "URL must include a scheme (http or https)"),
            ({"url": "ftp://example.com"}, "URL scheme must be http or https"),
            ({"url": "http://"}, "URL must include a host"),
        ]
        with patch.object(server_mod.app.state.prober, "probe", new_callable=AsyncMock) as probe:
            for body, reason in cases:
                with self.subTest(body=body):
                    response = self.client.post("/api/test", json=body)
                    self.assertEqual(response.status_code, 400)
                    self.assertEqual(response.json(), {"error": reason})
            probe.assert_not_called()

    def test_probe_success(self):
        result = ProbeResult(
            success=True,
            status_code=200,
            response_time=15,
            final_url="https://example.com/",
            headers={"Server": "test"},
            body_preview="hi",
            truncated=False,
            blocked=False,
        )
        with patch.object(
            server_mod.app.state.prober, "probe", new_callable=AsyncMock, return_value=result
        ) as probe:
            response = self.client.post(
                "/api/test",
                json={"url": "https://example.com/"},
                headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.1"},
            )
        probe.assert_awaited_once_with("https://example.com/")
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertTrue(data["success"])
        self.assertEqual(data["statusCode"], 200)
        self.assertEqual(data["responseTime"], 15)
        self.assertEqual(data["finalUrl"], "https://example.com/")
        self.assertEqual(data["bodyPreview"], "hi")
        self.assertFalse(data["truncated"])
        self.assertFalse(data["blocked"])
        self.assertEqual(data["userIP"], "203.0.113.9")
        self.assertEqual(data["serverIP"], "fetching...")
        self.assertNotIn("error", data)

    def test_probe_failure_is_ok_status(self):
        """An unreachable target is still a successful call of the probe endpoint"""
        result = ProbeResult.failure("DNS error: host not found (nowhere.invalid)")
        with patch.object(
            server_mod.app.state.prober, "probe", new_callable=AsyncMock, return_value=result
        ):
            response = self.client.post("/test", json={"url": "http://nowhere.invalid"})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertFalse(data["success"])
        self.assertFalse(data["blocked"])
        self.assertEqual(data["error"], "DNS error: host not found (nowhere.invalid)")
        self.assertNotIn("statusCode", data)
        self.assertNotIn("responseTime", data)

    def test_end_to_end_with_mock_target(self):
        """Redirects and blocking flow through the real prober"""

        def handler(request):
            if request.url.path == "/redirect":
                return httpx.Response(301, headers={"Location": "/final"})
            return httpx.Response(403, text="x" * 1500)

        with patch.object(
            server_mod.app.state.prober, "transport", httpx.MockTransport(handler)
        ):
            response = self.client.post(
                "/api/test", json={"url": "http://target.test/redirect"}
            )
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["statusCode"], 403)
        self.assertEqual(data["finalUrl"], "http://target.test/final")
        self.assertTrue(data["blocked"])
        self.assertTrue(data["truncated"])
        self.assertEqual(len(data["bodyPreview"]), 1000)

    @unittest.skipUnless(os.path.isdir(Config.STATIC_DIR), "static UI not present")
    def test_static_index(self):
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertIn("URL Tester", response.text)


if __name__ == "__main__":
    unittest.main()
