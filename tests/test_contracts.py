import unittest

from contracts.probe_request import ProbeRequest
from contracts.probe_response import ProbeResponse
from contracts.probe_result import ProbeResult
from contracts.transport_failure import DNSFailure, TimeoutFailure


class TestProbeRequestContract(unittest.TestCase):
    def test_url_field(self):
        self.assertEqual(ProbeRequest(url="http://x").url, "http://x")

    def test_url_optional(self):
        # Absence is reported by the URL validator, not by the model.
        self.assertIsNone(ProbeRequest.model_validate({}).url)

    def test_url_must_be_string(self):
        with self.assertRaises(ValueError):
            ProbeRequest.model_validate({"url": 5})


class TestProbeResultContract(unittest.TestCase):
    def test_success_payload(self):
        result = ProbeResult(
            success=True,
            status_code=200,
            response_time=42,
            final_url="https://example.com/",
            headers={"Content-Type": "text/html"},
            body_preview="<html>",
            truncated=False,
            blocked=False,
        )
        self.assertEqual(
            result.to_payload(),
            {
                "success": True,
                "statusCode": 200,
                "responseTime": 42,
                "finalUrl": "https://example.com/",
                "headers": {"Content-Type": "text/html"},
                "bodyPreview": "<html>",
                "truncated": False,
                "blocked": False,
            },
        )

    def test_failure_payload(self):
        result = ProbeResult.failure("DNS error: host not found (x.invalid)")
        self.assertEqual(
            result.to_payload(),
            {
                "success": False,
                "truncated": False,
                "error": "DNS error: host not found (x.invalid)",
                "blocked": False,
            },
        )

    def test_populate_by_alias(self):
        result = ProbeResult.model_validate({"success": True, "statusCode": 403})
        self.assertEqual(result.status_code, 403)


class TestProbeResponseContract(unittest.TestCase):
    def test_from_result_adds_ips(self):
        result = ProbeResult(success=True, status_code=204, response_time=1, final_url="http://x/")
        response = ProbeResponse.from_result(result, user_ip="1.2.3.4", server_ip="5.6.7.8")
        payload = response.to_payload()
        self.assertEqual(payload["statusCode"], 204)
        self.assertEqual(payload["userIP"], "1.2.3.4")
        self.assertEqual(payload["serverIP"], "5.6.7.8")


class TestTransportFailureContract(unittest.TestCase):
    def test_kinds(self):
        self.assertEqual(TimeoutFailure().kind, "timeout")
        self.assertEqual(DNSFailure(name="x").kind, "dns")


if __name__ == "__main__":
    unittest.main()
