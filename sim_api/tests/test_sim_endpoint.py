import unittest

from fastapi.testclient import TestClient

from sim_api.app import app


def _assumption(**overrides):
    assumption = {
        "name": "Demand",
        "mean": 1,
        "std": 0,
        "weight": 1,
        "direction": "positive",
        "enabled": True,
    }
    assumption.update(overrides)
    return assumption


class TestSimEndpoint(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(app)

    def test_healthcheck(self):
        response = self.client.get("/healthcheck")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "healthy", "service": "decision-mc-engine"})

    def test_positive_assumption_is_certain_success(self):
        response = self.client.post(
            "/api/sim",
            json={"iterations": 50000, "threshold": 0, "assumptions": [_assumption()]},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {
                "iterations": 50000,
                "probabilitySuccess": 1.0,
                "label": "HIGH",
                "summary": {"threshold": 0.0, "enabledCount": 1},
            },
        )

    def test_negative_assumption_is_certain_failure(self):
        response = self.client.post(
            "/api/sim",
            json={"iterations": 50000, "assumptions": [_assumption(direction="negative")]},
        )
        payload = response.json()
        self.assertEqual(payload["probabilitySuccess"], 0.0)
        self.assertEqual(payload["label"], "LOW")

    def test_all_disabled(self):
        response = self.client.post(
            "/api/sim",
            json={"iterations": 1000, "assumptions": [_assumption(enabled=False)]},
        )
        payload = response.json()
        self.assertEqual(payload["probabilitySuccess"], 0.0)
        self.assertEqual(payload["summary"]["enabledCount"], 0)

    def test_iterations_are_clamped(self):
        response = self.client.post("/api/sim", json={"iterations": 5, "assumptions": []})
        self.assertEqual(response.json()["iterations"], 1000)

        response = self.client.post("/api/sim", json={"iterations": "1500.9", "assumptions": []})
        self.assertEqual(response.json()["iterations"], 1500)

    def test_threshold_is_clamped(self):
        response = self.client.post(
            "/api/sim", json={"iterations": 1000, "threshold": 99999, "assumptions": []}
        )
        self.assertEqual(response.json()["summary"]["threshold"], 1000.0)

    def test_huge_integer_literals_are_clamped(self):
        huge = int("1" + "0" * 399)
        response = self.client.post("/api/sim", json={"iterations": huge, "assumptions": []})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["iterations"], 300000)

        response = self.client.post(
            "/api/sim",
            json={"iterations": 1000, "seed": huge, "assumptions": [_assumption(std=1)]},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["iterations"], 1000)

    def test_non_object_body_is_treated_as_empty(self):
        response = self.client.post("/api/sim", json=[1, 2, 3])
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["iterations"], 20000)
        self.assertEqual(payload["summary"], {"threshold": 0.0, "enabledCount": 0})

    def test_unparseable_body_is_treated_as_empty(self):
        response = self.client.post(
            "/api/sim",
            content=b"not json",
            headers={"Content-Type": "application/json"},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["iterations"], 20000)

    def test_seeded_requests_repeat(self):
        body = {
            "iterations": 2000,
            "seed": 123,
            "assumptions": [_assumption(mean=0.1, std=1)],
        }
        first = self.client.post("/api/sim", json=body).json()
        second = self.client.post("/api/sim", json=body).json()
        self.assertEqual(first, second)

    def test_cors_allows_any_origin(self):
        response = self.client.options(
            "/api/sim",
            headers={
                "Origin": "http://example.com",
                "Access-Control-Request-Method": "POST",
            },
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers["access-control-allow-origin"], "*")


if __name__ == "__main__":
    unittest.main()
