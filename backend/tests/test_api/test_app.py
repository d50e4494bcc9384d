"""
API tests for the service endpoints and error handling
"""
from kamioun.core.metrics import registry
from kamioun.repositories import CustomerRepository


class TestHealth:
    def test_root(self, client):
        assert client.get("/").json()["status"] == "online"

    def test_healthy(self, client, monkeypatch):
        monkeypatch.setattr("kamioun.main.check_database_connection", lambda **kwargs: 1.7)

        body = client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["database"] == {"status": "connected", "latency_ms": 1.7, "error": None}

    def test_degraded_when_database_is_down(self, client, monkeypatch):
        def unreachable(**kwargs):
            raise ConnectionError("could not connect to server")

        monkeypatch.setattr("kamioun.main.check_database_connection", unreachable)

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
        assert response.json()["database"]["error"] == "could not connect to server"


class TestMetrics:
    def _requests(self, route, code="200"):
        value = registry.get_sample_value(
            "http_requests_total", {"method": "GET", "route": route, "code": code}
        )
        return value or 0

    def test_requests_are_labelled_with_route_template(self, client, seed):
        route = "/api/marketplace/orders/{order_id}"
        before = self._requests(route, "404")

        client.get("/api/marketplace/orders/abc")
        client.get("/api/marketplace/orders/def")

        assert self._requests(route, "404") == before + 2

    def test_exposition(self, client, seed):
        client.post("/api/login", json={"phone": "20123456", "password": "nope"})

        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert 'user_logins_total{result="fail"}' in response.text
        assert "http_request_duration_ms_bucket" in response.text


class TestErrorHandling:
    def test_unhandled_error_is_a_logged_500(self, lenient_client, seed, monkeypatch, caplog):
        def broken(self):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(CustomerRepository, "find_all", broken)

        response = lenient_client.get("/api/marketplace/customers")

        assert response.status_code == 500
        assert response.json()["detail"] == "Internal server error"
        assert "connection reset" in caplog.text

    def test_validation_errors_are_400(self, client, seed):
        response = client.post("/api/marketplace/reservations", json={"reservation_items": "nope"})

        assert response.status_code == 400
        assert isinstance(response.json()["detail"], list)
