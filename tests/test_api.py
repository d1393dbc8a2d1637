"""Tests for API endpoints."""

import httpx
import pytest
from fastapi.testclient import TestClient

from cryptoguardian.api.dependencies import ApplicationContainer
from cryptoguardian.cache.memory import MemoryCacheBackend
from cryptoguardian.config import Settings
from cryptoguardian.main import create_app
from cryptoguardian.middleware.security import SECURITY_HEADERS
from cryptoguardian.models.address import AddressSnapshot
from cryptoguardian.providers.multi_provider import ProviderRegistry
from cryptoguardian.services.price_oracle import PriceOracle
from cryptoguardian.services.rate_limit_service import ProviderRateLimiter

ETH_ADDRESS = "0x742d35Cc6634C0532925a3b8D4C9db96C4b4d8bc"


def price_transport() -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        coin_id = request.url.params.get("ids", "")
        return httpx.Response(200, json={coin_id: {"usd": 2000.0}})

    return httpx.MockTransport(handler)


def build_client(settings: Settings, providers: list) -> TestClient:
    """Client over an app with scripted providers and no network access."""
    cache = MemoryCacheBackend()
    container = ApplicationContainer.assemble(
        settings,
        cache,
        ProviderRateLimiter(min_interval=0.0),
        ProviderRegistry(providers),
        PriceOracle(cache, transport=price_transport()),
    )
    return TestClient(create_app(settings, container))


@pytest.fixture
def client(settings: Settings, provider_factory) -> TestClient:
    """Provide a test client backed by one healthy explorer."""
    explorer = provider_factory(
        "etherscan",
        result=AddressSnapshot(
            address=ETH_ADDRESS.lower(),
            balance="2000000000000000000",
            transaction_count=12,
            source="etherscan",
        ),
    )
    return build_client(settings, [explorer])


class TestCheckAddressEndpoint:
    """Tests for POST /api/check-address."""

    def test_check_address(self, client: TestClient) -> None:
        """A valid address returns the assessment envelope."""
        response = client.post("/api/check-address", json={"address": ETH_ADDRESS})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        data = body["data"]
        assert data["address"] == ETH_ADDRESS.lower()
        assert data["blockchain"] == "ethereum"
        assert data["verdict"] == "CLEAN"
        assert data["total_value"] == "4000.00"
        assert data["transaction_count"] == 12
        assert data["balance"] == "2000000000000000000"
        assert data["findings"]
        assert data["recommendation"]

    def test_chain_hint(self, client: TestClient) -> None:
        """An explicit chain is honoured for 0x addresses."""
        response = client.post(
            "/api/check-address", json={"address": ETH_ADDRESS, "chain": "arbitrum"}
        )

        assert response.status_code == 200
        assert response.json()["data"]["blockchain"] == "arbitrum"

    def test_all_providers_failing(self, settings: Settings, provider_factory) -> None:
        """Upstream outages still answer 200 with a usable assessment."""
        failing = provider_factory("etherscan", error=RuntimeError("network down"))
        client = build_client(settings, [failing])

        response = client.post("/api/check-address", json={"address": ETH_ADDRESS})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["risk_score"] >= 15
        assert data["findings"]

    @pytest.mark.parametrize(
        ("body", "code"),
        [
            ({}, "MISSING_ADDRESS"),
            ({"address": ""}, "MISSING_ADDRESS"),
            ({"address": None}, "MISSING_ADDRESS"),
            ({"address": 12345}, "INVALID_TYPE"),
            ({"address": ["0xabc"]}, "INVALID_TYPE"),
            ({"address": "0x1"}, "ADDRESS_TOO_SHORT"),
            ({"address": "   abc   "}, "ADDRESS_TOO_SHORT"),
            ({"address": "hello world"}, "INVALID_ADDRESS_FORMAT"),
            ({"address": "0x742d35Cc6634C0532925a3b8D4C9db96C4b4d8"}, "INVALID_ADDRESS_FORMAT"),
        ],
    )
    def test_rejected_input(self, client: TestClient, body: dict, code: str) -> None:
        """Bad input is answered with 400 and a stable error code."""
        response = client.post("/api/check-address", json=body)

        assert response.status_code == 400
        payload = response.json()
        assert payload["success"] is False
        assert payload["code"] == code
        assert payload["error"]

    def test_missing_body(self, client: TestClient) -> None:
        """A request without a body is a missing address."""
        response = client.post("/api/check-address")

        assert response.status_code == 400
        assert response.json()["code"] == "MISSING_ADDRESS"

    def test_unknown_chain(self, client: TestClient) -> None:
        """An unknown chain hint is a malformed request."""
        response = client.post(
            "/api/check-address", json={"address": ETH_ADDRESS, "chain": "solana"}
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_REQUEST"


class TestSupportedChainsEndpoint:
    """Tests for GET /api/supported-chains."""

    def test_list_chains(self, client: TestClient) -> None:
        """Every supported chain is listed with its display data."""
        response = client.get("/api/supported-chains")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        chains = body["data"]["chains"]
        assert [c["slug"] for c in chains] == [
            "ethereum",
            "bitcoin",
            "binance-smart-chain",
            "polygon",
            "arbitrum",
        ]
        bitcoin = chains[1]
        assert bitcoin["symbol"] == "BTC"
        assert bitcoin["pattern"] == "1..., 3..., bc1..."


class TestHealthEndpoint:
    """Tests for GET /health."""

    def test_health(self, client: TestClient) -> None:
        """Test health endpoint."""
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "OK"
        assert data["cache_status"] == "connected"
        assert data["version"] == "1.0.0"
        assert data["uptime"] >= 0
        assert "timestamp" in data


class TestHttpSurface:
    """Tests for cross-cutting HTTP behaviour."""

    def test_not_found(self, client: TestClient) -> None:
        """Unknown paths use the error envelope."""
        response = client.get("/api/does-not-exist")

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "error": "Endpoint not found",
            "code": "NOT_FOUND",
        }

    def test_security_headers(self, client: TestClient) -> None:
        """Every response carries the security headers and timing."""
        response = client.get("/health")

        for header, value in SECURITY_HEADERS.items():
            assert response.headers[header] == value
        assert response.headers["X-Response-Time"].endswith("ms")

    def test_rate_limit_remaining_header(self, client: TestClient) -> None:
        """Allowed responses report the remaining budget."""
        first = client.get("/health")
        second = client.get("/health")

        assert int(first.headers["X-RateLimit-Remaining"]) == (
            int(second.headers["X-RateLimit-Remaining"]) + 1
        )

    def test_rate_limit_exceeded(self, provider_factory) -> None:
        """Requests over the per-client budget get 429."""
        settings = Settings(_env_file=None, rate_limit_max_requests=2)
        client = build_client(settings, [provider_factory("etherscan")])

        client.get("/health")
        client.get("/health")
        response = client.get("/health")

        assert response.status_code == 429
        body = response.json()
        assert body["code"] == "RATE_LIMIT"
        assert body["success"] is False
        assert body["retryAfter"] >= 1
        assert response.headers["Retry-After"] == str(body["retryAfter"])

    def test_custom_api_prefix(self, provider_factory) -> None:
        """The address routes mount under the configured prefix."""
        settings = Settings(_env_file=None, rate_limit_max_requests=1000, api_prefix="/v2")
        client = build_client(settings, [provider_factory("etherscan")])

        assert client.get("/v2/supported-chains").status_code == 200
        assert client.get("/api/supported-chains").status_code == 404
        assert client.get("/health").status_code == 200
