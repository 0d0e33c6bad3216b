"""Unit tests for the HTTP-backed providers.

The network is stubbed with ``httpx.MockTransport``.
"""

import httpx
import pytest

from defi_trust.config import JupiterConfig, SignalProviderConfig
from defi_trust.models.trust import SafetyIndicators
from defi_trust.providers import (
    HttpSignalProvider,
    JupiterQuoteClient,
    QuoteProvider,
    SignalProvider,
    StaticSignalProvider,
)
from defi_trust.utils.errors import DataParsingError, ProviderError, QuoteError
from tests.fixtures.common import RAY_MINT, USDC_MINT

SAFETY_PAYLOAD = {
    "rugPullRisk": 10,
    "liquidityScore": 80,
    "holderDistribution": 60,
    "contractVerified": True,
    "honeypotDetected": False,
    "hasRenounced": True,
}

QUOTE_PAYLOAD = {
    "inputMint": USDC_MINT,
    "outputMint": RAY_MINT,
    "inAmount": "1000000",
    "outAmount": "420000",
    "otherAmountThreshold": "417900",
    "swapMode": "ExactIn",
    "slippageBps": 50,
    "priceImpactPct": "0.12",
    "routePlan": [
        {
            "swapInfo": {
                "ammKey": "58oQChx4yWmvKdwLLZzBi4ChoCc2fqCUWBkwMihLYQo2",
                "label": "Raydium",
                "inputMint": USDC_MINT,
                "outputMint": RAY_MINT,
                "inAmount": "1000000",
                "outAmount": "420000",
                "feeAmount": "2500",
                "feeMint": USDC_MINT,
            },
            "percent": 100,
        }
    ],
}


def signal_provider_for(handler, **config):
    settings = SignalProviderConfig(base_url="https://signals.test", **config)
    return HttpSignalProvider(settings, transport=httpx.MockTransport(handler), initial_retry_delay=0)


def quote_client_for(handler, **kwargs):
    return JupiterQuoteClient.basic(
        JupiterConfig(),
        transport=httpx.MockTransport(handler),
        initial_retry_delay=0,
        **kwargs
    )


class TestHttpSignalProvider:
    """Tests for HttpSignalProvider."""

    @pytest.mark.asyncio
    async def test_fetch_indicators(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json=SAFETY_PAYLOAD)

        provider = signal_provider_for(handler, api_key="secret")
        indicators = await provider.fetch(RAY_MINT)
        await provider.close()

        assert indicators == SafetyIndicators(
            rug_pull_risk=10,
            liquidity_score=80,
            holder_distribution=60,
            contract_verified=True,
            honeypot_detected=False,
            has_renounced=True,
        )
        assert requests[0].url.path == f"/contracts/{RAY_MINT}/safety"
        assert requests[0].headers["Authorization"] == "Bearer secret"

    @pytest.mark.asyncio
    async def test_unwraps_data_envelope(self):
        provider = signal_provider_for(lambda request: httpx.Response(200, json={"data": SAFETY_PAYLOAD}))
        indicators = await provider.fetch(RAY_MINT)
        assert indicators.rug_pull_risk == 10

    @pytest.mark.asyncio
    async def test_fetch_activity(self):
        def handler(request):
            assert request.url.path == f"/contracts/{RAY_MINT}/activity"
            return httpx.Response(200, json={"contractAge": 45, "transactionVolume": 250000})

        activity = await signal_provider_for(handler).fetch_activity(RAY_MINT)
        assert activity.contract_age == 45
        assert activity.transaction_volume == 250000

    @pytest.mark.asyncio
    async def test_retries_retriable_status(self):
        responses = iter([httpx.Response(503), httpx.Response(200, json=SAFETY_PAYLOAD)])
        provider = signal_provider_for(lambda request: next(responses))

        indicators = await provider.fetch(RAY_MINT)

        assert indicators.liquidity_score == 80

    @pytest.mark.asyncio
    async def test_retries_are_bounded(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            return httpx.Response(502)

        provider = signal_provider_for(handler, max_retries=2)
        with pytest.raises(ProviderError) as exc_info:
            await provider.fetch(RAY_MINT)

        assert len(attempts) == 3
        assert exc_info.value.details["provider"] == "http"
        assert exc_info.value.details["address"] == RAY_MINT

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            return httpx.Response(404, json={"error": "unknown contract"})

        with pytest.raises(ProviderError):
            await signal_provider_for(handler).fetch(RAY_MINT)
        assert len(attempts) == 1

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ProviderError) as exc_info:
            await signal_provider_for(handler, max_retries=1).fetch(RAY_MINT)
        assert "connection refused" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_malformed_payload(self):
        payload = dict(SAFETY_PAYLOAD, rugPullRisk=140)
        provider = signal_provider_for(lambda request: httpx.Response(200, json=payload))

        with pytest.raises(DataParsingError) as exc_info:
            await provider.fetch(RAY_MINT)
        assert exc_info.value.code.value == "DATA_PARSING_ERROR"

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        provider = signal_provider_for(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(ProviderError):
            await provider.fetch(RAY_MINT)

    def test_requires_base_url(self):
        with pytest.raises(ValueError):
            HttpSignalProvider(SignalProviderConfig())

    def test_satisfies_protocol(self):
        assert isinstance(signal_provider_for(lambda request: httpx.Response(200)), SignalProvider)
        assert isinstance(StaticSignalProvider(), SignalProvider)


class TestJupiterQuoteClient:
    """Tests for JupiterQuoteClient."""

    @pytest.mark.asyncio
    async def test_get_quote(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json=QUOTE_PAYLOAD)

        client = quote_client_for(handler)
        quote = await client.get_quote(USDC_MINT, RAY_MINT, 1_000_000)
        await client.close()

        assert quote.out_amount == "420000"
        assert quote.price_impact_pct == 0.12
        assert quote.hop_count == 1
        assert quote.route_plan[0].swap_info.label == "Raydium"

        params = requests[0].url.params
        assert requests[0].url.path.endswith("/quote")
        assert params["inputMint"] == USDC_MINT
        assert params["outputMint"] == RAY_MINT
        assert params["amount"] == "1000000"
        assert params["slippageBps"] == "50"
        assert "onlyDirectRoutes" not in params

    @pytest.mark.asyncio
    async def test_quote_options(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json=QUOTE_PAYLOAD)

        client = quote_client_for(handler)
        await client.get_quote(USDC_MINT, RAY_MINT, 5, slippage_bps=300, only_direct_routes=True)

        params = requests[0].url.params
        assert params["slippageBps"] == "300"
        assert params["onlyDirectRoutes"] == "true"

    @pytest.mark.asyncio
    async def test_api_key_header(self):
        seen = {}

        def handler(request):
            seen.update(request.headers)
            return httpx.Response(200, json=QUOTE_PAYLOAD)

        client = JupiterQuoteClient.ultra(
            JupiterConfig(api_key="jup-key"),
            transport=httpx.MockTransport(handler)
        )
        await client.get_quote(USDC_MINT, RAY_MINT, 5)

        assert client.name == "ultra"
        assert seen["x-api-key"] == "jup-key"

    @pytest.mark.asyncio
    async def test_http_error_raises_quote_error(self):
        client = quote_client_for(lambda request: httpx.Response(400, json={"error": "bad mint"}))
        with pytest.raises(QuoteError) as exc_info:
            await client.get_quote(USDC_MINT, RAY_MINT, 5)
        assert exc_info.value.details["endpoint"] == "basic"
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_malformed_quote(self):
        client = quote_client_for(lambda request: httpx.Response(200, json={"inputMint": USDC_MINT}))
        with pytest.raises(QuoteError):
            await client.get_quote(USDC_MINT, RAY_MINT, 5)

    def test_satisfies_protocol(self):
        assert isinstance(quote_client_for(lambda request: httpx.Response(200)), QuoteProvider)
