"""Tests for the custodial signer adapter."""

import json

import pytest
from pytest_httpx import HTTPXMock

from mintbridge.chains import ARBITRUM_CHAIN_ID, BASE_CHAIN_ID, ChainConfig
from mintbridge.signing.adapter import CustodialSigner, CustodialSignerProvider
from mintbridge.signing.base import ConfigurationError, TransactionIntent


class RecordingClient:
    """Stands in for the custodial client and records submitted intents."""

    def __init__(self, tx_hash: str = "0xfeed"):
        self.tx_hash = tx_hash
        self.submitted: list[tuple[TransactionIntent, str]] = []

    async def submit_and_confirm(self, intent, locator=None):
        self.submitted.append((intent, locator))
        return self.tx_hash


class TestSignerConstruction:
    """Tests for chain binding."""

    def test_unmapped_chain_fails_before_network(self, wallet, custodial_client, httpx_mock: HTTPXMock):
        """An unmapped chain id is a configuration error with zero HTTP calls."""
        bsc = ChainConfig(chain_id=56, name="BNB Chain", key="bsc", rpc_url="https://bsc.rpc.test")

        with pytest.raises(ConfigurationError, match="56"):
            CustodialSigner(wallet, custodial_client, bsc)

        assert httpx_mock.get_requests() == []

    def test_mapped_chain(self, wallet, chains):
        signer = CustodialSigner(wallet, RecordingClient(), chains[ARBITRUM_CHAIN_ID])

        assert signer.custodial_chain == "arbitrum"
        assert signer.address == wallet.address


class TestSendTransaction:
    """Tests for eth_sendTransaction interception."""

    @pytest.mark.asyncio
    async def test_send_routes_to_custodial_backend(self, wallet, chains):
        client = RecordingClient("0xabc")
        signer = CustodialSigner(wallet, client, chains[BASE_CHAIN_ID])

        tx_hash = await signer.request(
            "eth_sendTransaction",
            [{"from": wallet.address, "to": "0x22", "data": "0xdeadbeef", "value": "0x10"}],
        )

        assert tx_hash == "0xabc"
        intent, locator = client.submitted[0]
        assert intent == TransactionIntent(to="0x22", chain="base", data="0xdeadbeef", value=16)
        assert locator == wallet.locator

    @pytest.mark.asyncio
    async def test_send_without_value(self, wallet, chains):
        client = RecordingClient()
        signer = CustodialSigner(wallet, client, chains[ARBITRUM_CHAIN_ID])

        await signer.request("eth_sendTransaction", [{"to": "0x22"}])

        intent, _ = client.submitted[0]
        assert intent.value is None
        assert intent.data is None
        assert intent.to_call() == {"to": "0x22", "value": "0x0", "data": "0x"}

    @pytest.mark.asyncio
    async def test_send_requires_transaction(self, wallet, chains):
        signer = CustodialSigner(wallet, RecordingClient(), chains[BASE_CHAIN_ID])

        with pytest.raises(ValueError):
            await signer.request("eth_sendTransaction", [])


class TestForwarding:
    """Tests for read-method forwarding."""

    @pytest.mark.asyncio
    async def test_other_methods_forwarded(self, wallet, chains, httpx_mock: HTTPXMock):
        httpx_mock.add_response(
            url="https://base.rpc.test", json={"jsonrpc": "2.0", "id": 1, "result": "0x2105"}
        )
        client = RecordingClient()
        signer = CustodialSigner(wallet, client, chains[BASE_CHAIN_ID])

        assert await signer.request("eth_chainId") == "0x2105"
        assert client.submitted == []
        assert json.loads(httpx_mock.get_requests()[0].content)["method"] == "eth_chainId"

    @pytest.mark.asyncio
    async def test_missing_rpc_url(self, wallet, httpx_mock: HTTPXMock):
        chain = ChainConfig(chain_id=BASE_CHAIN_ID, name="Base", key="base", rpc_url=None)
        signer = CustodialSigner(wallet, RecordingClient(), chain)

        with pytest.raises(ConfigurationError):
            await signer.request("eth_blockNumber")

        assert httpx_mock.get_requests() == []


class TestSignerProvider:
    """Tests for per-chain signer creation."""

    def test_for_chain(self, wallet, chains):
        provider = CustodialSignerProvider(wallet, RecordingClient(), chains)

        base_signer = provider.for_chain(BASE_CHAIN_ID)
        arb_signer = provider.for_chain(ARBITRUM_CHAIN_ID)

        assert base_signer.custodial_chain == "base"
        assert arb_signer.custodial_chain == "arbitrum"
        assert base_signer.wallet is arb_signer.wallet
        assert provider.address == wallet.address

    def test_unsupported_chain(self, wallet, chains):
        provider = CustodialSignerProvider(wallet, RecordingClient(), chains)

        with pytest.raises(ConfigurationError):
            provider.for_chain(137)
