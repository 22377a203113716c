from __future__ import annotations

from aiohttp import ClientTimeout
from web3 import AsyncHTTPProvider, AsyncWeb3

from governance_sync.config import AppSettings
from governance_sync.ledger.client import Web3LedgerClient


class RpcClientFactory:
    """Thin factory for AsyncWeb3 to keep ledger client construction deterministic."""

    def __init__(self, settings: AppSettings) -> None:
        self._settings = settings

    def create(self) -> AsyncWeb3:
        provider = AsyncHTTPProvider(
            self._settings.rpc_url,
            request_kwargs={"timeout": ClientTimeout(total=self._settings.request_timeout_seconds)},
        )
        return AsyncWeb3(provider)

    def create_ledger_client(self) -> Web3LedgerClient:
        return Web3LedgerClient(self.create(), self._settings.governor_address)
