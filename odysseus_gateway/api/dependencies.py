"""Dependency injection for FastAPI endpoints"""

from functools import lru_cache

from fastapi import Depends, Request

from odysseus_gateway.infrastructure.clients.mock_bank import MockBankAPI
from odysseus_gateway.infrastructure.store import AccountStateStore, InMemoryAccountStore
from odysseus_gateway.services.transfers import TransferOrchestrator


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


@lru_cache
def get_account_store() -> AccountStateStore:
    """Process-wide store; every request sees the same balances and limits"""
    return InMemoryAccountStore()


def get_bank_api(store: AccountStateStore = Depends(get_account_store)) -> MockBankAPI:
    """Provide the mocked remote transfer endpoint"""
    return MockBankAPI(store)


def get_orchestrator(
    store: AccountStateStore = Depends(get_account_store),
    bank: MockBankAPI = Depends(get_bank_api),
) -> TransferOrchestrator:
    """Provide a transfer orchestrator bound to the shared store and bank"""
    return TransferOrchestrator(store, bank)
