"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Callable, Generator
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest

from src.config import reset_settings
from src.core.entities import Cart, Product
from src.core.interfaces import Collection
from src.infrastructure.storage import InMemoryDocumentStore, close_document_store


@pytest.fixture(autouse=True)
def test_settings(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[None, None, None]:
    """Isolated settings: memory backend, temp data dir, no backoff, UTC reporting."""
    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("ENGINE_RETRY_DELAY", "0")
    monkeypatch.setenv("ENGINE_RETRY_MAX_DELAY", "0")
    monkeypatch.setenv("ENGINE_TIMEZONE", "UTC")
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
async def store() -> AsyncGenerator[InMemoryDocumentStore, None]:
    """Fresh in-memory document store."""
    memory_store = InMemoryDocumentStore()
    yield memory_store
    await memory_store.close()
    await close_document_store()


@pytest.fixture
def make_product() -> Callable[..., Product]:
    """Factory for products with sensible defaults."""

    def _make(**overrides: Any) -> Product:
        data: dict[str, Any] = {
            "id": "P-001",
            "name": "Cotton Fabric",
            "category": "Textiles",
            "unit_type": "meter",
            "price_per_unit": Decimal("10.00"),
            "purchase_price_per_unit": Decimal("6.00"),
            "purchased_quantity": 5,
            "sold_quantity": 0,
            "low_stock_threshold": 2,
        }
        data.update(overrides)
        return Product(**data)

    return _make


@pytest.fixture
def seed_product(
    store: InMemoryDocumentStore, make_product: Callable[..., Product]
) -> Callable[..., Any]:
    """Write a product straight into the store and return it."""

    async def _seed(**overrides: Any) -> Product:
        product = make_product(**overrides)
        await store.put(Collection.PRODUCTS, product.id, product.to_document())
        return product

    return _seed


@pytest.fixture
def cart() -> Cart:
    return Cart()
