# tests/test_handlers.py
import os

import pytest
from httpx import ASGITransport, AsyncClient

from handlers import product_handlers, stock_handlers
from models import User, UserRole, get_async_session
from services.auth_service import create_access_token
from services.catalog_store import CatalogStore
from services.exceptions import ProviderFetchError
from services.size_guide_service import SizeGuideService
from tests.factories import remote_product, remote_variant
from web_app import app


@pytest.fixture
async def api(session_maker, sync_service, stock_service, fake_images, fake_client):
    async def override_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_session
    app.dependency_overrides[product_handlers.get_catalog_sync_service] = lambda: sync_service
    app.dependency_overrides[product_handlers.get_image_store] = lambda: fake_images
    app.dependency_overrides[product_handlers.get_size_guide_service] = \
        lambda: SizeGuideService(session_maker, fake_client, ttl=60)
    app.dependency_overrides[stock_handlers.get_stock_sync_service] = lambda: stock_service
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


async def make_user(session_maker, role):
    async with session_maker() as session:
        user = User(email=f"{role.value}@shop.test", name=role.value, role=role)
        session.add(user)
        await session.commit()
        return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}


@pytest.fixture
async def admin_headers(session_maker):
    return await make_user(session_maker, UserRole.ADMIN)


async def test_sync_requires_token(api):
    response = await api.get("/api/products/synPrintfulProducts")
    assert response.status_code == 401


async def test_sync_requires_admin(api, session_maker):
    headers = await make_user(session_maker, UserRole.CUSTOMER)
    response = await api.get("/api/products/synPrintfulProducts", headers=headers)
    assert response.status_code == 403


async def test_sync_returns_report(api, admin_headers, fake_client):
    fake_client.add(remote_product(1, "Shirt", [remote_variant(11, "A1_RED")]))

    response = await api.get("/api/products/synPrintfulProducts", headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["sync"] is True
    assert body["created"] == 1
    assert body["productsProcessed"] == 1
    assert body["errors"] == []
    assert "duration" in body and "timestamp" in body


async def test_sync_listing_failure_returns_500_with_stage(api, admin_headers, fake_client):
    fake_client.list_error = ProviderFetchError("HTTP 503", stage="list page 2", status=503)

    response = await api.get("/api/products/synPrintfulProducts", headers=admin_headers)

    assert response.status_code == 500
    assert "list page 2" in response.json()["detail"]


async def test_overlapping_sync_returns_409(api, admin_headers, sync_service):
    async with sync_service._lock:
        response = await api.get("/api/products/synPrintfulProducts", headers=admin_headers)
    assert response.status_code == 409


async def test_list_products_excludes_discontinued(api, admin_headers, fake_client):
    fake_client.add(remote_product(1, "Shirt", [remote_variant(11, "A1_RED", color="Red")]))
    fake_client.add(remote_product(2, "Mug", [remote_variant(21, "M1_WHITE", color="White")]))
    await api.get("/api/products/synPrintfulProducts", headers=admin_headers)
    fake_client.remove(2)
    await api.get("/api/products/synPrintfulProducts", headers=admin_headers)

    response = await api.get("/api/products/")

    assert response.status_code == 200
    products = response.json()["products"]
    assert [p["title"] for p in products] == ["Shirt"]
    assert products[0]["tags"] == ["Red"]
    assert products[0]["category"]["title"] == "T-Shirts"
    assert [v["sku"] for v in products[0]["variants"]] == ["A1_RED"]

    searched = await api.get("/api/products/", params={"search": "mug"})
    assert searched.json()["products"] == []


async def test_delete_product_cascades(api, admin_headers, fake_client, session_maker):
    fake_client.add(remote_product(1, "Shirt", [remote_variant(11, "A1_RED")]))
    await api.get("/api/products/synPrintfulProducts", headers=admin_headers)
    async with session_maker() as session:
        product = await CatalogStore(session).find_product_by_remote_id("1")

    response = await api.delete(f"/api/products/{product.id}", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["categoryDeleted"] is True
    async with session_maker() as session:
        assert await CatalogStore(session).get_product(product.id) is None

    missing = await api.delete(f"/api/products/{product.id}", headers=admin_headers)
    assert missing.status_code == 404


async def test_image_endpoint_falls_back_to_default(api, fake_images):
    os.makedirs(fake_images.product_dir, exist_ok=True)
    with open(os.path.join(fake_images.product_dir, "shirt.png"), "wb") as f:
        f.write(b"shirt")
    with open(os.path.join(fake_images.root, "default.jpg"), "wb") as f:
        f.write(b"default")

    found = await api.get("/api/products/uploads/product/shirt.png")
    fallback = await api.get("/api/products/uploads/categorie/missing.png")

    assert found.status_code == 200
    assert found.content == b"shirt"
    assert fallback.status_code == 200
    assert fallback.content == b"default"


async def test_image_endpoint_without_default(api):
    response = await api.get("/api/products/uploads/product/missing.png")
    assert response.status_code == 404


async def test_size_guide_endpoint(api, admin_headers, fake_client, session_maker):
    fake_client.add(remote_product(1, "Shirt", [remote_variant(11, "A1_RED")]))
    await api.get("/api/products/synPrintfulProducts", headers=admin_headers)
    async with session_maker() as session:
        product = await CatalogStore(session).find_product_by_remote_id("1")

    response = await api.get(f"/api/products/{product.id}/size-guide")
    missing = await api.get("/api/products/999/size-guide")

    assert response.status_code == 200
    assert response.json()["sizeGuide"]["available_sizes"] == ["S", "M", "L"]
    assert missing.status_code == 404


async def test_sync_stock_endpoint(api, admin_headers, fake_client):
    fake_client.add(remote_product(1, "Shirt", [remote_variant(11, "A1_RED")]))
    await api.get("/api/products/synPrintfulProducts", headers=admin_headers)
    fake_client.add(remote_product(1, "Shirt", [remote_variant(11, "A1_RED", price="28.00")]))

    response = await api.post("/api/printful/sync-stock", headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["stats"]["priceChanges"] == 1
    assert body["stats"]["changes"][0]["newPrice"] == 28.0


async def test_stock_endpoints_require_admin(api):
    response = await api.get("/api/printful/stock-stats")
    assert response.status_code == 401


async def test_stock_stats_and_discontinued_endpoints(api, admin_headers, fake_client):
    fake_client.add(remote_product(1, "Shirt", [remote_variant(11, "A1_RED")]))
    await api.get("/api/products/synPrintfulProducts", headers=admin_headers)
    fake_client.remove(1)
    await api.post("/api/printful/sync-stock", headers=admin_headers)

    stats = await api.get("/api/printful/stock-stats", headers=admin_headers)
    discontinued = await api.get("/api/printful/discontinued", headers=admin_headers)
    price_changes = await api.get("/api/printful/price-changes", headers=admin_headers)

    assert stats.json()["stats"]["discontinued"] == 1
    assert discontinued.json()["count"] == 1
    assert discontinued.json()["products"][0]["title"] == "Shirt"
    assert price_changes.json() == {"success": True, "count": 0, "changes": []}


async def test_update_product_endpoint_unknown(api, admin_headers):
    response = await api.post("/api/printful/update-product/999", headers=admin_headers)
    assert response.status_code == 404
