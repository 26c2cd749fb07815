import pytest


@pytest.mark.anyio("asyncio")
async def test_health_check_returns_ok_status_and_version(client) -> None:
    response = await client.get("/v1/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["version"] == "9.9.9"


@pytest.mark.anyio("asyncio")
async def test_openapi_document_lists_contact_routes(client) -> None:
    response = await client.get("/openapi.json")

    assert response.status_code == 200
    document = response.json()
    assert document["info"]["title"] == "Trala Address Book API"
    assert "/v1/contact/{id}" in document["paths"]
    assert "/v1/contacts" in document["paths"]
