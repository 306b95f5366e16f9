"""Tests for the dashboard HTTP gateway using httpx.MockTransport."""

import json

import httpx
import pytest

from notion_desk.dashboard.gateway import DashboardGateway, GatewayError


def _make_gateway(handler) -> DashboardGateway:
    """Return a gateway whose requests are answered by handler."""
    http_client = httpx.AsyncClient(
        base_url="http://dashboard.test", transport=httpx.MockTransport(handler)
    )
    return DashboardGateway(http_client=http_client)


async def test_list_databases_sends_params():
    """Pagination parameters are sent and the response is parsed."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "databases": [{"id": "db-1", "title": "Tasks"}],
                "has_more": False,
                "next_cursor": None,
                "total_count": 1,
            },
        )

    gateway = _make_gateway(handler)
    response = await gateway.list_databases(page_size=20, cursor="abc")

    assert response.databases[0].title == "Tasks"
    assert seen[0].url.path == "/api/notion/databases"
    assert seen[0].url.params["page_size"] == "20"
    assert seen[0].url.params["start_cursor"] == "abc"


async def test_list_pages_passes_filter_through():
    """Filter and sorts are sent as JSON strings."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"pages": [], "database_id": "db-1"})

    gateway = _make_gateway(handler)
    response = await gateway.list_pages("db-1", filter='{"property": "Done"}')

    assert response.database_id == "db-1"
    assert seen[0].url.path == "/api/notion/databases/db-1/pages"
    assert seen[0].url.params["filter"] == '{"property": "Done"}'


async def test_error_uses_detail_message():
    """Error responses surface the server's detail message."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            404,
            json={"detail": {"error": "Not found", "message": "Database not found or inaccessible"}},
        )

    gateway = _make_gateway(handler)
    with pytest.raises(GatewayError) as exc_info:
        await gateway.list_pages("db-404")

    assert exc_info.value.message == "Database not found or inaccessible"
    assert exc_info.value.status_code == 404


async def test_error_falls_back_to_headline():
    """Without a message the error headline is used."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"detail": {"error": "pageIds array cannot be empty"}})

    gateway = _make_gateway(handler)
    with pytest.raises(GatewayError) as exc_info:
        await gateway.convert_pages_to_markdown(["a"])

    assert exc_info.value.message == "pageIds array cannot be empty"


async def test_error_without_json_body():
    """Non-JSON error bodies fall back to the status line."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="upstream exploded")

    gateway = _make_gateway(handler)
    with pytest.raises(GatewayError) as exc_info:
        await gateway.list_databases()

    assert exc_info.value.message == "HTTP 502: Bad Gateway"


async def test_transport_error_becomes_gateway_error():
    """Network failures are reported as GatewayError."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    gateway = _make_gateway(handler)
    with pytest.raises(GatewayError) as exc_info:
        await gateway.list_databases()

    assert exc_info.value.status_code is None


async def test_create_page_omits_missing_title():
    """The create body carries markdown and only a title when given."""
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(
            201,
            json={"success": True, "page": {"id": "page-new", "url": None}, "title": "Milk"},
        )

    gateway = _make_gateway(handler)
    response = await gateway.create_page("db-1", "# Milk")

    assert bodies == [{"markdown": "# Milk"}]
    assert response.page.id == "page-new"
    assert response.title == "Milk"


async def test_convert_sends_page_ids_wire_name():
    """Page ids are sent under the pageIds key."""
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(
            200,
            json={"success": True, "data": {"a": "# A"}, "processedCount": 1, "errorCount": 0},
        )

    gateway = _make_gateway(handler)
    result = await gateway.convert_pages_to_markdown(["a"])

    assert bodies == [{"pageIds": ["a"]}]
    assert result.processed_count == 1


async def test_convert_rejects_empty_ids():
    """An empty id list is rejected locally."""
    gateway = _make_gateway(lambda request: httpx.Response(500))

    with pytest.raises(ValueError):
        await gateway.convert_pages_to_markdown([])


async def test_transcribe_uploads_multipart_audio():
    """Audio is uploaded as the multipart field "audio"."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"text": "buy milk"})

    gateway = _make_gateway(handler)
    text = await gateway.transcribe_audio(b"audio-bytes")

    assert text == "buy milk"
    content = seen[0].read()
    assert b'name="audio"' in content
    assert b'filename="recording.webm"' in content
    assert b"audio-bytes" in content


async def test_stream_chat_yields_text():
    """The chat reply is streamed back as text."""
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, text="Hello, world")

    gateway = _make_gateway(handler)
    chunks = [chunk async for chunk in gateway.stream_chat("Say hello")]

    assert "".join(chunks) == "Hello, world"
    assert bodies == [{"prompt": "Say hello"}]


async def test_stream_error_raises_with_message():
    """A rejected stream raises GatewayError with the server message."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            502, json={"detail": {"error": "Failed to process voice note", "message": "blocked"}}
        )

    gateway = _make_gateway(handler)
    with pytest.raises(GatewayError) as exc_info:
        _ = [chunk async for chunk in gateway.stream_voice_note("um")]

    assert exc_info.value.message == "blocked"
    assert exc_info.value.status_code == 502


async def test_gateway_closes_owned_client():
    """A gateway closes the client it created itself, not an injected one."""
    injected = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    async with DashboardGateway(http_client=injected):
        pass
    assert injected.is_closed is False

    owned = DashboardGateway(base_url="http://dashboard.test")
    await owned.aclose()
    assert owned._http.is_closed is True
    await injected.aclose()
