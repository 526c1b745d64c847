import httpx
import pytest

from adapters.file_response import FileApiResponse, materialize_file_response
from core.errors import AlreadyMaterializedError, ResponseAlreadyConsumedError

from streams import FailingStream, body_stream


async def _send(client: httpx.AsyncClient, path: str = "/get_files/file") -> tuple[httpx.Request, httpx.Response]:
    request = client.build_request("GET", path)
    response = await client.send(request, stream=True)
    return request, response


@pytest.mark.asyncio
async def test_materialize_png_scenario(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"Content-Type": "image/png"}, stream=body_stream(b"\x01\x02\x03"))

    async with make_client(handler) as client:
        request, response = await _send(client)
        holder = FileApiResponse(status_code=response.status_code, url=str(request.url))
        await materialize_file_response(request, response, holder)

    assert holder.content_bytes == b"\x01\x02\x03"
    assert holder.content_headers["Content-Type"] == "image/png"
    assert holder.content_type == "image/png"
    assert holder.content_length == 3
    assert holder.is_materialized


@pytest.mark.asyncio
async def test_materialize_large_body_byte_for_byte(make_client):
    body = bytes(range(256)) * 4096

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, stream=body_stream(body))

    async with make_client(handler) as client:
        request, response = await _send(client)
        holder = FileApiResponse(status_code=200, url=str(request.url))
        await materialize_file_response(request, response, holder)

    assert len(holder.content_bytes) == len(body)
    assert holder.content_bytes == body


@pytest.mark.asyncio
async def test_headers_are_copied_exactly(make_client):
    raw_headers = [
        ("Content-Type", "video/webm"),
        ("X-Tag", "first"),
        ("X-Tag", "second"),
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers=raw_headers, stream=body_stream(b"data"))

    async with make_client(handler) as client:
        request, response = await _send(client)
        holder = FileApiResponse(status_code=200, url=str(request.url))
        await materialize_file_response(request, response, holder)

    assert holder.content_headers.multi_items() == [
        ("content-type", "video/webm"),
        ("x-tag", "first"),
        ("x-tag", "second"),
    ]
    assert holder.content_headers.get_list("X-Tag") == ["first", "second"]
    assert holder.content_headers is not response.headers


@pytest.mark.asyncio
async def test_materialize_closes_the_stream(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, stream=body_stream(b"abc"))

    async with make_client(handler) as client:
        request, response = await _send(client)
        holder = FileApiResponse(status_code=200, url=str(request.url))
        await materialize_file_response(request, response, holder)

    assert response.is_stream_consumed
    assert response.is_closed


@pytest.mark.asyncio
async def test_truncated_body_propagates_and_leaves_holder_unset(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"Content-Type": "image/png"}, stream=FailingStream([b"\x89PNG"]))

    async with make_client(handler) as client:
        request, response = await _send(client)
        holder = FileApiResponse(status_code=200, url=str(request.url))
        with pytest.raises(httpx.ReadError):
            await materialize_file_response(request, response, holder)
        await response.aclose()

    assert holder.content_bytes is None
    assert holder.content_headers is None
    assert not holder.is_materialized


@pytest.mark.asyncio
async def test_second_materialization_on_consumed_response_fails(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, stream=body_stream(b"once"))

    async with make_client(handler) as client:
        request, response = await _send(client)
        first = FileApiResponse(status_code=200, url=str(request.url))
        await materialize_file_response(request, response, first)

        second = FileApiResponse(status_code=200, url=str(request.url))
        with pytest.raises(ResponseAlreadyConsumedError):
            await materialize_file_response(request, response, second)

    assert second.content_bytes is None
    assert first.content_bytes == b"once"


@pytest.mark.asyncio
async def test_holder_is_materialized_only_once(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, stream=body_stream(b"payload"))

    async with make_client(handler) as client:
        request, response = await _send(client)
        holder = FileApiResponse(status_code=200, url=str(request.url))
        await materialize_file_response(request, response, holder)

        request2, response2 = await _send(client)
        with pytest.raises(AlreadyMaterializedError):
            await materialize_file_response(request2, response2, holder)
        await response2.aclose()

    assert holder.content_bytes == b"payload"


@pytest.mark.asyncio
async def test_closed_but_unread_response_fails(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, stream=body_stream(b"never read"))

    async with make_client(handler) as client:
        request, response = await _send(client)
        await response.aclose()
        holder = FileApiResponse(status_code=200, url=str(request.url))
        with pytest.raises(ResponseAlreadyConsumedError):
            await materialize_file_response(request, response, holder)

    assert holder.content_bytes is None


@pytest.mark.asyncio
async def test_empty_body_is_a_successful_materialization(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, stream=body_stream(b""))

    async with make_client(handler) as client:
        request, response = await _send(client)
        holder = FileApiResponse(status_code=200, url=str(request.url))
        await materialize_file_response(request, response, holder)

    assert holder.content_bytes == b""
    assert holder.is_materialized


def test_filename_from_content_disposition():
    holder = FileApiResponse(status_code=200, url="http://hydrus.test/get_files/file")
    assert holder.filename is None
    holder.set_content(
        b"x",
        httpx.Headers({"Content-Disposition": 'attachment; filename="cat picture.png"'}),
    )
    assert holder.filename == "cat picture.png"


def test_filename_star_encoding():
    holder = FileApiResponse(status_code=200, url="http://hydrus.test/get_files/file")
    holder.set_content(
        b"x",
        httpx.Headers({"Content-Disposition": "attachment; filename*=UTF-8''gato%20%C3%B1.jpg"}),
    )
    assert holder.filename == "gato ñ.jpg"
