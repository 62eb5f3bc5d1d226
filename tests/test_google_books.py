import httpx
import pytest

from exceptions import InvalidSearch, UpstreamError
from services.google_books import GoogleBooksClient

from conftest import DUNE, StubGoogleBooks


@pytest.mark.asyncio
async def test_title_search_builds_intitle_query(books_client, upstream):
    results = await books_client.search("Dune", "title")

    assert results == [DUNE["volumeInfo"]]
    request = upstream.requests[0]
    assert request.url.host == "books.example.test"
    assert request.url.params["q"] == "intitle:Dune"


@pytest.mark.asyncio
async def test_author_search_builds_inauthor_query(books_client, upstream):
    await books_client.search("Frank Herbert", "author")
    assert upstream.requests[0].url.params["q"] == "inauthor:Frank Herbert"


@pytest.mark.asyncio
async def test_no_items_is_an_empty_result():
    client = GoogleBooksClient(transport=httpx.MockTransport(
        lambda request: httpx.Response(200, json={"kind": "books#volumes", "totalItems": 0})
    ))
    assert await client.search("zzzzqqq", "title") == []


@pytest.mark.asyncio
async def test_non_2xx_raises_upstream_error():
    client = GoogleBooksClient(transport=httpx.MockTransport(StubGoogleBooks(status_code=503)))
    with pytest.raises(UpstreamError) as excinfo:
        await client.search("Dune", "title")
    assert isinstance(excinfo.value.__cause__, httpx.HTTPStatusError)


@pytest.mark.asyncio
async def test_network_failure_raises_upstream_error():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = GoogleBooksClient(transport=httpx.MockTransport(refuse))
    with pytest.raises(UpstreamError):
        await client.search("Dune", "title")


@pytest.mark.asyncio
async def test_unknown_mode_is_rejected_without_a_request(books_client, upstream):
    with pytest.raises(InvalidSearch):
        await books_client.search("Dune", "isbn")
    assert upstream.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [
    ["oops"],
    "oops",
    {"items": ["oops"]},
    {"items": "oops"},
])
async def test_unexpected_body_raises_upstream_error(payload):
    client = GoogleBooksClient(transport=httpx.MockTransport(StubGoogleBooks(payload=payload)))
    with pytest.raises(UpstreamError):
        await client.search("Dune", "title")


@pytest.mark.asyncio
async def test_volume_without_volume_info_dict_is_empty_record():
    stub = StubGoogleBooks(items=[{"volumeInfo": "oops"}, {"id": "abc"}])
    client = GoogleBooksClient(transport=httpx.MockTransport(stub))
    assert await client.search("Dune", "title") == [{}, {}]
