import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from config import Settings
from crud.book import BookStore
from main import create_app
from services.google_books import GoogleBooksClient

DUNE = {
    "volumeInfo": {
        "title": "Dune",
        "authors": ["Frank Herbert"],
        "industryIdentifiers": [{"type": "ISBN_13", "identifier": "9780441172719"}],
        "imageLinks": {"smallThumbnail": "http://books.google.com/books/content?id=B1hSG45JCX4C"},
        "description": "Set on the desert planet Arrakis.",
    }
}


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'books.db'}"


@pytest_asyncio.fixture
async def store(database_url):
    store = BookStore(database_url)
    await store.connect()
    yield store
    await store.close()


class StubGoogleBooks:
    """Stands in for the Google Books volumes endpoint."""

    def __init__(self, items=None, status_code=200, payload=None):
        self.items = [DUNE] if items is None else items
        self.status_code = status_code
        self.payload = payload
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"error": {"message": "boom"}})
        if self.payload is not None:
            return httpx.Response(200, json=self.payload)
        return httpx.Response(200, json={"kind": "books#volumes", "items": self.items})


@pytest.fixture
def upstream():
    return StubGoogleBooks()


@pytest.fixture
def books_client(upstream):
    return GoogleBooksClient("https://books.example.test/volumes", transport=httpx.MockTransport(upstream))


@pytest.fixture
def client(database_url, books_client):
    app = create_app(
        settings=Settings(database_url=database_url),
        books_client=books_client,
    )
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def saved_book(client):
    response = client.post("/books", data={
        "title": "Dune",
        "author": "Frank Herbert",
        "isbn": "ISBN_13 9780441172719",
        "image_url": "https://books.google.com/dune.jpg",
        "description": "Set on the desert planet Arrakis.",
        "bookshelf": "Science Fiction",
    }, follow_redirects=False)
    assert response.status_code == 303
    return int(response.headers["location"].rsplit("/", 1)[1])
