# main.py — routes for searching Google Books and managing the stored catalog
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional

import uvicorn
from fastapi import Depends, FastAPI, Form, Path as PathParam, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Settings, configure_logging, settings as default_settings
from crud.book import BookStore
from exceptions import CatalogError, InvalidSearch, NotFound
from middleware import MethodOverrideMiddleware
from models import (
    DEFAULT_AUTHOR,
    DEFAULT_DESCRIPTION,
    DEFAULT_ISBN,
    DEFAULT_TITLE,
    PLACEHOLDER_IMAGE,
)
from schemas import BookCreate
from services.google_books import GoogleBooksClient, normalize

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

ROUTE_NOT_FOUND = "This route does not exist"

# largest id a 64-bit integer key can hold
MAX_BOOK_ID = 2**63 - 1


def get_store(request: Request) -> BookStore:
    return request.app.state.store


def get_books_client(request: Request) -> GoogleBooksClient:
    return request.app.state.books_client


def book_form(
    title: str = Form(DEFAULT_TITLE),
    author: str = Form(DEFAULT_AUTHOR),
    isbn: str = Form(DEFAULT_ISBN),
    image_url: str = Form(PLACEHOLDER_IMAGE),
    description: str = Form(DEFAULT_DESCRIPTION),
    bookshelf: str = Form(""),
) -> BookCreate:
    # blank form fields fall back to the defaults above
    return BookCreate(
        title=title,
        author=author,
        isbn=isbn,
        image_url=image_url,
        description=description,
        bookshelf=bookshelf,
    )


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[BookStore] = None,
    books_client: Optional[GoogleBooksClient] = None,
) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.store = store or BookStore(settings.database_url, echo=settings.debug)
        app.state.books_client = books_client or GoogleBooksClient(settings.google_books_url)
        await app.state.store.connect()
        try:
            yield
        finally:
            await app.state.store.close()

    app = FastAPI(title="Book Catalog", lifespan=lifespan)
    app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # added last so it runs first and routing sees the overridden method
    app.add_middleware(MethodOverrideMiddleware)

    register_error_handlers(app)
    register_routes(app)
    return app


def register_routes(app: FastAPI):

    @app.get("/")
    async def list_books(request: Request, store: BookStore = Depends(get_store)):
        books = await store.list_all()
        return templates.TemplateResponse(request, "index.html", {"books": books})

    @app.get("/searches/new")
    async def new_search(request: Request):
        return templates.TemplateResponse(request, "searches/new.html", {})

    @app.post("/searches")
    async def create_search(
        request: Request,
        search: List[str] = Form(...),
        client: GoogleBooksClient = Depends(get_books_client),
    ):
        if len(search) < 2 or not search[0].strip():
            raise InvalidSearch("Enter a search term and choose title or author")
        term, mode = search[0], search[1]
        raw_results = await client.search(term, mode)
        results = [normalize(info) for info in raw_results]
        return templates.TemplateResponse(request, "searches/show.html", {
            "search_results": results,
            "term": term,
            "mode": mode,
        })

    @app.get("/books/{book_id:int}")
    async def get_book(
        request: Request,
        book_id: int = PathParam(..., le=MAX_BOOK_ID),
        store: BookStore = Depends(get_store),
    ):
        bookshelves = await store.list_bookshelves()
        book = await store.get_by_id(book_id)
        if book is None:
            raise NotFound(book_id)
        return templates.TemplateResponse(request, "books/show.html", {
            "book": book,
            "bookshelves": bookshelves,
        })

    @app.post("/books")
    async def create_book(
        book_data: BookCreate = Depends(book_form),
        store: BookStore = Depends(get_store),
    ):
        book_id = await store.insert(book_data)
        return RedirectResponse(f"/books/{book_id}", status_code=303)

    @app.put("/books/{book_id:int}")
    async def update_book(
        book_id: int = PathParam(..., le=MAX_BOOK_ID),
        book_data: BookCreate = Depends(book_form),
        store: BookStore = Depends(get_store),
    ):
        if not await store.update(book_id, book_data):
            raise NotFound(book_id)
        return RedirectResponse(f"/books/{book_id}", status_code=303)

    @app.delete("/books/{book_id:int}")
    async def delete_book(
        book_id: int = PathParam(..., le=MAX_BOOK_ID),
        store: BookStore = Depends(get_store),
    ):
        # deleting a missing book leaves the catalog as it was
        await store.delete(book_id)
        return RedirectResponse("/", status_code=303)


def register_error_handlers(app: FastAPI):

    @app.exception_handler(CatalogError)
    async def catalog_error(request: Request, exc: CatalogError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc,
                         exc_info=exc.__cause__ or exc)
        else:
            logger.warning("%s %s: %s", request.method, request.url.path, exc)
        return render_error(request, exc, exc.status_code, exc.title)

    @app.exception_handler(RequestValidationError)
    async def invalid_form(request: Request, exc: RequestValidationError):
        logger.warning("%s %s: invalid request %s", request.method, request.url.path, exc.errors())
        return render_error(request, exc, 400, "Invalid request")

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (404, 405):
            logger.debug("No route for %s %s", request.method, request.url.path)
            return PlainTextResponse(ROUTE_NOT_FOUND, status_code=404)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.error("%s %s failed unexpectedly", request.method, request.url.path, exc_info=exc)
        return render_error(request, exc, 500, CatalogError.title)


def render_error(request: Request, error: Exception, status_code: int, title: str):
    return templates.TemplateResponse(
        request, "error.html", {"error": error, "title": title}, status_code=status_code
    )


app = create_app()


def run():
    logger.info("Listening on port: %s", default_settings.port)
    uvicorn.run(app, host=default_settings.host, port=default_settings.port)


if __name__ == "__main__":
    run()
