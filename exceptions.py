class CatalogError(Exception):
    """Base class for failures rendered by the shared error view."""

    status_code = 500
    title = "Something went wrong"


class UpstreamError(CatalogError):
    """Google Books could not be reached or answered with a non-2xx status."""

    status_code = 502
    title = "Book search is unavailable"


class StoreError(CatalogError):
    """The database connection or a query failed."""

    status_code = 500
    title = "The catalog could not be reached"


class NotFound(CatalogError):
    status_code = 404
    title = "Book not found"

    def __init__(self, book_id: int):
        super().__init__(f"No book with id {book_id}")
        self.book_id = book_id


class InvalidSearch(CatalogError):
    """The search form did not carry a term and a mode of title or author."""

    status_code = 400
    title = "Invalid search"
