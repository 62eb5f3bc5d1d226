from pydantic import BaseModel, ConfigDict

from models import (
    DEFAULT_AUTHOR,
    DEFAULT_DESCRIPTION,
    DEFAULT_ISBN,
    DEFAULT_TITLE,
    PLACEHOLDER_IMAGE,
)


class BookBase(BaseModel):
    title: str = DEFAULT_TITLE
    author: str = DEFAULT_AUTHOR
    isbn: str = DEFAULT_ISBN
    image_url: str = PLACEHOLDER_IMAGE
    description: str = DEFAULT_DESCRIPTION


class BookCreate(BookBase):
    bookshelf: str = ""


class Book(BookCreate):
    id: int

    model_config = ConfigDict(from_attributes=True)


class SearchResult(BookBase):
    """A normalized Google Books volume shown on the results page.

    ``id`` is the volume's first industry identifier, not a catalog key.
    """

    id: str = ""

    model_config = ConfigDict(frozen=True)
