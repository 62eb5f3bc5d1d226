# models.py
from sqlalchemy import Column, Integer, Text

from database import Base

DEFAULT_TITLE = "No title available"
DEFAULT_AUTHOR = "No author available"
DEFAULT_ISBN = "No ISBN available"
DEFAULT_DESCRIPTION = "No description available"
PLACEHOLDER_IMAGE = "https://i.imgur.com/J5LVHEL.jpg"


class Book(Base):
    __tablename__ = "books"
    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False, default=DEFAULT_TITLE)
    author = Column(Text, nullable=False, default=DEFAULT_AUTHOR)
    isbn = Column(Text, nullable=False, default=DEFAULT_ISBN)
    image_url = Column(Text, nullable=False, default=PLACEHOLDER_IMAGE)
    description = Column(Text, nullable=False, default=DEFAULT_DESCRIPTION)
    bookshelf = Column(Text, nullable=False, default="", index=True)

    def __repr__(self):
        return f"<Book id={self.id} title={self.title!r} bookshelf={self.bookshelf!r}>"
