"""Catalog row models returned by the query helpers."""

from typing import Optional

from pydantic import BaseModel


class Product(BaseModel):
    """A product row."""

    id: int
    name: str
    description: Optional[str] = None
    category_id: int
    hits: int
