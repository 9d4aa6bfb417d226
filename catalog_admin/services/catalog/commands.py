"""Typed mutation commands consumed by the reference synchronizer."""
from typing import List, Optional, Union

from pydantic import BaseModel


class SetItemCategoryCommand(BaseModel):
    """Move an item into a category, or out of any category with ``""``."""

    item_id: str
    category_id: str = ""
    expected_category: Optional[str] = None


class SetCategoryItemsCommand(BaseModel):
    """Replace a category's item list."""

    category_id: str
    item_ids: List[str]


class SetMenuCategoriesCommand(BaseModel):
    """Replace a menu's category list."""

    menu_id: str
    category_ids: List[str]


class ReorderItemsCommand(BaseModel):
    """Assign item orders within a category by position."""

    category_id: str
    item_ids: List[str]


class ReorderMenusCommand(BaseModel):
    """Assign menu orders by position."""

    menu_ids: List[str]


class DeleteItemCommand(BaseModel):
    item_id: str


class DeleteCategoryCommand(BaseModel):
    category_id: str


class DeleteMenuCommand(BaseModel):
    menu_id: str


CatalogCommand = Union[
    SetItemCategoryCommand,
    SetCategoryItemsCommand,
    SetMenuCategoriesCommand,
    ReorderItemsCommand,
    ReorderMenusCommand,
    DeleteItemCommand,
    DeleteCategoryCommand,
    DeleteMenuCommand,
]
