"""Catalog models: items, categories and menus."""
import uuid
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

ITEMS = "menu_items"
CATEGORIES = "categories"
MENUS = "menus"

MenuType = Literal["web", "printable"]
PublishStatus = Literal["draft", "published", "unpublished"]


def new_entry_key() -> str:
    """Stable key for an option, extra or addon entry."""
    return uuid.uuid4().hex[:12]


class ItemOption(BaseModel):
    """Mutually exclusive variant of an item (e.g. a size)."""

    key: str = Field(default_factory=new_entry_key)
    option: str
    price: float = 0.0


class ItemExtra(BaseModel):
    """Priced additional selection."""

    key: str = Field(default_factory=new_entry_key)
    item: str
    price: float


class ItemAddon(BaseModel):
    """Unpriced additional selection."""

    key: str = Field(default_factory=new_entry_key)
    item: str


class ItemFlags(BaseModel):
    """Item flags. ``has_*`` flags are derived from the entry lists."""

    active: bool = True
    vegetarian: bool = False
    vegan: bool = False
    spicy: bool = False
    has_options: bool = False
    has_extras: bool = False
    has_addons: bool = False


class Item(BaseModel):
    """Menu item."""

    id: str = ""
    name: str
    description: str = ""
    price: float = 0.0
    category: str = ""
    options: List[ItemOption] = []
    extras: List[ItemExtra] = []
    addons: List[ItemAddon] = []
    allergies: List[str] = []
    order: int = 0
    flags: ItemFlags = Field(default_factory=ItemFlags)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def derive_flags(self) -> "Item":
        """Recompute the ``has_*`` flags from the entry lists."""
        self.flags.has_options = len(self.options) > 0
        self.flags.has_extras = len(self.extras) > 0
        self.flags.has_addons = len(self.addons) > 0
        return self


class Category(BaseModel):
    """Menu category holding an ordered list of item ids."""

    id: str = ""
    name: str
    description: str = ""
    header: str = ""
    footer: str = ""
    extras: List[ItemExtra] = []
    addons: List[ItemAddon] = []
    items: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Menu(BaseModel):
    """Menu holding an ordered list of category ids."""

    id: str = ""
    name: str
    description: str = ""
    type: MenuType = "web"
    categories: List[str] = []
    is_active: bool = True
    order: int = 0
    image: Optional[str] = None
    image_aspect_ratio: Optional[float] = None
    publish_status: PublishStatus = "draft"
    published_url: Optional[str] = None
    published_at: Optional[datetime] = None
    last_published: Optional[datetime] = None
    snapshot_version: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ItemCreate(BaseModel):
    """Payload for adding an item."""

    name: str
    description: str = ""
    price: float = 0.0
    category: str = ""
    options: List[ItemOption] = []
    extras: List[ItemExtra] = []
    addons: List[ItemAddon] = []
    allergies: List[str] = []
    active: bool = True
    vegetarian: bool = False
    vegan: bool = False
    spicy: bool = False


class ItemUpdate(BaseModel):
    """Partial update of an item's plain fields.

    ``category`` and ``order`` are relationship fields and go through the
    synchronizer and the order manager instead.
    """

    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    options: Optional[List[ItemOption]] = None
    extras: Optional[List[ItemExtra]] = None
    addons: Optional[List[ItemAddon]] = None
    allergies: Optional[List[str]] = None
    active: Optional[bool] = None
    vegetarian: Optional[bool] = None
    vegan: Optional[bool] = None
    spicy: Optional[bool] = None


class CategoryCreate(BaseModel):
    """Payload for adding a category."""

    name: str
    description: str = ""
    header: str = ""
    footer: str = ""
    extras: List[ItemExtra] = []
    addons: List[ItemAddon] = []


class CategoryUpdate(BaseModel):
    """Partial update of a category's plain fields."""

    name: Optional[str] = None
    description: Optional[str] = None
    header: Optional[str] = None
    footer: Optional[str] = None
    extras: Optional[List[ItemExtra]] = None
    addons: Optional[List[ItemAddon]] = None


class MenuCreate(BaseModel):
    """Payload for adding a menu."""

    name: str
    description: str = ""
    type: MenuType = "web"
    categories: List[str] = []
    is_active: bool = True
    image: Optional[str] = None
    image_aspect_ratio: Optional[float] = None


class MenuUpdate(BaseModel):
    """Partial update of a menu's plain fields."""

    name: Optional[str] = None
    description: Optional[str] = None
    type: Optional[MenuType] = None
    is_active: Optional[bool] = None
    image: Optional[str] = None
    image_aspect_ratio: Optional[float] = None


def to_document(model: BaseModel) -> Dict[str, Any]:
    """Serialize a model into a JSON-compatible document."""
    return model.model_dump(mode="json")
