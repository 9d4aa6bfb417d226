"""Catalog validation predicates.

Every writer passes an entity through these before adding it to a batch,
so a rejected entity never reaches the store.
"""
from typing import Iterable, List, Sequence

from catalog_admin.core.errors import ValidationError
from catalog_admin.services.catalog.models import Category, Item, ItemAddon, ItemExtra, Menu


def ensure_unique(field: str, values: Iterable[str]) -> None:
    """Reject a list containing the same value twice."""
    seen = set()
    for value in values:
        if value in seen:
            raise ValidationError(field, f"duplicate id '{value}'")
        seen.add(value)


def _ensure_name(field: str, name: str) -> None:
    if not name or not name.strip():
        raise ValidationError(field, "must not be empty")


def _ensure_price(field: str, price: float) -> None:
    if price is None or price < 0:
        raise ValidationError(field, "must be a non-negative number")


def _validate_extras(field: str, extras: Sequence[ItemExtra]) -> None:
    ensure_unique(f"{field}.key", (extra.key for extra in extras))
    for index, extra in enumerate(extras):
        _ensure_name(f"{field}[{index}].item", extra.item)
        _ensure_price(f"{field}[{index}].price", extra.price)


def _validate_addons(field: str, addons: Sequence[ItemAddon]) -> None:
    ensure_unique(f"{field}.key", (addon.key for addon in addons))
    for index, addon in enumerate(addons):
        _ensure_name(f"{field}[{index}].item", addon.item)


def validate_item(item: Item) -> Item:
    """Validate an item, raising ValidationError on the first problem."""
    _ensure_name("name", item.name)
    _ensure_price("price", item.price)

    ensure_unique("options.key", (option.key for option in item.options))
    for index, option in enumerate(item.options):
        _ensure_name(f"options[{index}].option", option.option)
        _ensure_price(f"options[{index}].price", option.price)
    _validate_extras("extras", item.extras)
    _validate_addons("addons", item.addons)

    if item.order < 0:
        raise ValidationError("order", "must be non-negative")

    flags = item.flags
    if flags.has_options != bool(item.options):
        raise ValidationError("flags.has_options", "does not match options")
    if flags.has_extras != bool(item.extras):
        raise ValidationError("flags.has_extras", "does not match extras")
    if flags.has_addons != bool(item.addons):
        raise ValidationError("flags.has_addons", "does not match addons")
    return item


def validate_category(category: Category) -> Category:
    """Validate a category."""
    _ensure_name("name", category.name)
    _validate_extras("extras", category.extras)
    _validate_addons("addons", category.addons)
    ensure_unique("items", category.items)
    if any(not item_id for item_id in category.items):
        raise ValidationError("items", "contains an empty id")
    return category


def validate_menu(menu: Menu) -> Menu:
    """Validate a menu."""
    _ensure_name("name", menu.name)
    if menu.type not in ("web", "printable"):
        raise ValidationError("type", f"unknown menu type '{menu.type}'")
    ensure_unique("categories", menu.categories)
    if any(not category_id for category_id in menu.categories):
        raise ValidationError("categories", "contains an empty id")
    if menu.order < 0:
        raise ValidationError("order", "must be non-negative")
    if menu.publish_status == "published":
        if not menu.published_url:
            raise ValidationError("published_url", "required while published")
        if menu.last_published is None:
            raise ValidationError("last_published", "required while published")
    return menu


def validate_ids(field: str, ids: List[str]) -> List[str]:
    """Validate an ordered id list supplied by a command."""
    ensure_unique(field, ids)
    if any(not isinstance(value, str) or not value for value in ids):
        raise ValidationError(field, "contains an empty id")
    return ids
