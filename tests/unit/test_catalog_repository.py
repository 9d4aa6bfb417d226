"""Unit tests for the catalog repository."""
import pytest

from catalog_admin.core.errors import AuthenticationError, NotFoundError, ValidationError
from catalog_admin.services.catalog.models import (
    ITEMS,
    CategoryCreate,
    CategoryUpdate,
    ItemCreate,
    ItemExtra,
    ItemUpdate,
    MenuCreate,
    MenuUpdate,
)


class TestReads:
    """Test catalog reads."""

    async def test_list_items_by_category(self, repository):
        """Test that category listings are sorted by order."""
        items = await repository.list_items("mains")

        assert [item.id for item in items] == ["burger", "veggie", "retired"]

    async def test_list_active_items(self, repository):
        """Test that inactive items can be filtered out."""
        items = await repository.list_items("mains", active_only=True)

        assert [item.id for item in items] == ["burger", "veggie"]

    async def test_list_categories_by_name(self, repository):
        """Test that categories are listed alphabetically."""
        categories = await repository.list_categories()

        assert [category.name for category in categories] == ["Desserts", "Drinks", "Mains"]

    async def test_list_menus_by_type(self, repository):
        """Test filtering menus by type."""
        assert [menu.id for menu in await repository.list_menus("web")] == ["dinner", "lunch"]
        assert [menu.id for menu in await repository.list_menus("printable")] == ["print"]

    async def test_get_missing(self, repository):
        """Test that missing entities raise NotFoundError."""
        with pytest.raises(NotFoundError):
            await repository.get_item("ghost")
        with pytest.raises(NotFoundError):
            await repository.get_categories(["mains", "ghost"])

    async def test_menus_containing(self, repository):
        """Test the reverse lookup from categories to menus."""
        menus = await repository.menus_containing("drinks")

        assert sorted(menu.id for menu in menus) == ["dinner", "lunch"]


class TestItemWrites:
    """Test adding and updating items."""

    async def test_add_item_without_category(self, repository):
        """Test adding a standalone item."""
        item = await repository.add_item(ItemCreate(name="Water", price=1.0))

        assert item.id
        assert item.category == ""
        assert item.created_at == item.updated_at
        assert (await repository.get_item(item.id)).name == "Water"

    async def test_add_item_to_category(self, repository):
        """Test that adding into a category appends it to the category."""
        item = await repository.add_item(
            ItemCreate(name="Fries", price=3.0, category="mains", vegan=True)
        )

        assert item.flags.vegan is True
        assert (await repository.get_category("mains")).items[-1] == item.id
        assert (await repository.get_menu("dinner")).updated_at is not None

    async def test_add_item_unknown_category(self, repository, store):
        """Test that an unknown category is refused before any write."""
        with pytest.raises(NotFoundError):
            await repository.add_item(ItemCreate(name="Fries", category="ghost"))

        assert len(await store.list("menu_items")) == 4

    async def test_add_invalid_item(self, repository):
        """Test that invalid items are not stored."""
        with pytest.raises(ValidationError):
            await repository.add_item(ItemCreate(name="", price=1.0))

    async def test_update_derives_flags(self, repository):
        """Test that entry edits recompute has_* flags."""
        item = await repository.update_item(
            "soda", ItemUpdate(extras=[ItemExtra(item="Ice", price=0.0)])
        )

        assert item.flags.has_extras is True
        stored = await repository.get_item("soda")
        assert stored.flags.has_extras is True
        assert stored.extras[0].key

    async def test_update_flags(self, repository):
        """Test updating dietary flags."""
        item = await repository.update_item("burger", ItemUpdate(spicy=True))

        assert item.flags.spicy is True
        assert item.flags.has_options is True

    async def test_empty_update_is_noop(self, repository):
        """Test that an empty update writes nothing."""
        item = await repository.update_item("burger", ItemUpdate())

        assert item.updated_at is None

    async def test_set_item_active(self, repository):
        """Test toggling the active flag."""
        item = await repository.set_item_active("burger", False)

        assert item.flags.active is False

    async def test_null_fields_rejected(self, repository, store):
        """Test that sending null for a list or text field is refused before any write."""
        before = await store.get(ITEMS, "burger")

        for update in (ItemUpdate(allergies=None), ItemUpdate(options=None), ItemUpdate(description=None)):
            with pytest.raises(ValidationError) as exc_info:
                await repository.update_item("burger", update)
            assert exc_info.value.reason == "must not be null"

        assert await store.get(ITEMS, "burger") == before
        assert (await repository.get_item("burger")).allergies == ["gluten"]

    async def test_unreadable_item_not_staged(self, repository, store):
        """Test that an item which would not load back is refused at staging."""
        item = await repository.get_item("burger")
        item.allergies = None

        with pytest.raises(ValidationError) as exc_info:
            repository.stage_item(store.batch(), item)

        assert exc_info.value.field == "allergies"

    async def test_requires_operator(self, anonymous_repository):
        """Test that anonymous callers cannot write."""
        with pytest.raises(AuthenticationError):
            await anonymous_repository.add_item(ItemCreate(name="Water"))


class TestCategoryAndMenuWrites:
    """Test adding and updating categories and menus."""

    async def test_add_category(self, repository):
        """Test adding an empty category."""
        category = await repository.add_category(CategoryCreate(name="Sides"))

        assert category.items == []
        assert (await repository.get_category(category.id)).name == "Sides"

    async def test_add_menu(self, repository):
        """Test adding a draft menu at the end of its type."""
        menu = await repository.add_menu(MenuCreate(name="Brunch", categories=["drinks"]))

        assert menu.publish_status == "draft"
        assert menu.order == 2
        assert menu.categories == ["drinks"]

    async def test_add_menu_unknown_category(self, repository):
        """Test that menus can only list existing categories."""
        with pytest.raises(NotFoundError):
            await repository.add_menu(MenuCreate(name="Brunch", categories=["ghost"]))

    async def test_update_menu(self, repository):
        """Test a partial menu update."""
        menu = await repository.update_menu("dinner", MenuUpdate(image="dinner.png"))

        assert menu.image == "dinner.png"
        assert menu.name == "Dinner Menu"
        assert menu.updated_at is not None

    async def test_update_menu_null_description(self, repository):
        """Test that a menu description cannot be cleared to null."""
        with pytest.raises(ValidationError) as exc_info:
            await repository.update_menu("dinner", MenuUpdate(description=None))

        assert exc_info.value.field == "description"
        assert (await repository.get_menu("dinner")).description is not None

    async def test_update_menu_clears_image(self, repository):
        """Test that optional menu fields can be cleared with null."""
        await repository.update_menu("dinner", MenuUpdate(image="dinner.png"))

        menu = await repository.update_menu("dinner", MenuUpdate(image=None))

        assert menu.image is None
        assert (await repository.get_menu("dinner")).image is None

    async def test_update_category_null_extras(self, repository):
        """Test that category entry lists cannot be cleared to null."""
        with pytest.raises(ValidationError):
            await repository.update_category("mains", CategoryUpdate(extras=None))

        assert (await repository.get_category("mains")).extras == []
