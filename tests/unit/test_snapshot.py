"""Unit tests for snapshot generation."""
from catalog_admin.services.catalog.models import Menu
from catalog_admin.services.publishing.snapshot import artifact_path, slugify


class TestSlugify:
    """Test menu slugs."""

    def test_slugify(self):
        """Test that names collapse to lowercase dash-separated slugs."""
        assert slugify("Dinner Menu") == "dinner-menu"
        assert slugify("  Café & Bar -- 2026! ") == "caf-bar-2026"

    def test_artifact_path(self):
        """Test the storage path of a menu artifact."""
        assert artifact_path("abc") == "menus/menu-abc.json"


class TestSnapshotGenerator:
    """Test projecting menus into public documents."""

    async def test_generate(self, generator, repository):
        """Test the overall shape of a generated menu."""
        menu = await repository.get_menu("dinner")

        snapshot = await generator.generate(menu, 3)
        document = snapshot.to_document()

        assert document["metadata"]["name"] == "Dinner Menu"
        assert document["metadata"]["type"] == "web"
        assert document["metadata"]["version"] == 3
        assert "lastUpdated" in document["metadata"]
        assert document["restaurant"]["name"] == "Test Restaurant"
        assert document["restaurant"]["contactInfo"]["email"] == "hello@test.example"
        assert document["defaultLanguage"] == "en"
        assert document["languages"] == ["en"]
        assert "translations" not in document

    async def test_categories_follow_menu_order(self, generator, synchronizer, repository):
        """Test that categories appear in the menu's list order."""
        await synchronizer.set_menu_categories("dinner", ["drinks", "mains"])
        menu = await repository.get_menu("dinner")

        snapshot = await generator.generate(menu, 1)

        assert [category.id for category in snapshot.categories] == ["drinks", "mains"]

    async def test_inactive_items_excluded(self, generator, repository):
        """Test that only active items are published, sorted by order."""
        await repository.set_item_active("veggie", False)
        menu = await repository.get_menu("dinner")

        snapshot = await generator.generate(menu, 1)

        mains = snapshot.categories[0]
        assert [item.id for item in mains.items] == ["burger"]

    async def test_item_fields(self, generator, repository):
        """Test that items carry their entries, flags and order."""
        menu = await repository.get_menu("dinner")

        snapshot = await generator.generate(menu, 1)

        burger = snapshot.categories[0].items[0]
        assert burger.price == 10.0
        assert [option.key for option in burger.options] == ["opt-single", "opt-double"]
        assert burger.extras[0].item == "Bacon"
        assert burger.allergies == ["gluten"]
        assert burger.flags.active is True
        veggie = snapshot.categories[0].items[1]
        assert veggie.flags.vegetarian is True

    async def test_missing_category_skipped(self, generator):
        """Test that a dangling category reference is left out."""
        menu = Menu(id="adhoc", name="Ad hoc", categories=["ghost", "drinks"])

        snapshot = await generator.generate(menu, 1)

        assert [category.id for category in snapshot.categories] == ["drinks"]

    async def test_translations_included(self, generator, repository, translation_service):
        """Test that supported translations are embedded with their languages."""
        await translation_service.save_translation(
            "menu_items",
            "burger",
            "es",
            {"name": "Hamburguesa", "options": [{"key": "opt-double", "text": "Doble"}]},
        )
        await translation_service.save_translation("menus", "dinner", "de", {"name": "Abendkarte"})
        menu = await repository.get_menu("dinner")

        snapshot = await generator.generate(menu, 1)
        document = snapshot.to_document()

        assert document["languages"] == ["de", "en", "es"]
        assert document["translations"] == {"de": {"name": "Abendkarte"}}
        burger = document["categories"][0]["items"][0]
        assert burger["translations"]["es"] == {
            "name": "Hamburguesa",
            "options": [{"key": "opt-double", "text": "Doble"}],
        }

    async def test_unsupported_translation_languages_ignored(self, generator, repository, store):
        """Test that stored translations outside the supported set are dropped."""
        batch = store.batch()
        batch.set("translations", "menus:dinner:fr", {
            "collection": "menus",
            "entity_id": "dinner",
            "language": "fr",
            "name": "Carte du soir",
        })
        await batch.commit()
        menu = await repository.get_menu("dinner")

        snapshot = await generator.generate(menu, 1)

        assert snapshot.languages == ["en"]
        assert snapshot.translations is None
