"""Tests for CatalogStore and the product draft form."""

import asyncio
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from homelike.catalog import (
    DEFAULT_DESCRIPTION,
    CatalogStore,
    ProductDraft,
    ProductDraftForm,
    parse_price,
)
from homelike.errors import ValidationError
from homelike.ids import IdGenerator, slugify
from homelike.media import ImageReader
from homelike.models import HeatLevel, Product

_T0 = datetime(2025, 1, 15, 10, 0, tzinfo=timezone.utc)


def _fixed_ids() -> IdGenerator:
    return IdGenerator(lambda: _T0)


@pytest.fixture
def catalog():
    return CatalogStore(ids=_fixed_ids())


class TestSlugify:
    def test_basic(self):
        assert slugify("Chai Mix") == "chai-mix"

    def test_collapses_runs_and_strips(self):
        assert slugify("  --Flame!! Tadka & Oil-- ") == "flame-tadka-oil"

    def test_non_ascii_only(self):
        assert slugify("मसाला") == ""


class TestParsePrice:
    @pytest.mark.parametrize("raw, expected", [
        ("120", 120), (120, 120), ("99.5", 100), (99.4, 99), (" 250 ", 250), ("0.5", 1),
    ])
    def test_valid(self, raw, expected):
        assert parse_price(raw) == expected

    @pytest.mark.parametrize("raw", ["", "abc", "0", "0.3", -5, "nan", "inf", float("inf"), None])
    def test_invalid(self, raw):
        with pytest.raises(ValidationError, match="valid price"):
            parse_price(raw)


class TestAddProduct:
    def test_creates_product_with_defaults(self, catalog):
        product = catalog.add_product(ProductDraft(name=" Chai Mix ", price="120"))

        assert product.id == "chai-mix"
        assert product.name == "Chai Mix"
        assert product.price == 120
        assert product.description == DEFAULT_DESCRIPTION
        assert product.unit == "100g"
        assert product.heat is HeatLevel.MEDIUM
        assert product.is_new is True
        assert product.notes is None
        assert catalog.ids() == ["chai-mix"]

    def test_appends_in_insertion_order(self, catalog):
        catalog.add_product(ProductDraft(name="Zeta", price=10))
        catalog.add_product(ProductDraft(name="Alpha", price=20))
        assert catalog.ids() == ["zeta", "alpha"]

    def test_duplicate_name_gets_distinct_id(self, catalog):
        first = catalog.add_product(ProductDraft(name="Chai Mix", price=120))
        second = catalog.add_product(ProductDraft(name="Chai Mix", price=120))

        assert first.id == "chai-mix"
        assert second.id == f"chai-mix-{int(_T0.timestamp() * 1000)}"
        assert first.id != second.id
        assert len(catalog) == 2
        assert catalog.get("chai-mix") == first

    def test_third_duplicate_at_same_instant_is_still_unique(self, catalog):
        ids = {catalog.add_product(ProductDraft(name="Chai", price=1)).id for _ in range(3)}
        assert len(ids) == 3

    def test_empty_slug_falls_back_to_placeholder(self, catalog):
        product = catalog.add_product(ProductDraft(name="!!!", price=50))
        assert product.id == f"spice-{int(_T0.timestamp() * 1000)}"

    def test_optional_fields_trimmed(self, catalog):
        product = catalog.add_product(
            ProductDraft(
                name="Tadka Oil", price=320, unit=" 150ml bottle ",
                heat="Hot", origin="  ", notes=" Use sparingly ",
                is_signature=True, image_data_url="data:image/png;base64,AA==",
            )
        )
        assert product.unit == "150ml bottle"
        assert product.heat is HeatLevel.HOT
        assert product.origin is None
        assert product.notes == "Use sparingly"
        assert product.is_signature is True
        assert product.image_data_url == "data:image/png;base64,AA=="

    def test_blank_name_rejected_without_change(self):
        on_change = MagicMock()
        catalog = CatalogStore(ids=_fixed_ids(), on_change=on_change)

        with pytest.raises(ValidationError, match="name"):
            catalog.add_product(ProductDraft(name="   ", price=100))

        assert len(catalog) == 0
        on_change.assert_not_called()

    def test_unknown_heat_rejected_without_change(self):
        on_change = MagicMock()
        catalog = CatalogStore(ids=_fixed_ids(), on_change=on_change)

        with pytest.raises(ValidationError, match="heat level"):
            catalog.add_product(ProductDraft(name="Ghost Pepper", price=300, heat="Volcanic"))

        assert len(catalog) == 0
        on_change.assert_not_called()

    def test_bad_price_rejected_without_change(self, catalog):
        existing = Product(id="x", name="X", description="", price=1, unit="1g")
        catalog.replace_all([existing])

        with pytest.raises(ValidationError):
            catalog.add_product(ProductDraft(name="Y", price="-3"))

        assert list(catalog) == [existing]

    def test_on_change_fires_once_per_add(self):
        on_change = MagicMock()
        catalog = CatalogStore(ids=_fixed_ids(), on_change=on_change)
        catalog.add_product(ProductDraft(name="A", price=1))
        on_change.assert_called_once_with()

    def test_price_of_missing_product(self, catalog):
        assert catalog.price_of("nothing") is None


class _SlowReader(ImageReader):
    def __init__(self, result):
        self.result = result
        self.release = asyncio.Event()

    async def read_as_data_url(self, source):
        await self.release.wait()
        return self.result


class TestProductDraftForm:
    @pytest.mark.asyncio
    async def test_attach_image_applies_result(self):
        form = ProductDraftForm()
        reader = _SlowReader("data:image/png;base64,AA==")
        reader.release.set()

        assert await form.attach_image(reader, "photo.png") is True
        assert form.draft.image_data_url == "data:image/png;base64,AA=="

    @pytest.mark.asyncio
    async def test_applies_to_draft_edited_meanwhile(self):
        form = ProductDraftForm()
        reader = _SlowReader("data:image/png;base64,AA==")

        task = asyncio.create_task(form.attach_image(reader, "photo.png"))
        await asyncio.sleep(0)
        form.draft.name = "Edited while reading"
        reader.release.set()

        assert await task is True
        assert form.draft.name == "Edited while reading"
        assert form.draft.image_data_url == "data:image/png;base64,AA=="

    @pytest.mark.asyncio
    async def test_late_result_after_reset_is_dropped(self):
        form = ProductDraftForm()
        reader = _SlowReader("data:image/png;base64,AA==")

        task = asyncio.create_task(form.attach_image(reader, "photo.png"))
        await asyncio.sleep(0)
        form.reset()
        reader.release.set()

        assert await task is False
        assert form.draft.image_data_url is None

    @pytest.mark.asyncio
    async def test_no_result_leaves_draft_alone(self):
        form = ProductDraftForm()
        form.draft.image_data_url = "data:old"
        reader = _SlowReader(None)
        reader.release.set()

        assert await form.attach_image(reader, "photo.png") is False
        assert form.draft.image_data_url == "data:old"
