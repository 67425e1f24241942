"""Tests for ShopSession: hydration, write-through and user actions."""

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from homelike.catalog import ProductDraft
from homelike.config import HomelikeConfig, ShopConfig, StorageConfig
from homelike.db import ADMIN_CONFIG_KEY, CATALOG_KEY, ORDERS_KEY, DocumentDB, PersistenceGateway
from homelike.defaults import DEFAULT_ADMIN_CONFIG, DEFAULT_CATALOG
from homelike.mail import MailComposer
from homelike.media import DataUrlImageReader
from homelike.models import PaymentMethod
from homelike.profiles import ContactFields
from homelike.session import ShopSession

_T0 = datetime(2025, 1, 15, 10, 0, tzinfo=timezone.utc)


class _SteppingClock:
    """Advances one second on every call."""

    def __init__(self, start: datetime = _T0):
        self.current = start

    def __call__(self) -> datetime:
        now = self.current
        self.current += timedelta(seconds=1)
        return now


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "homelike.db"


@pytest.fixture
def open_session(db_path):
    """Yield a factory for sessions on the shared database file."""
    opened: list[DocumentDB] = []

    def factory(*, mail=None, clock=None, hydrate=True):
        docs = DocumentDB(db_path)
        opened.append(docs)
        session = ShopSession(PersistenceGateway(docs), mail=mail, clock=clock or _SteppingClock())
        if hydrate:
            session.open()
        return session

    yield factory
    for docs in opened:
        docs.close()


def _fill_contact(session: ShopSession, **fields) -> None:
    values = {"name": "Asha", "email": "asha@example.com"}
    values.update(fields)
    session.checkout.contact = ContactFields(**values)


class TestHydration:
    def test_first_open_uses_defaults(self, open_session):
        session = open_session()
        assert list(session.catalog) == list(DEFAULT_CATALOG)
        assert session.admin_config == DEFAULT_ADMIN_CONFIG
        assert list(session.profiles) == []
        assert list(session.orders) == []

    def test_changes_before_open_are_not_written(self, open_session, db_path):
        early = open_session(hydrate=False)
        early.catalog.add_product(ProductDraft(name="Early Blend", price="150"))

        docs = DocumentDB(db_path)
        try:
            assert docs.get(CATALOG_KEY) is None
        finally:
            docs.close()

    def test_saving_actions_require_open(self, open_session):
        early = open_session(hydrate=False)
        _fill_contact(early)
        early.set_quantity("chai-masala", 1)

        with pytest.raises(RuntimeError, match="open"):
            early.update_admin_config(admin_email="owner@homelike.in")
        with pytest.raises(RuntimeError, match="open"):
            early.place_order()
        with pytest.raises(RuntimeError, match="open"):
            early.save_profile()
        with pytest.raises(RuntimeError, match="open"):
            early.create_product()

        assert early.admin_config == DEFAULT_ADMIN_CONFIG
        assert list(early.orders) == []
        assert early.cart.items() == {"chai-masala": 1}

    def test_unparsed_orders_survive_new_order(self, open_session, db_path):
        seed = open_session()
        _fill_contact(seed)
        seed.set_quantity("chai-masala", 1)
        kept = seed.place_order().order

        docs = DocumentDB(db_path)
        try:
            stored = json.loads(docs.get(ORDERS_KEY))
            bad = dict(stored[0], id="HL-2", paymentMethod="Wallet")
            docs.put(ORDERS_KEY, json.dumps(stored + [bad]))
        finally:
            docs.close()

        session = open_session(clock=_SteppingClock(_T0 + timedelta(days=1)))
        assert [o.id for o in session.orders] == [kept.id]
        _fill_contact(session)
        session.set_quantity("everyday-sabzi", 1)
        new = session.place_order().order

        docs = DocumentDB(db_path)
        try:
            stored_ids = [o["id"] for o in json.loads(docs.get(ORDERS_KEY))]
        finally:
            docs.close()
        assert stored_ids == ["HL-2", kept.id, new.id]

    def test_reload_reproduces_state(self, open_session):
        session = open_session()
        session.product_form.draft.name = "Ghee Roast"
        session.product_form.draft.price = "410"
        session.create_product()
        _fill_contact(session, city="Pune")
        session.save_profile()
        session.set_quantity("chai-masala", 2)
        result = session.place_order()
        session.update_admin_config(upi_id="homelike@upi")

        reloaded = open_session()
        assert [p.id for p in reloaded.catalog] == [p.id for p in session.catalog]
        assert list(reloaded.profiles) == list(session.profiles)
        assert list(reloaded.orders) == [result.order]
        assert reloaded.admin_config.upi_id == "homelike@upi"
        assert reloaded.cart.items() == {}

    @pytest.mark.asyncio
    async def test_open_async(self, open_session):
        first = open_session()
        first.update_admin_config(admin_email="owner@homelike.in")

        session = open_session(hydrate=False)
        await session.open_async()
        assert session.admin_config.admin_email == "owner@homelike.in"


class TestCartAndOrders:
    def test_estimated_total_tracks_cart(self, open_session):
        session = open_session()
        assert session.has_selection() is False
        session.set_quantity("chai-masala", 2)
        session.set_quantity("tadka-chilli-oil", "1")
        assert session.has_selection() is True
        assert session.estimated_total() == 2 * 249 + 320

    def test_rejected_order_keeps_state(self, open_session, db_path):
        session = open_session()
        session.set_quantity("chai-masala", 1)
        session.checkout.note = "Evening delivery"

        result = session.place_order()

        assert result.accepted is False
        assert "name and email" in result.error
        assert session.cart.items() == {"chai-masala": 1}
        assert session.checkout.note == "Evening delivery"
        assert list(session.orders) == []

    def test_order_without_admin_email_stays_local(self, open_session, db_path):
        mail = MagicMock(spec=MailComposer)
        session = open_session(mail=mail)
        _fill_contact(session)
        session.set_quantity("everyday-sabzi", 3)

        result = session.place_order()

        assert result.accepted is True
        assert result.order.total == 597
        assert "Add an admin email" in result.status
        mail.compose.assert_not_called()
        docs = DocumentDB(db_path)
        try:
            stored = json.loads(docs.get(ORDERS_KEY))
        finally:
            docs.close()
        assert [o["id"] for o in stored] == [result.order.id]

    def test_order_with_admin_email_drafts_once(self, open_session):
        mail = MagicMock(spec=MailComposer)
        session = open_session(mail=mail)
        session.update_admin_config(admin_email="owner@homelike.in")
        _fill_contact(session)
        session.checkout.payment_method = PaymentMethod.CASH_ON_DELIVERY
        session.set_quantity("chai-masala", 1)

        result = session.place_order()

        assert "Order drafted" in result.status
        mail.compose.assert_called_once()
        recipient, subject, body = mail.compose.call_args.args
        assert recipient == "owner@homelike.in"
        assert subject == f"New Homelike order {result.order.id}"
        assert "Payment method: Cash on Delivery" in body

    def test_failed_mail_draft_still_returns_order(self, open_session):
        mail = MagicMock(spec=MailComposer)
        mail.compose.side_effect = RuntimeError("no browser")
        session = open_session(mail=mail)
        session.update_admin_config(admin_email="owner@homelike.in")
        _fill_contact(session)
        session.set_quantity("chai-masala", 1)

        result = session.place_order()

        assert result.accepted is True
        assert "could not be opened" in result.status
        assert list(session.orders) == [result.order]
        assert session.cart.items() == {}

    def test_orders_newest_first(self, open_session):
        session = open_session()
        _fill_contact(session)
        ids = []
        for qty in (1, 2):
            session.set_quantity("chai-masala", qty)
            ids.append(session.place_order().order.id)

        assert [o.id for o in session.orders_newest_first()] == ids[::-1]

    def test_receipt_lines_use_shop_name(self, db_path):
        config = HomelikeConfig(
            storage=StorageConfig(path=str(db_path)),
            shop=ShopConfig(name="Spice Box"),
        )
        session = ShopSession.from_config(config, clock=_SteppingClock())
        session.open()
        _fill_contact(session)
        session.set_quantity("chai-masala", 1)
        order = session.place_order().order

        lines = session.receipt_lines(order)
        assert lines[0] == f"New Spice Box order: {order.id}"
        assert lines[-1] == "This order was placed from the Spice Box startup site."


class TestProfiles:
    def test_save_then_update(self, open_session):
        session = open_session()
        _fill_contact(session)
        assert session.save_profile() == "Saved a new profile in this browser."
        first_id = session.active_profile_id

        _fill_contact(session, email="ASHA@example.com ", city="Pune")
        assert session.save_profile() == "Updated your saved profile."
        assert session.active_profile_id == first_id
        assert len(session.profiles) == 1
        assert session.active_profile.city == "Pune"

    def test_save_requires_name_and_email(self, open_session):
        session = open_session()
        session.checkout.contact = ContactFields(name="Asha")
        assert "name and email" in session.save_profile()
        assert len(session.profiles) == 0
        assert session.active_profile is None

    def test_use_profile_fills_form_and_links_order(self, open_session):
        session = open_session()
        _fill_contact(session, phone="98765 43210")
        session.save_profile()
        profile_id = session.active_profile_id
        session.checkout.contact = ContactFields()
        session.active_profile_id = None

        assert session.use_profile(profile_id) is True
        assert session.checkout.contact.phone == "98765 43210"
        session.set_quantity("chai-masala", 1)
        assert session.place_order().order.profile_id == profile_id

    def test_use_unknown_profile(self, open_session):
        session = open_session()
        assert session.use_profile("user-missing") is False


class TestAdmin:
    def test_create_product_resets_form(self, open_session):
        session = open_session()
        session.product_form.draft.name = "Kashmiri Chilli"
        session.product_form.draft.price = "180"

        product, message = session.create_product()

        assert product.id == "kashmiri-chilli"
        assert message == 'Added "Kashmiri Chilli" to your Homelike catalog.'
        assert session.product_form.draft.name == ""
        assert list(session.catalog)[-1] == product

    def test_create_product_failure_keeps_draft(self, open_session):
        session = open_session()
        session.product_form.draft.name = "Kashmiri Chilli"
        session.product_form.draft.price = "free"

        product, message = session.create_product()

        assert product is None
        assert message == "Enter a valid price in INR."
        assert session.product_form.draft.name == "Kashmiri Chilli"
        assert len(session.catalog) == len(DEFAULT_CATALOG)

    def test_update_admin_config_persists(self, open_session, db_path):
        session = open_session()
        config = session.update_admin_config(support_phone="+91 90000 00000")
        assert config.support_phone == "+91 90000 00000"

        docs = DocumentDB(db_path)
        try:
            stored = json.loads(docs.get(ADMIN_CONFIG_KEY))
        finally:
            docs.close()
        assert stored["supportPhone"] == "+91 90000 00000"

    @pytest.mark.asyncio
    async def test_attach_product_image_then_create(self, open_session, tmp_path):
        image = tmp_path / "chilli.jpg"
        image.write_bytes(b"\xff\xd8\xff")
        session = open_session()
        session.product_form.draft.name = "Kashmiri Chilli"
        session.product_form.draft.price = 180

        assert await session.attach_product_image(DataUrlImageReader(), image) is True
        product, _ = session.create_product()

        assert product.image_data_url == "data:image/jpeg;base64,/9j/"
        assert session.product_form.draft.image_data_url is None
