"""Compiled-in settings and catalog used until the device has saved its own."""

from __future__ import annotations

from .models import AdminConfig, HeatLevel, Product

DEFAULT_ADMIN_CONFIG = AdminConfig(
    admin_email="",
    brand_tagline="Small batch homestyle masalas for modern kitchens.",
    support_phone="",
    upi_id="",
    city="",
    minimum_order_note="Free delivery in your city for orders above INR 400.",
)

DEFAULT_CATALOG: tuple[Product, ...] = (
    Product(
        id="signature-garam-masala",
        name="Signature Garam Masala",
        description=(
            "Slow roasted whole spices, ground in tiny batches for a deep, "
            "homelike base to every curry."
        ),
        notes="Add at the end of cooking for the best aroma.",
        price=289,
        unit="100g jar",
        heat=HeatLevel.MEDIUM,
        origin="Family recipe developed in a small home kitchen.",
        is_new=True,
        is_signature=True,
    ),
    Product(
        id="chai-masala",
        name="Sunday Chai Masala",
        description=(
            "Cardamom forward chai blend with ginger, cinnamon and clove for "
            "slow evenings and long calls."
        ),
        notes="Simmer with milk and tea leaves for 3-4 minutes.",
        price=249,
        unit="75g tin",
        heat=HeatLevel.MILD,
        origin="Inspired by weekend breakfasts at home.",
    ),
    Product(
        id="everyday-sabzi",
        name="Everyday Sabzi Blend",
        description=(
            "Balanced turmeric, cumin and coriander with a bright tomato note "
            "- an easy base for daily sabzis."
        ),
        notes="Great for bhindi, aloo, paneer and mixed vegetables.",
        price=199,
        unit="100g pouch",
        heat=HeatLevel.MILD,
        origin="Designed for quick weekday cooking.",
    ),
    Product(
        id="tadka-chilli-oil",
        name="Flame Tadka Chilli Oil",
        description=(
            "Crispy chilli, garlic and mustard seeds infused in cold pressed "
            "oil - instant tadka for dal or eggs."
        ),
        notes="Use a small spoon at a time. It is hot.",
        price=320,
        unit="150ml bottle",
        heat=HeatLevel.HOT,
        origin="Tested over many breakfasts before launch.",
    ),
)
