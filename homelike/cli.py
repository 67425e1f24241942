"""CLI entry point for inspecting the data saved on this device."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from dotenv import load_dotenv

from .config import HomelikeConfig, load_config
from .receipt import format_amount, format_datetime
from .session import ShopSession


def main(argv: list[str] | None = None) -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="homelike",
        description="Inspect the Homelike catalog, profiles and orders saved on this device",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to a configuration file (TOML)",
    )

    sub = parser.add_subparsers(dest="command")

    catalog_parser = sub.add_parser("catalog", help="List products in display order")
    catalog_parser.add_argument("--json", action="store_true", help="Output as JSON")

    profiles_parser = sub.add_parser("profiles", help="List saved customer profiles")
    profiles_parser.add_argument("--json", action="store_true", help="Output as JSON")

    orders_parser = sub.add_parser("orders", help="List orders, newest first")
    orders_parser.add_argument("--json", action="store_true", help="Output as JSON")

    receipt_parser = sub.add_parser("receipt", help="Show the receipt for an order")
    receipt_parser.add_argument("order_id", help="Order identifier, e.g. HL-1736930000000")
    receipt_parser.add_argument(
        "--pdf", type=str, default=None, metavar="FILE",
        help="Write the receipt to a PDF file",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    config = load_config(args.config)
    logging.basicConfig(
        level=config.logging.level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    session = ShopSession.from_config(config)
    session.open()

    match args.command:
        case "catalog":
            _cmd_catalog(session, config, args)
        case "profiles":
            _cmd_profiles(session, args)
        case "orders":
            _cmd_orders(session, config, args)
        case "receipt":
            _cmd_receipt(session, config, args)


def _cmd_catalog(session: ShopSession, config: HomelikeConfig, args) -> None:
    products = list(session.catalog)
    if args.json:
        print(json.dumps([p.to_dict() for p in products], ensure_ascii=False, indent=2))
        return
    print(f"{len(products)} product(s)")
    for p in products:
        flags = []
        if p.is_signature:
            flags.append("signature")
        if p.is_new:
            flags.append("new")
        flag_str = f" [{', '.join(flags)}]" if flags else ""
        price = format_amount(p.price, config.shop.currency_symbol)
        print(f"  {p.id:<28} {p.name} - {price} / {p.unit} ({p.heat.value}){flag_str}")


def _cmd_profiles(session: ShopSession, args) -> None:
    profiles = list(session.profiles)
    if args.json:
        print(json.dumps([p.to_dict() for p in profiles], ensure_ascii=False, indent=2))
        return
    if not profiles:
        print("No saved profiles.")
        return
    for p in profiles:
        city = f", {p.city}" if p.city else ""
        print(f"  {p.id:<20} {p.name} <{p.email}>{city}")


def _cmd_orders(session: ShopSession, config: HomelikeConfig, args) -> None:
    orders = session.orders_newest_first()
    if args.json:
        print(json.dumps([o.to_dict() for o in orders], ensure_ascii=False, indent=2))
        return
    if not orders:
        print("No orders yet.")
        return
    for o in orders:
        total = format_amount(o.total, config.shop.currency_symbol)
        print(
            f"  {o.id:<18} {format_datetime(o.created_at)}  "
            f"{o.customer_name:<20} {total:>10}  {o.payment_method.value}"
        )


def _cmd_receipt(session: ShopSession, config: HomelikeConfig, args) -> None:
    order = session.orders.get(args.order_id)
    if order is None:
        print(f"Order not found: {args.order_id}", file=sys.stderr)
        sys.exit(1)

    print("\n".join(session.receipt_lines(order)))

    if args.pdf:
        from .pdf import generate_receipt_pdf

        try:
            path = generate_receipt_pdf(
                order,
                args.pdf,
                shop_name=config.shop.name,
                symbol=config.shop.currency_symbol,
            )
        except (ImportError, FileNotFoundError) as e:
            print(str(e), file=sys.stderr)
            sys.exit(1)
        print(f"\nPDF written: {path}")
