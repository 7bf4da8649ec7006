"""
Populate the product catalog and client list from CSV exports.

The bot only reads products and clients; they are maintained in the
back-office system and exported as CSV. This script loads those exports:

    products.csv: code,description,stock,price
    clients.csv:  first_name,last_name,phone

Products are upserted by code, so re-running with a fresh export updates
stock and prices. Products missing from the export are deactivated.

Usage:
    python populate_catalog.py --products products.csv --clients clients.csv

After loading, call POST /admin/catalog/reload on a running bot.
"""
import argparse
import csv
from typing import Iterable

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from sqlalchemy.orm import Session
from sales_bot.db import init_db, session_scope
from sales_bot.models import Client, Product


def _to_float(value: str) -> float:
    cleaned = (value or "").replace("$", "").replace(",", "").strip()
    return float(cleaned) if cleaned else 0.0


def upsert_products(db: Session, rows: Iterable[dict]) -> tuple[int, int, int]:
    """
    Insert or update products by code and deactivate the missing ones.

    Returns:
        (created, updated, deactivated) counts.
    """
    existing = {p.code: p for p in db.query(Product).all()}
    seen = set()
    created = updated = 0

    for row in rows:
        code = (row.get("code") or "").strip()
        if not code or code in seen:
            continue
        seen.add(code)
        description = (row.get("description") or "").strip().upper()
        stock = _to_float(row.get("stock"))
        price = _to_float(row.get("price"))

        product = existing.get(code)
        if product is None:
            db.add(Product(code=code, description=description, stock=stock, price=price, is_active=True))
            created += 1
        else:
            product.description = description
            product.stock = stock
            product.price = price
            product.is_active = True
            updated += 1

    deactivated = 0
    for code, product in existing.items():
        if code not in seen and product.is_active:
            product.is_active = False
            deactivated += 1

    db.flush()
    return created, updated, deactivated


def insert_clients(db: Session, rows: Iterable[dict]) -> int:
    """Add clients not already present (same first and last name). Returns how many were added."""
    known = {
        (c.first_name.upper(), (c.last_name or "").upper())
        for c in db.query(Client).all()
    }
    added = 0
    for row in rows:
        first_name = (row.get("first_name") or "").strip().upper()
        last_name = (row.get("last_name") or "").strip().upper()
        if not first_name or (first_name, last_name) in known:
            continue
        known.add((first_name, last_name))
        db.add(Client(
            first_name=first_name,
            last_name=last_name or None,
            phone=(row.get("phone") or "").strip() or None,
            is_active=True,
        ))
        added += 1
    db.flush()
    return added


def read_csv(path: str) -> list[dict]:
    with open(path, newline="", encoding="utf-8-sig") as f:
        return list(csv.DictReader(f))


def main():
    parser = argparse.ArgumentParser(description="Load products and clients from CSV exports")
    parser.add_argument("--products", help="CSV with code,description,stock,price")
    parser.add_argument("--clients", help="CSV with first_name,last_name,phone")
    args = parser.parse_args()

    if not args.products and not args.clients:
        parser.error("nothing to load: pass --products and/or --clients")

    init_db()
    with session_scope() as db:
        if args.products:
            created, updated, deactivated = upsert_products(db, read_csv(args.products))
            print(f"Products: {created} created, {updated} updated, {deactivated} deactivated")
        if args.clients:
            added = insert_clients(db, read_csv(args.clients))
            print(f"Clients: {added} added")


if __name__ == "__main__":
    main()
