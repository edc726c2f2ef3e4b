"""
Seed the client directory and product catalogue.

The directory is maintained as a spreadsheet with three sheets. Export each
sheet to CSV and import them with:

    python -m juice_bot.seed_directory \\
        --clients clients.csv \\
        --abbreviations abrev_clients.csv \\
        --products produits.csv

or seed a small demo directory into an empty database:

    python -m juice_bot.seed_directory --demo

Sheet columns:
    clients         ID_Client, Nom_Client, Zone, Mode_Comptable, DEFAULT
    abrev.clients   ID_Client, Nom_Client, AB1 .. AB6
    produits        ID_Produit, Nom_Produit, Contenance, Prix_Unitaire

Imports are upserts keyed on the client id, the abbreviation and the
product id, so re-running an import updates rows in place.
"""

import argparse
import csv
import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from .models import Client, ClientAbbreviation, Product
from .parsing.constants import (
    DEFAULT_FORMAT_CODES,
    FROZEN_SUFFIX,
    Format,
    build_product_id,
    normalize_token,
)

logger = logging.getLogger(__name__)

ABBREVIATION_COLUMNS = ("AB1", "AB2", "AB3", "AB4", "AB5", "AB6")

# Contenance column (litres) -> format
CONTENANCE_FORMATS = {
    "1": Format.ONE_LITRE.value,
    "0.25": Format.TWENTY_FIVE_CL.value,
    "5": Format.FIVE_LITRE.value,
}

FROZEN_NAME_MARKER = "surgele"


# =============================================================================
# CSV Helpers
# =============================================================================

def read_rows(csv_path: str) -> List[Dict[str, str]]:
    """Read a sheet export, trying the encodings spreadsheets usually produce."""
    last_error: Optional[UnicodeDecodeError] = None
    for encoding in ("utf-8-sig", "cp1252", "latin-1"):
        try:
            with open(csv_path, "r", encoding=encoding, newline="") as f:
                return [
                    {(k or "").strip(): (v or "").strip() for k, v in row.items()}
                    for row in csv.DictReader(f)
                ]
        except UnicodeDecodeError as e:
            last_error = e
    raise last_error


def parse_contenance(value: str) -> str:
    """ "1" -> "1L", "0,25" -> "25CL", "5" -> "5L", anything else -> "<value>L"."""
    normalized = value.strip().replace(",", ".")
    if normalized in CONTENANCE_FORMATS:
        return CONTENANCE_FORMATS[normalized]
    return f"{normalized.upper()}L"


def parse_price(value: str) -> float:
    """Unit price with either decimal separator ("4,500" or "4.5")."""
    cleaned = value.strip().replace(" ", "").replace(",", ".")
    return float(cleaned) if cleaned else 0.0


def is_frozen_product(product_id: str, name: str) -> bool:
    return FROZEN_NAME_MARKER in normalize_token(name) or product_id.upper().endswith(FROZEN_SUFFIX)


def normalize_default_format(value: str) -> str:
    code = value.strip()
    return code if code in DEFAULT_FORMAT_CODES else "1"


# =============================================================================
# Sheet Imports
# =============================================================================

def import_clients(db: Session, rows: Iterable[Dict[str, str]]) -> int:
    count = 0
    for row in rows:
        client_id = row.get("ID_Client", "")
        if not client_id:
            continue
        client = db.get(Client, client_id) or Client(id=client_id)
        client.name = row.get("Nom_Client") or client_id
        client.zone = row.get("Zone") or None
        client.accounting_mode = row.get("Mode_Comptable") or None
        client.default_format = normalize_default_format(row.get("DEFAULT", ""))
        db.add(client)
        count += 1
    db.commit()
    logger.info("Imported %d clients", count)
    return count


def import_abbreviations(db: Session, rows: Iterable[Dict[str, str]]) -> int:
    """
    One abbreviation per non-blank ABn cell.

    Sheet row order, then column order, becomes the position used to
    break fuzzy-match ties. Positions continue after the highest stored one,
    so a partial re-import ranks after the rows already loaded.
    """
    existing = {a.abbreviation: a for a in db.query(ClientAbbreviation).all()}
    position = max((a.position for a in existing.values()), default=-1) + 1
    count = 0
    for row in rows:
        client_id = row.get("ID_Client", "")
        if not client_id:
            continue
        client_name = row.get("Nom_Client") or client_id
        for column in ABBREVIATION_COLUMNS:
            abbreviation = " ".join((row.get(column) or "").lower().split())
            if not abbreviation:
                continue
            record = existing.get(abbreviation)
            if record is None:
                record = ClientAbbreviation(abbreviation=abbreviation)
                existing[abbreviation] = record
            record.client_id = client_id
            record.client_name = client_name
            record.position = position
            db.add(record)
            position += 1
            count += 1
    db.commit()
    logger.info("Imported %d client abbreviations", count)
    return count


def import_products(db: Session, rows: Iterable[Dict[str, str]]) -> int:
    count = 0
    for row in rows:
        product_id = row.get("ID_Produit", "").upper()
        if not product_id:
            continue
        name = row.get("Nom_Produit") or product_id
        product = db.get(Product, product_id) or Product(id=product_id)
        product.name = name
        product.format = parse_contenance(row.get("Contenance", "1"))
        product.is_frozen = is_frozen_product(product_id, name)
        try:
            product.unit_price = parse_price(row.get("Prix_Unitaire", ""))
        except ValueError:
            logger.warning("Invalid price %r for product %s", row.get("Prix_Unitaire"), product_id)
            product.unit_price = 0.0
        db.add(product)
        count += 1
    db.commit()
    logger.info("Imported %d products", count)
    return count


# =============================================================================
# Demo Directory
# =============================================================================

DEMO_CLIENTS = [
    # id, name, zone, accounting mode, default format code
    ("C00001", "Aziz Market", "Ennasr", "mensuel", "1"),
    ("C00002", "Karim Superette", "Menzah", "comptant", "5"),
    ("C00003", "Cafe Bghali", "La Marsa", "mensuel", "25"),
    ("C00004", "Hotel Belle Vue", "Gammarth", "mensuel", "3"),
]

DEMO_ABBREVIATIONS = [
    ("C00001", "Aziz Market", ["aziz", "aziz market"]),
    ("C00002", "Karim Superette", ["karim", "krm"]),
    ("C00003", "Cafe Bghali", ["bghali", "bgh nasr"]),
    ("C00004", "Hotel Belle Vue", ["belle vue", "hbv"]),
]

DEMO_FAMILIES = [
    ("C", "Citron"),
    ("M", "Mojito"),
    ("F", "Fraise"),
    ("R", "Red Citrus"),
    ("CL", "Cool"),
    ("MG", "Mangue"),
]

DEMO_PRICES = {
    Format.ONE_LITRE: 4.5,
    Format.TWENTY_FIVE_CL: 1.6,
    Format.FIVE_LITRE: 20.0,
    Format.THREE_LITRE: 12.5,
}

DEMO_FROZEN_SURCHARGE = 0.3


def seed_demo_directory(db: Session) -> bool:
    """Seed demo clients, abbreviations and products. No-op if clients exist."""
    existing = db.query(Client).count()
    if existing > 0:
        logger.info("Directory already has %d clients. Not seeding again.", existing)
        return False

    import_clients(db, [
        {"ID_Client": cid, "Nom_Client": name, "Zone": zone,
         "Mode_Comptable": mode, "DEFAULT": default}
        for cid, name, zone, mode, default in DEMO_CLIENTS
    ])

    abbreviation_rows = []
    for cid, name, abbreviations in DEMO_ABBREVIATIONS:
        row = {"ID_Client": cid, "Nom_Client": name}
        row.update(zip(ABBREVIATION_COLUMNS, abbreviations))
        abbreviation_rows.append(row)
    import_abbreviations(db, abbreviation_rows)

    for family_code, label in DEMO_FAMILIES:
        for fmt, price in DEMO_PRICES.items():
            for frozen in (False, True):
                product_id = build_product_id(family_code, fmt, frozen)
                name = f"{label} {fmt.value}" + (" surgelé" if frozen else "")
                db.add(Product(
                    id=product_id,
                    name=name,
                    format=fmt.value,
                    is_frozen=frozen,
                    unit_price=round(price + (DEMO_FROZEN_SURCHARGE if frozen else 0.0), 3),
                ))
    db.commit()
    logger.info("Seeded demo directory")
    return True


def main(argv: Optional[List[str]] = None) -> None:
    from dotenv import load_dotenv
    load_dotenv()

    from .db import SessionLocal, init_db
    from .logging_config import setup_logging

    parser = argparse.ArgumentParser(description="Import the client directory and products")
    parser.add_argument("--clients", help="CSV export of the clients sheet")
    parser.add_argument("--abbreviations", help="CSV export of the abrev.clients sheet")
    parser.add_argument("--products", help="CSV export of the produits sheet")
    parser.add_argument("--demo", action="store_true", help="Seed a demo directory if empty")
    args = parser.parse_args(argv)

    if not (args.demo or args.clients or args.abbreviations or args.products):
        parser.error("nothing to import: pass --demo or at least one CSV file")

    setup_logging()
    init_db()

    db = SessionLocal()
    try:
        if args.demo:
            seed_demo_directory(db)
        if args.clients:
            import_clients(db, read_rows(args.clients))
        if args.abbreviations:
            import_abbreviations(db, read_rows(args.abbreviations))
        if args.products:
            import_products(db, read_rows(args.products))
    finally:
        db.close()


if __name__ == "__main__":
    main()
