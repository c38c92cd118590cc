#!/usr/bin/env python3
"""
Demo seed script — imports a sample club bank statement and prints a report.

!! NOT FOR PRODUCTION !!
This script posts made-up bank statement rows to a running API. It is
intended ONLY for local demos and frontend development.

Usage:
    # With the API server running on localhost:8000:
    python demo/seed.py

    # Reset the database and re-seed:
    python demo/seed.py --reset

    # Custom server URL:
    python demo/seed.py --base-url http://localhost:9000

What gets seeded:
    BANK  roughly 14 months of statement rows ending yesterday
    CASH  a handful of raffle and canteen takings
"""

import argparse
import asyncio
import os
import random
import sys
from datetime import date, timedelta
from decimal import Decimal

import httpx

BASE_URL = "http://localhost:8000"

# ---------------------------------------------------------------------------
# Sample statement lines
# ---------------------------------------------------------------------------

CREDIT_DESCRIPTIONS = [
    ("TidyHQ payout", 150_00, 900_00),
    ("AusCycling affiliation rebate", 50_00, 200_00),
    ("EntryBoss race entry payout", 200_00, 1_200_00),
    ("Square sales", 20_00, 180_00),
    ("Lake Health Group sponsorship", 500_00, 2_000_00),
    ("Raffle takings", 40_00, 300_00),
]

DEBIT_DESCRIPTIONS = [
    ("Trophy engraving", 40_00, 250_00),
    ("Star Outdoor signage", 120_00, 600_00),
    ("Council permits", 80_00, 400_00),
    ("Weed killer", 20_00, 90_00),
    ("Reimburse volunteer fuel", 30_00, 150_00),
    ("ASR Electrical Services", 200_00, 900_00),
    ("Bank fee", 5_00, 15_00),
]

CASH_ROWS = [
    ("Raffle takings", 85_00),
    ("Canteen float", -50_00),
    ("Canteen takings", 212_50),
    ("Flowers for presentation night", -45_00),
]

# Balance the bank reports after the last exported row
CURRENT_BANK_BALANCE = Decimal("8432.17")
CURRENT_CASH_BALANCE = Decimal("402.50")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def log(msg: str) -> None:
    print(f"  {msg}")


def cents_to_dollars(cents: int) -> str:
    return f"{Decimal(cents) / 100:.2f}"


def statement_line(day: date, cents: int, description: str, delimiter: str = ",") -> str:
    """One export row: DD/MM/YYYY, amount, description."""
    return delimiter.join([day.strftime("%d/%m/%Y"), cents_to_dollars(cents), description])


def build_bank_export(days: int) -> str:
    """Tab-separated export, newest row first, the way the bank serves it."""
    today = date.today()
    lines = []
    for offset in range(1, days + 1):
        if random.random() > 0.25:
            continue
        day = today - timedelta(days=offset)
        if random.random() < 0.55:
            description, low, high = random.choice(CREDIT_DESCRIPTIONS)
            cents = random.randint(low, high)
        else:
            description, low, high = random.choice(DEBIT_DESCRIPTIONS)
            cents = -random.randint(low, high)
        lines.append(statement_line(day, cents, description, delimiter="\t"))
    return "\n".join(lines) + "\n"


def build_cash_export() -> str:
    today = date.today()
    lines = [
        statement_line(today - timedelta(days=7 * (len(CASH_ROWS) - i)), cents, description)
        for i, (description, cents) in enumerate(CASH_ROWS)
    ]
    return "\n".join(lines) + "\n"


async def import_statement(
    client: httpx.AsyncClient, ledger_type: str, export: str, balance: Decimal,
) -> dict:
    resp = await client.post(
        f"{BASE_URL}/ledger/import",
        params={"type": ledger_type, "currentBalance": str(balance)},
        content=export,
        headers={"Content-Type": "text/csv"},
    )
    resp.raise_for_status()
    return resp.json()


async def get_report(client: httpx.AsyncClient, period: str) -> dict:
    resp = await client.get(f"{BASE_URL}/reports/financial", params={"period": period})
    resp.raise_for_status()
    return resp.json()


def print_report(report: dict) -> None:
    print(f"\n  {report['label']}  ({report['range']})")
    statement = report["statement"]
    for heading, items in (("Income", statement["income"]), ("Expenditure", statement["expenditure"])):
        log(heading)
        for item in items:
            log(f"  {item['label']:<28s} {item['amount']:>12,.2f}")
    log(f"{'Net result':<30s} {statement['netResult']:>12,.2f}")
    log(report["asAt"])
    for item in report["balanceSheet"]["assets"]:
        log(f"  {item['label']:<28s} {item['amount']:>12,.2f}")


# ---------------------------------------------------------------------------
# Seed logic
# ---------------------------------------------------------------------------

async def seed(base_url: str) -> None:
    global BASE_URL
    BASE_URL = base_url

    print("\n========================================")
    print("  DEMO SEED — NOT FOR PRODUCTION")
    print("========================================\n")

    async with httpx.AsyncClient(timeout=30.0) as client:
        # Health check
        try:
            health = await client.get(f"{BASE_URL}/health")
            health.raise_for_status()
        except (httpx.ConnectError, httpx.HTTPStatusError):
            print(f"  ERROR: Cannot connect to {BASE_URL}")
            print(f"  Start the server first: uvicorn club_finance.main:app --reload\n")
            sys.exit(1)

        print("Importing bank statement...")
        result = await import_statement(client, "BANK", build_bank_export(420), CURRENT_BANK_BALANCE)
        log(f"{result['transactions']} rows across {result['count']} months")
        log(f"Opening balance: {result['openingBalance']:,.2f}")
        log(f"Closing balance: {result['closingBalance']:,.2f}")

        print("\nImporting cash tin...")
        result = await import_statement(client, "CASH", build_cash_export(), CURRENT_CASH_BALANCE)
        log(f"{result['transactions']} rows, months {', '.join(result['months'])}")

        print("\nReports")
        for period in ("fy-1", "ytd"):
            print_report(await get_report(client, period))

    print("\n========================================")
    print("  SEED COMPLETE")
    print("========================================\n")


def reset_database() -> None:
    """Delete the SQLite database file so the server recreates it on restart."""
    db_path = os.path.join(os.path.dirname(__file__), "..", "data", "club_finance.db")
    db_path = os.path.normpath(db_path)

    if os.path.exists(db_path):
        os.remove(db_path)
        print(f"\n  Deleted {db_path}")
        print("  Restart the server to recreate empty tables.\n")
    else:
        print(f"\n  No database found at {db_path}\n")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

async def main() -> None:
    parser = argparse.ArgumentParser(
        description="Demo seed script — NOT FOR PRODUCTION",
        epilog="Imports sample bank and cash statements, then prints reports.",
    )
    parser.add_argument(
        "--base-url", default="http://localhost:8000",
        help="Base URL of the running API (default: http://localhost:8000)",
    )
    parser.add_argument(
        "--reset", action="store_true",
        help="Delete the database file and exit (restart server to recreate)",
    )
    args = parser.parse_args()

    if args.reset:
        reset_database()
        return

    await seed(args.base_url)


if __name__ == "__main__":
    asyncio.run(main())
