#!/usr/bin/env python3
"""
Demo seed script — populates the database with sample data for demos.

!! NOT FOR PRODUCTION !!
This script creates test users with known passwords and made-up credit
scores. It is intended ONLY for local demos and frontend development.

Usage:
    # With the API server running on localhost:8000:
    python demo/seed.py

    # Reset the database and re-seed:
    python demo/seed.py --reset

    # Custom server URL:
    python demo/seed.py --base-url http://localhost:9000

Login credentials after seeding:
    ┌──────────────────────────────┬───────────────────┬────────┬──────────────────────────────┐
    │ Email                        │ Password          │ Role   │ Account / bank code          │
    ├──────────────────────────────┼───────────────────┼────────┼──────────────────────────────┤
    │ tendai.moyo@example.com      │ TendaiDemo123!    │ client │ ACC100200300                 │
    │ chipo.banda@example.com      │ ChipoDemo123!     │ client │ ACC100200301                 │
    │ farai.ndlovu@example.com     │ FaraiDemo123!     │ client │ ACC100200302                 │
    │ officer@cbz.example.com      │ CbzDemo123!       │ bank   │ CBZ Bank / CBZ-VERIFY-2024   │
    │ officer@zb.example.com       │ ZbDemo123!        │ bank   │ ZB Bank / ZB-VERIFY-2024     │
    └──────────────────────────────┴───────────────────┴────────┴──────────────────────────────┘

The server holds a single session, so every demo user is signed up and then
logged out again before the next one.
"""

import argparse
import asyncio
import os
import random
import sys
import uuid
from datetime import datetime, timedelta, timezone

import httpx

BASE_URL = "http://localhost:8000"

# ---------------------------------------------------------------------------
# Demo users
# ---------------------------------------------------------------------------

CLIENTS = [
    {
        "name": "Tendai Moyo",
        "email": "tendai.moyo@example.com",
        "password": "TendaiDemo123!",
        "account_number": "ACC100200300",
        "score_range": (720, 800),
    },
    {
        "name": "Chipo Banda",
        "email": "chipo.banda@example.com",
        "password": "ChipoDemo123!",
        "account_number": "ACC100200301",
        "score_range": (620, 700),
    },
    {
        "name": "Farai Ndlovu",
        "email": "farai.ndlovu@example.com",
        "password": "FaraiDemo123!",
        "account_number": "ACC100200302",
        "score_range": (450, 580),
    },
]

BANK_USERS = [
    {
        "name": "Rudo Chikwanha",
        "email": "officer@cbz.example.com",
        "password": "CbzDemo123!",
        "bank": "CBZ Bank",
        "verification_code": "CBZ-VERIFY-2024",
    },
    {
        "name": "Nyasha Dube",
        "email": "officer@zb.example.com",
        "password": "ZbDemo123!",
        "bank": "ZB Bank",
        "verification_code": "ZB-VERIFY-2024",
    },
]

LOAN_PURPOSES = [
    "Business expansion", "Vehicle purchase", "School fees",
    "Home improvement", "Agricultural inputs", "Medical expenses",
]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def log(msg: str) -> None:
    print(f"  {msg}")


def cents_to_dollars(cents: int) -> str:
    return f"${cents / 100:,.2f}"


def risk_for(score: int) -> str:
    if score >= 700:
        return "low"
    if score >= 600:
        return "medium"
    return "high"


async def signup(client: httpx.AsyncClient, body: dict) -> dict:
    """Sign up a user and return the published user."""
    resp = await client.post(f"{BASE_URL}/session/signup", json=body)
    resp.raise_for_status()
    return resp.json()["state"]["user"]


async def login_client(client: httpx.AsyncClient, member: dict) -> None:
    resp = await client.post(f"{BASE_URL}/session/login", json={
        "email": member["email"],
        "password": member["password"],
        "type": "client",
        "account_number": member["account_number"],
    })
    resp.raise_for_status()


async def logout(client: httpx.AsyncClient) -> None:
    resp = await client.post(f"{BASE_URL}/session/logout")
    resp.raise_for_status()


async def apply_for_loan(client: httpx.AsyncClient, bank_id: str) -> dict:
    resp = await client.post(f"{BASE_URL}/loan-applications", json={
        "bank_id": bank_id,
        "amount_cents": random.randint(500_00, 15_000_00),
        "purpose": random.choice(LOAN_PURPOSES),
        "term_months": random.choice([6, 12, 24, 36]),
        "monthly_income_cents": random.randint(400_00, 3_000_00),
        "employment_status": random.choice(["employed", "self-employed"]),
    })
    resp.raise_for_status()
    return resp.json()


# ---------------------------------------------------------------------------
# Direct database steps
# ---------------------------------------------------------------------------

async def load_bank_directory() -> None:
    """Insert the recognized banks into the banks table, skipping existing rows.

    There is no endpoint for managing the bank directory; it is operator
    data, like the verification codes themselves.
    """
    from sqlalchemy import select
    from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
    from app.config import settings
    from app.models.bank import Bank
    from app.services.verification_registry import DEFAULT_BANKS

    engine = create_async_engine(settings.DATABASE_URL)
    session_factory = async_sessionmaker(engine, class_=AsyncSession)

    async with session_factory() as session:
        existing = set((await session.execute(select(Bank.name))).scalars().all())
        for name, code, _ in DEFAULT_BANKS:
            if name not in existing:
                session.add(Bank(name=name, code=code))
        await session.commit()

    await engine.dispose()


async def record_credit_scores(scores: dict[str, list[int]]) -> None:
    """Write a score history per client, oldest first, one per month.

    scores maps profile id to a list of total scores.
    """
    from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
    from app.config import settings
    from app.models.credit_score import CreditScore, RiskLevel

    engine = create_async_engine(settings.DATABASE_URL)
    session_factory = async_sessionmaker(engine, class_=AsyncSession)

    now = datetime.now(timezone.utc)

    async with session_factory() as session:
        for profile_id, history in scores.items():
            for months_ago, score in zip(range(len(history) - 1, -1, -1), history):
                session.add(CreditScore(
                    user_id=uuid.UUID(profile_id),
                    score=score,
                    risk_level=RiskLevel(risk_for(score)),
                    payment_history_score=random.randint(50, 100),
                    credit_utilization_score=random.randint(40, 100),
                    credit_history_length_score=random.randint(30, 100),
                    credit_types_score=random.randint(40, 100),
                    new_credit_score=random.randint(40, 100),
                    calculated_at=now - timedelta(days=30 * months_ago),
                ))
        await session.commit()

    await engine.dispose()


async def seed(base_url: str) -> None:
    global BASE_URL
    BASE_URL = base_url

    print("\n========================================")
    print("  DEMO SEED — NOT FOR PRODUCTION")
    print("========================================\n")

    print("Loading bank directory...")
    await load_bank_directory()

    scores: dict[str, list[int]] = {}

    async with httpx.AsyncClient(timeout=30.0) as client:
        # Health check
        try:
            health = await client.get(f"{BASE_URL}/health")
            health.raise_for_status()
        except (httpx.ConnectError, httpx.HTTPStatusError):
            print(f"  ERROR: Cannot connect to {BASE_URL}")
            print("  Start the server first: uvicorn app.main:app --reload\n")
            sys.exit(1)

        banks = (await client.get(f"{BASE_URL}/banks")).json()
        bank_ids = {b["name"]: b["id"] for b in banks}
        log(f"{len(bank_ids)} banks available")

        # --- Bank representatives ---
        for officer in BANK_USERS:
            print(f"\nCreating {officer['name']} ({officer['bank']})...")
            user = await signup(client, {
                "name": officer["name"],
                "email": officer["email"],
                "password": officer["password"],
                "type": "bank",
                "bank": officer["bank"],
                "verification_code": officer["verification_code"],
            })
            await logout(client)
            log(f"Login: {officer['email']} / {officer['password']}")
            log(f"  Verified for {user['bank']}: {user['is_verified']}")

        # --- Clients ---
        for member in CLIENTS:
            print(f"\nCreating {member['name']}...")
            user = await signup(client, {
                "name": member["name"],
                "email": member["email"],
                "password": member["password"],
                "type": "client",
                "account_number": member["account_number"],
            })
            await logout(client)
            log(f"Login: {member['email']} / {member['password']} / {member['account_number']}")

            low, high = member["score_range"]
            scores[user["id"]] = sorted(random.randint(low, high) for _ in range(3))

    print("\nRecording credit score history...")
    await record_credit_scores(scores)
    for member, history in zip(CLIENTS, scores.values()):
        log(f"{member['name']}: {' -> '.join(str(s) for s in history)}")

    # --- Loan applications ---
    print("\nSubmitting loan applications...")
    async with httpx.AsyncClient(timeout=30.0) as client:
        for member in CLIENTS:
            await login_client(client, member)
            for officer in BANK_USERS:
                application = await apply_for_loan(client, bank_ids[officer["bank"]])
                log(
                    f"{member['name']} -> {application['bank_name']}: "
                    f"{cents_to_dollars(application['amount_cents'])} ({application['purpose']})"
                )
            await logout(client)

    # --- Summary ---
    print("\n========================================")
    print("  SEED COMPLETE — Login Credentials")
    print("========================================")
    print(f"\n  {'Email':<30s} {'Password':<20s} {'Role':<8s} {'Account / bank code'}")
    print(f"  {'─' * 30} {'─' * 20} {'─' * 8} {'─' * 28}")
    for m in CLIENTS:
        print(f"  {m['email']:<30s} {m['password']:<20s} {'client':<8s} {m['account_number']}")
    for o in BANK_USERS:
        print(f"  {o['email']:<30s} {o['password']:<20s} {'bank':<8s} {o['bank']} / {o['verification_code']}")
    print()


def reset_database() -> None:
    """Delete the SQLite database file so the server recreates it on restart."""
    db_path = os.path.join(os.path.dirname(__file__), "..", "data", "creditscore.db")
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
        epilog="Creates the bank directory, sample users, credit scores and loan applications.",
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
