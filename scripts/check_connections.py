#!/usr/bin/env python3
"""
Connection Check Script

Run this to verify the databases and the listing provider are reachable.
Usage: python scripts/check_connections.py
"""
import sys
sys.path.insert(0, '.')

import httpx

from internhub.db.postgres import test_postgres_connection
from internhub.db.mongodb import test_mongo_connection
from internhub.core.config import get_settings


def check_provider(settings) -> bool:
    """Ask Apify who the token belongs to."""
    try:
        response = httpx.get(
            f"{settings.apify_base_url}/users/me",
            params={"token": settings.apify_token},
            timeout=10.0
        )
        response.raise_for_status()
        return True
    except httpx.HTTPError as e:
        print(f"    {e}")
        return False


def main():
    settings = get_settings()
    print("=" * 50)
    print("INTERNHUB - CONNECTION CHECK")
    print("=" * 50)

    print("\n[1] PostgreSQL...")
    print(f"    URL: postgresql://{settings.postgres_user}:****@{settings.postgres_host}:{settings.postgres_port}/{settings.postgres_db}")
    print("    PostgreSQL: " + ("CONNECTED" if test_postgres_connection() else "FAILED"))

    print("\n[2] MongoDB...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}, bucket: {settings.resume_bucket}")
    print("    MongoDB: " + ("CONNECTED" if test_mongo_connection() else "FAILED"))

    print("\n[3] Apify...")
    if settings.apify_token:
        print(f"    Actor: {settings.apify_actor}")
        print("    Apify: " + ("CONNECTED" if check_provider(settings) else "FAILED"))
    else:
        print("    Apify: token not configured, ingestion is disabled")

    print("\n" + "=" * 50)
    print("Connection check complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
