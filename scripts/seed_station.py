#!/usr/bin/env python3
"""
Create or reset a check-in station for an event.

Usage: python scripts/seed_station.py <event-slug> <code> "<name>" <secret>

An existing station with the same code is renamed, re-activated and given
the new secret. Reads SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY from .env.
"""

import sys
import os

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

# Load .env file
from dotenv import load_dotenv
load_dotenv(os.path.join(project_root, ".env"))

from eventpass import directory
from eventpass.auth.hashing import hash_secret


def main():
    if len(sys.argv) != 5:
        print('Usage: python scripts/seed_station.py <event-slug> <code> "<name>" <secret>')
        sys.exit(1)

    slug, code, name, secret = sys.argv[1:5]

    event = directory.find_event_by_identifier(slug)
    if not event:
        print(f"Error: event not found for slug '{slug}'")
        sys.exit(1)

    secret_hash = hash_secret(secret)
    existing = directory.find_station_by_code(event.id, code)
    if existing:
        station = directory.update_station(existing.id, event.id, {
            "name": name,
            "secret_hash": secret_hash,
            "active": True,
        })
        print("Updated station:")
    else:
        station = directory.insert_station(event.id, name, code, secret_hash)
        print("Created station:")

    print(f"  ID: {station.id}")
    print(f"  Event: {event.slug}")
    print(f"  Code: {station.code}")
    print(f"  Name: {station.name}")


if __name__ == "__main__":
    main()
