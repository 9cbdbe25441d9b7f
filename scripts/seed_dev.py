#!/usr/bin/env python
"""Seed the development database with parties and politicians.

Constraints:
- Refuses to run in staging or prod (SPEECHKARMA_ENV check)
- Creates missing tables from the ORM metadata
- Idempotent: existing parties/politicians (by name) are left alone
- Never runs automatically (manual invocation only)

Usage:
    DATABASE_URL=... python scripts/seed_dev.py
"""

import os
import sys

SEED_PARTIES = [
    {"name": "Green Party", "abbreviation": "GRN", "color_hex": "#2E8B57"},
    {"name": "Liberal Party", "abbreviation": "LIB", "color_hex": "#FFD700"},
    {"name": "Social Democrats", "abbreviation": "SD", "color_hex": "#DC143C"},
]

SEED_POLITICIANS = [
    ("Anna", "Berg", "Green Party"),
    ("Jonas", "Keller", "Liberal Party"),
    ("Maria", "Lindqvist", "Social Democrats"),
    ("Peter", "Novak", "Social Democrats"),
]


def main():
    env = os.getenv("SPEECHKARMA_ENV", "local")
    if env not in ("local", "test"):
        print(f"ERROR: seed_dev.py refuses to run in SPEECHKARMA_ENV={env}")
        sys.exit(1)

    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        print("ERROR: DATABASE_URL environment variable must be set")
        sys.exit(1)

    from sqlalchemy import select
    from sqlalchemy.orm import Session

    from speechkarma.db.engine import create_db_engine
    from speechkarma.db.models import Base, Party, Politician

    engine = create_db_engine(database_url)
    Base.metadata.create_all(engine)

    created = 0
    with Session(engine) as session:
        parties: dict[str, Party] = {}
        for values in SEED_PARTIES:
            party = session.scalar(select(Party).where(Party.name == values["name"]))
            if party is None:
                party = Party(**values)
                session.add(party)
                created += 1
            parties[values["name"]] = party
        session.flush()

        for first_name, last_name, party_name in SEED_POLITICIANS:
            party = parties[party_name]
            exists = session.scalar(
                select(Politician.id).where(
                    Politician.first_name == first_name,
                    Politician.last_name == last_name,
                    Politician.party_id == party.id,
                )
            )
            if exists is None:
                session.add(
                    Politician(first_name=first_name, last_name=last_name, party_id=party.id)
                )
                created += 1

        session.commit()

    print(f"Seeded {created} rows")


if __name__ == "__main__":
    main()
