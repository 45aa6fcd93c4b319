#!/usr/bin/env python3
"""Create the tables and seed the facility courts with ULIDs."""

import argparse
from pathlib import Path
import sys

sys.path.append(str(Path(__file__).parent.parent))

from sqlalchemy.orm import Session  # noqa: E402

from courtbook.database import engine, init_db  # noqa: E402
from courtbook.models import Court  # noqa: E402


def seed_courts(names):
    """Insert any court in ``names`` that does not exist yet."""
    init_db()

    with Session(engine) as session:
        existing = {name for (name,) in session.query(Court.name).all()}
        missing = [name for name in names if name not in existing]
        if not missing:
            print(f"Courts already exist ({len(existing)} found), skipping seed")
            return

        session.add_all(Court(name=name, is_active=True) for name in missing)
        session.commit()
        print(f"Seeded {len(missing)} court(s): {', '.join(missing)}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--count", type=int, default=4, help="Number of courts")
    parser.add_argument("--prefix", default="Cancha", help="Court name prefix")
    args = parser.parse_args()

    seed_courts([f"{args.prefix} {i}" for i in range(1, args.count + 1)])
