"""
Create the schema if needed and load the demo workflow and integrations.

Usage:
  python scripts/seed_sample_data.py
"""
from __future__ import annotations

from sqlalchemy import text

from synapse_bpm.database import SessionLocal, engine
from synapse_bpm.models import Base
from synapse_bpm.seeds import seed_sample_data


def main() -> None:
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        inserted = seed_sample_data(db)
        total = db.execute(text("SELECT COUNT(*) FROM workflows")).scalar()
        print(f"seed_sample_data inserted={inserted} workflows={int(total or 0)}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
