import os
import argparse
from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv()

# Ensure SQLAlchemy uses the supported dialect name: convert `postgres://` to `postgresql://`
_pg = os.environ.get("POSTGRES_URL")
if _pg and _pg.startswith("postgres://"):
    os.environ["POSTGRES_URL"] = "postgresql://" + _pg[len("postgres://"):]


def main(argv=None):
    parser = argparse.ArgumentParser(description="Load a cars inventory JSON file into the database.")
    parser.add_argument("path", nargs="?", help="inventory JSON file (defaults to data/cars_inventory.json)")
    parser.add_argument("--force", action="store_true", help="insert even if the cars table is not empty")
    args = parser.parse_args(argv)

    from app.db import Base, engine, SessionLocal
    from app.seed import DEFAULT_INVENTORY, seed_inventory
    import app.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        count = seed_inventory(db, args.path or DEFAULT_INVENTORY, force=args.force)
    finally:
        db.close()
    print(f"Inserted {count} car(s).")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
