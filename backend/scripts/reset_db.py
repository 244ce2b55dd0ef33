import argparse
import sys
from pathlib import Path

CURRENT_DIR = Path(__file__).resolve().parent
BACKEND_DIR = CURRENT_DIR.parent
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from app.db import create_store
from app.demo_seed import seed_demo_board


def reset_database(seed: bool = True) -> None:
    store = create_store()
    if store.sqlite_path:
        path = Path(store.sqlite_path)
        store.dispose()
        if path.exists():
            print(f"[reset_db] Removing existing sqlite file: {path}")
            path.unlink()
        else:
            print(f"[reset_db] No existing sqlite file at {path}, skipping delete.")
    else:
        print("[reset_db] Non-sqlite database configured, dropping tables instead.")
        store.drop_all()

    print("[reset_db] Creating database schema...")
    store.create_all()

    if seed:
        print("[reset_db] Seeding demo board...")
        project, owner = seed_demo_board(store)
        print(f"[reset_db] Invite code: {project.invite_code}")
        print(f"[reset_db] Owner member id: {owner.id}")
    print("[reset_db] Done.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Reset local development database.")
    parser.add_argument(
        "--no-seed",
        action="store_true",
        help="Reset schema without seeding the demo board.",
    )
    args = parser.parse_args()
    reset_database(seed=not args.no_seed)
