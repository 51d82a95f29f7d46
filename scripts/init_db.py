"""Prepare the configured credential store and seed the default admin.

Usage:
  STORE_BACKEND=sql DATABASE_URL=postgresql://... python scripts/init_db.py
"""

import sys
from pathlib import Path

# Ensure project root is on sys.path when running as a script
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from atithi_guardian.auth import AuthService
from atithi_guardian.config import load_config
from atithi_guardian.store import open_store


def main() -> None:
    cfg = load_config()
    store = open_store(cfg)
    store.init()

    auth = AuthService.from_config(cfg, store)
    boot = auth.bootstrap_admin_if_needed(
        cfg.AUTH_BOOTSTRAP_ADMIN_USERNAME,
        cfg.AUTH_BOOTSTRAP_ADMIN_PASSWORD,
    )
    if boot:
        print(f"Default admin created: {boot.username}")
    else:
        print("Admin user already exists.")

    print(f"Current registration count: {len(store.list_registrations())}")
    print(f"Store initialized ({store.name})")


if __name__ == "__main__":
    main()
