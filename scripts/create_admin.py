"""Create an admin account in the configured store.

Usage:
  python scripts/create_admin.py --username alice --password '...'

Runs locally against the store, so no provisioning key is needed.
"""

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from atithi_guardian.auth import AuthService
from atithi_guardian.config import load_config
from atithi_guardian.errors import DuplicateUsername
from atithi_guardian.store import open_store


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--username", required=True)
    ap.add_argument("--password", required=True)
    args = ap.parse_args()

    cfg = load_config()
    store = open_store(cfg)
    store.init()

    auth = AuthService.from_config(cfg, store)
    try:
        account = auth.create_admin(args.username, args.password)
    except DuplicateUsername as e:
        raise SystemExit(e.detail)

    print("Created admin:")
    print(account.public())


if __name__ == "__main__":
    main()
