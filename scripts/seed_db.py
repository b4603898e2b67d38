from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.visitor_registry.visitor_registry.database.bootstrap import DEMO_USERS, ensure_demo_users
from src.visitor_registry.visitor_registry.database.connection import DBConfig


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    ensure_demo_users(db_config)

    print(f"OK: Seeded database -> {DBConfig.from_mapping(db_config).describe()}")
    for name, email, password, role in DEMO_USERS:
        print(f"  {role:<6} {email} / {password}")


if __name__ == "__main__":
    main()
