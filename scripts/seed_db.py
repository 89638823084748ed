from __future__ import annotations

import importlib
import sys
from pathlib import Path

from dotenv import load_dotenv

SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from smart_attendance.config import get_settings_module
from smart_attendance.database.bootstrap import ensure_admin
from smart_attendance.database.connection import DBConfig


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    created = ensure_admin(db_config, email=settings.ADMIN_EMAIL, password=settings.ADMIN_PASSWORD)
    state = "created" if created else "already present"
    print(f"OK: Admin {settings.ADMIN_EMAIL} {state} -> {DBConfig.from_dict(db_config).describe()}")


if __name__ == "__main__":
    main()
