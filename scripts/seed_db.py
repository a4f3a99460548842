from __future__ import annotations

import importlib

from config import get_settings_module

from timebooking.database.bootstrap import apply_seed_sql, ensure_demo_users
from timebooking.database.connection import DBConfig, DatabaseConnection


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    conn = DatabaseConnection(DBConfig.from_mapping(dict(settings.DB_CONFIG)))

    apply_seed_sql(conn)
    ensure_demo_users(conn)
    cfg = conn.config
    print(f"OK: Seeded database -> {cfg.user}@{cfg.host}:{cfg.port}/{cfg.database}")


if __name__ == "__main__":
    main()
