from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import load_settings

from src.tutoring_center.tutoring_center.database.bootstrap import apply_schema, list_tables
from src.tutoring_center.tutoring_center.database.connection import DBConfig, DatabaseConnection


def main() -> None:
    settings = load_settings()
    db_config = DBConfig.from_dict(settings.DB_CONFIG)
    apply_schema(DatabaseConnection.get_instance(db_config))
    tables = list_tables(DatabaseConnection.get_instance(db_config))
    print(f"Document store ready on {db_config.host}:{db_config.port}/{db_config.database}: {', '.join(tables)}")


if __name__ == "__main__":
    main()
