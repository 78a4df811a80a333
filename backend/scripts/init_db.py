"""
Initialize the database: create the storage table.
Run with: python -m scripts.init_db
"""

from medflow.config import get_settings
from medflow.database import create_db_engine, init_db


def init():
    settings = get_settings()
    print(f"Creating tables in {settings.database_url}...")
    engine = create_db_engine(settings.database_url)
    init_db(engine)
    print("All tables created successfully.")
    engine.dispose()


if __name__ == "__main__":
    init()
