import sqlite3
from contextlib import contextmanager
import config
from database_schemas import ALL_SCHEMAS

DB_NAME = config.DATABASE_PATH

def _casefold(value):
    return value.casefold() if isinstance(value, str) else value

@contextmanager
def get_db():
    conn = sqlite3.connect(DB_NAME)
    conn.execute("PRAGMA foreign_keys = ON")
    # SQLite LOWER() only folds ASCII letters
    conn.create_function("casefold", 1, _casefold, deterministic=True)
    try:
        yield conn
    finally:
        conn.close()

def init_db():
    with get_db() as conn:
        cursor = conn.cursor()
        for schema in ALL_SCHEMAS:
            cursor.execute(schema)
        conn.commit()

if __name__ == "__main__":
    init_db()
