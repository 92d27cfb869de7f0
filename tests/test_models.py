import sqlite3

from userapi import create_app


def test_init_db_creates_tables(tmp_path):
    db_file = tmp_path / "test_users.db"
    app = create_app({"DATABASE_URL": f"sqlite:///{db_file}", "TESTING": True})

    # should create SQLAlchemy tables without raising
    app.init_db()

    conn = sqlite3.connect(str(db_file))
    cur = conn.cursor()
    cur.execute("SELECT name FROM sqlite_master WHERE type='table'")
    tables = {r[0] for r in cur.fetchall()}
    cur.execute("PRAGMA index_list('users')")
    unique_indexes = [r for r in cur.fetchall() if r[2] == 1]
    conn.close()
    app.extensions["db_engine"].dispose()

    assert "users" in tables
    assert unique_indexes, "email must carry a unique index"
