"""Persistent user settings stored in the database."""
from immersion_tracker.config import DEFAULT_NEW_CARD_LIMIT
from immersion_tracker.db import get_connection

NEW_CARD_LIMIT_KEY = "new_card_limit"


def get_setting(db_path: str, key: str, default: str = None) -> str | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM user_settings WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else default


def set_setting(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO user_settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
        (key, value, value),
    )
    conn.commit()
    conn.close()


def get_new_card_limit(db_path: str) -> int:
    return int(get_setting(db_path, NEW_CARD_LIMIT_KEY, str(DEFAULT_NEW_CARD_LIMIT)))


def set_new_card_limit(db_path: str, limit: int) -> None:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
        raise ValueError(f"New card limit must be a non-negative integer, got {limit!r}")
    set_setting(db_path, NEW_CARD_LIMIT_KEY, str(limit))
