import os
import sqlite3
from .config import Config


def get_config_value(key, default=None):
    """Get configuration value: Flask app config first, then Config, then env var"""
    try:
        from flask import current_app
        val = current_app.config.get(key)
        if val is not None:
            return val
    except RuntimeError:
        pass
    val = getattr(Config, key, None)
    if val is not None:
        return val
    return os.getenv(key, default)


class Database:

    @staticmethod
    def connect(path):
        db_dir = os.path.dirname(path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)
        conn = sqlite3.connect(path)
        conn.row_factory = sqlite3.Row
        return conn

    @staticmethod
    def pages_db():
        """Path of the database holding page records"""
        return get_config_value('PAGES_DB')

    @staticmethod
    def log_db():
        """Path of the database holding app_logs"""
        return get_config_value('LOG_DB')

    @staticmethod
    def table_columns(conn, table):
        cursor = conn.execute(f"PRAGMA table_info({table})")
        return [col[1] for col in cursor.fetchall()]

    @staticmethod
    def add_missing_columns(conn, table, columns):
        """
        Migrate a table by adding any of the given (name, sql_type) columns
        it does not have yet.
        """
        existing = Database.table_columns(conn, table)
        added = []
        for col_name, col_type in columns:
            if col_name not in existing:
                conn.execute(f'ALTER TABLE {table} ADD COLUMN {col_name} {col_type}')
                added.append(col_name)
        return added
