"""
Centralized logging service for subscription pages.
Provides structured logging with database storage and easy integration.
"""

import json
import logging
import traceback
from datetime import datetime, timedelta
from flask import request, has_request_context
from .database import Database
from .config import Config

_stdout_logger = logging.getLogger(__name__)


class LoggingService:
    """Centralized logging service for application-wide logging"""

    @staticmethod
    def _ensure_logs_table():
        """Ensure the app_logs table exists"""
        try:
            with Database.connect(Database.log_db()) as conn:
                conn.execute(f"""
                    CREATE TABLE IF NOT EXISTS {Config.LOGS_TABLE} (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        timestamp TEXT NOT NULL,
                        level TEXT NOT NULL,
                        source TEXT NOT NULL,
                        message TEXT NOT NULL,
                        details TEXT,
                        ip_address TEXT,
                        user_agent TEXT,
                        request_path TEXT,
                        user_id TEXT
                    )
                """)
                conn.execute(f"""
                    CREATE INDEX IF NOT EXISTS idx_logs_timestamp
                    ON {Config.LOGS_TABLE}(timestamp DESC)
                """)
                conn.execute(f"""
                    CREATE INDEX IF NOT EXISTS idx_logs_source
                    ON {Config.LOGS_TABLE}(source)
                """)
                conn.commit()
        except Exception as e:
            _stdout_logger.error(f"Failed to ensure logs table: {e}")

    @staticmethod
    def _get_request_context():
        """Extract request context information"""
        if not has_request_context():
            return None, None, None

        try:
            ip_address = request.headers.get('X-Forwarded-For', request.remote_addr)
            if ip_address and ',' in ip_address:
                ip_address = ip_address.split(',')[0].strip()

            user_agent = request.headers.get('User-Agent', '')
            return ip_address, user_agent, request.path
        except Exception:
            return None, None, None

    @staticmethod
    def log(level, source, message, details=None, user_id=None):
        """
        Log a message to the database

        Args:
            level (str): Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            source (str): Source component (pages, subscription_page, etc.)
            message (str): Main log message
            details (str/dict): Additional details (will be JSON-encoded if dict)
            user_id (str): Optional user identifier
        """
        try:
            LoggingService._ensure_logs_table()

            ip_address, user_agent, request_path = LoggingService._get_request_context()

            if isinstance(details, dict):
                details = json.dumps(details, indent=2, default=str)

            with Database.connect(Database.log_db()) as conn:
                conn.execute(f"""
                    INSERT INTO {Config.LOGS_TABLE}
                    (timestamp, level, source, message, details, ip_address, user_agent, request_path, user_id)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    datetime.now().isoformat(), level.upper(), source, message, details,
                    ip_address, user_agent, request_path, user_id
                ))
                conn.commit()

        except Exception as e:
            # Fallback to console logging if database fails
            _stdout_logger.warning(f"[{level.upper()}] [{source}] {message}")
            if details:
                _stdout_logger.warning(f"Details: {details}")
            _stdout_logger.error(f"Logging service error: {e}")

    @staticmethod
    def debug(source, message, details=None, user_id=None):
        LoggingService.log('DEBUG', source, message, details, user_id)

    @staticmethod
    def info(source, message, details=None, user_id=None):
        LoggingService.log('INFO', source, message, details, user_id)

    @staticmethod
    def warning(source, message, details=None, user_id=None):
        LoggingService.log('WARNING', source, message, details, user_id)

    @staticmethod
    def error(source, message, details=None, user_id=None):
        LoggingService.log('ERROR', source, message, details, user_id)

    @staticmethod
    def log_error_with_traceback(source, error, details=None):
        """Log error with full traceback"""
        error_details = {
            'error_type': type(error).__name__,
            'error_message': str(error),
            'traceback': traceback.format_exc()
        }
        if details:
            error_details['additional_details'] = details

        LoggingService.error(source, f"Exception occurred: {type(error).__name__}", error_details)

    @staticmethod
    def get_recent_logs(source=None, limit=100):
        """Most recent log entries, newest first"""
        try:
            LoggingService._ensure_logs_table()
            with Database.connect(Database.log_db()) as conn:
                if source:
                    cursor = conn.execute(f"""
                        SELECT * FROM {Config.LOGS_TABLE}
                        WHERE source = ? ORDER BY id DESC LIMIT ?
                    """, (source, limit))
                else:
                    cursor = conn.execute(f"""
                        SELECT * FROM {Config.LOGS_TABLE} ORDER BY id DESC LIMIT ?
                    """, (limit,))
                return [dict(row) for row in cursor.fetchall()]
        except Exception as e:
            _stdout_logger.error(f"Failed to read logs: {e}")
            return []

    @staticmethod
    def cleanup_old_logs(days_to_keep=30):
        """Clean up old log entries"""
        try:
            cutoff_iso = (datetime.now() - timedelta(days=days_to_keep)).isoformat()

            with Database.connect(Database.log_db()) as conn:
                cursor = conn.execute(f"""
                    DELETE FROM {Config.LOGS_TABLE}
                    WHERE timestamp < ?
                """, (cutoff_iso,))
                deleted_count = cursor.rowcount
                conn.commit()

            LoggingService.info('system', f"Cleaned up {deleted_count} old log entries")
            return deleted_count

        except Exception as e:
            LoggingService.error('system', f"Failed to cleanup old logs: {e}")
            return 0


def db_log(level, source, message, details=None):
    """Shortcut used by modules: LoggingService.log with a lower-case level"""
    LoggingService.log(level, source, message, details)


# Convenience instance for easy importing
logger = LoggingService()
