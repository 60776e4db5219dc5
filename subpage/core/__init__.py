"""
Subpage Core
============

Core utilities and shared functionality for subscription page modules.
"""

from .config import Config
from .database import Database, get_config_value
from .logging_service import LoggingService, logger, db_log
from .i18n import _t
from .requirements import Requirements

__all__ = ['Config', 'Database', 'get_config_value', 'LoggingService', 'logger', 'db_log',
           '_t', 'Requirements']
