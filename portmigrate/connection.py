"""
Shared PostgreSQL connection handling for source and destination databases.
"""

import logging
from typing import List, Optional
import psycopg2

from portmigrate.config import DatabaseConfig, MIGRATION_CONFIG
from portmigrate.models import schemas
from portmigrate.utils.helpers import mask_database_url

logger = logging.getLogger(__name__)


class PostgresConnection:
    """Connection lifecycle and catalog helpers for one PostgreSQL database."""

    autocommit = False

    def __init__(self, config: DatabaseConfig, schema: Optional[str] = None):
        """
        Initialize connection wrapper.

        Args:
            config: Database configuration
            schema: Schema holding the migrated tables (defaults to config)
        """
        self.config = config
        self.schema = schema or MIGRATION_CONFIG.schema
        self.conn: Optional[psycopg2.extensions.connection] = None

    def connect(self):
        """Open the connection."""
        try:
            logger.info(f"Connecting to {self.config.name} at {self.config.host}...")
            self.conn = psycopg2.connect(
                self.config.url,
                connect_timeout=self.config.connect_timeout,
            )
            self.conn.autocommit = self.autocommit
            logger.info(f"✓ Connected to {self.config.name} database at {self.config.host}")
        except psycopg2.OperationalError as e:
            logger.error(f"✗ Cannot connect to {self.config.name} database:")
            logger.error(f"  URL: {mask_database_url(self.config.url)}")
            logger.error(f"  Database: {self.config.database}")
            logger.error(f"  Error: {str(e).strip()}")
            raise ConnectionError(f"Failed to connect to {self.config.name}: {e}")

    def disconnect(self):
        """Disconnect from database."""
        if self.conn:
            self.conn.close()
            self.conn = None
            logger.info(f"Disconnected from {self.config.name} database")

    def __enter__(self):
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.disconnect()

    def _require_connection(self):
        if not self.conn:
            raise RuntimeError("Not connected to database")
        return self.conn

    def rollback(self):
        """Abort the current transaction, if any, after a failed table."""
        if self.conn and not self.conn.closed and not self.conn.autocommit:
            try:
                self.conn.rollback()
            except psycopg2.Error as e:
                logger.warning(f"Rollback on {self.config.name} failed: {e}")

    def table_exists(self, table: str) -> bool:
        return schemas.table_exists(self._require_connection(), table, self.schema)

    def get_table_columns(self, table: str) -> List[str]:
        return schemas.get_columns(self._require_connection(), table, self.schema)

    def get_primary_key(self, table: str) -> List[str]:
        return schemas.get_primary_key(self._require_connection(), table, self.schema)

    def count_rows(self, table: str) -> int:
        return schemas.count_rows(self._require_connection(), table, self.schema)
