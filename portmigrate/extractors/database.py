"""
Database extractor for the source PostgreSQL database.
"""

import logging
from typing import Dict, List, Any
from psycopg2 import sql
from psycopg2.extras import RealDictCursor

from portmigrate.connection import PostgresConnection
from portmigrate.models.schemas import qualified_table

logger = logging.getLogger(__name__)


class SourceExtractor(PostgresConnection):
    """Extract rows from the source database."""

    # Reads only; no transaction is left open between tables
    autocommit = True

    def extract_rows(self, table: str, columns: List[str]) -> List[Dict[str, Any]]:
        """
        Extract all rows of a table, restricted to the given columns.

        Args:
            table: Table name
            columns: Columns to select

        Returns:
            List of rows as dictionaries
        """
        conn = self._require_connection()

        query = sql.SQL("SELECT {columns} FROM {table}").format(
            columns=sql.SQL(', ').join(sql.Identifier(col) for col in columns),
            table=qualified_table(self.schema, table),
        )

        with conn.cursor(cursor_factory=RealDictCursor) as cursor:
            cursor.execute(query)
            rows = [dict(row) for row in cursor.fetchall()]

        logger.debug(f"Fetched {len(rows)} rows from {table}")
        return rows
