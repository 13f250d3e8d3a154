"""
Database loader for the destination PostgreSQL database.
"""

import logging
from typing import Dict, List, Any, Sequence, Tuple
import psycopg2
from psycopg2 import sql
from psycopg2.extras import Json

from portmigrate.connection import PostgresConnection
from portmigrate.models import schemas
from portmigrate.models.schemas import qualified_table

logger = logging.getLogger(__name__)

JSON_TYPES = ('json', 'jsonb')


class DestinationLoader(PostgresConnection):
    """Load rows into the destination database."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._column_types: Dict[str, Dict[str, str]] = {}

    def get_foreign_key_dependencies(self) -> List[Tuple[str, str]]:
        return schemas.get_foreign_key_dependencies(self._require_connection(), self.schema)

    def row_exists(self, table: str, key_columns: Sequence[str], row: Dict[str, Any]) -> bool:
        """
        Check whether a row with the same key already exists.

        Args:
            table: Table name
            key_columns: Columns identifying the row
            row: Source row

        Returns:
            True if a matching row exists
        """
        conn = self._require_connection()

        # Plain equality keeps the primary key index usable; NULL parts need IS NULL
        value_columns = [col for col in key_columns if row.get(col) is not None]
        condition = sql.SQL(' AND ').join(
            sql.SQL("{} = %s" if row.get(col) is not None else "{} IS NULL").format(
                sql.Identifier(col)
            )
            for col in key_columns
        )
        query = sql.SQL("SELECT 1 FROM {table} WHERE {condition} LIMIT 1").format(
            table=qualified_table(self.schema, table),
            condition=condition,
        )
        values = self._prepare_values(table, value_columns, row)

        try:
            with conn.cursor() as cursor:
                cursor.execute(query, values)
                return cursor.fetchone() is not None
        except psycopg2.Error:
            self.rollback()
            raise

    def insert_row(self, table: str, columns: Sequence[str], row: Dict[str, Any]):
        """
        Insert one row and commit it.

        Args:
            table: Table name
            columns: Columns to insert
            row: Row values keyed by column
        """
        conn = self._require_connection()

        sql_query = self._build_insert_query(table, columns)
        values = self._prepare_values(table, columns, row)

        try:
            with conn.cursor() as cursor:
                cursor.execute(sql_query, values)
            conn.commit()
        except psycopg2.Error:
            self.rollback()
            raise

    def _build_insert_query(self, table: str, columns: Sequence[str]) -> sql.Composed:
        """Build INSERT query."""
        return sql.SQL("INSERT INTO {table} ({columns}) VALUES ({placeholders})").format(
            table=qualified_table(self.schema, table),
            columns=sql.SQL(', ').join(sql.Identifier(col) for col in columns),
            placeholders=sql.SQL(', ').join(sql.Placeholder() * len(columns)),
        )

    def _prepare_values(self, table: str, columns: Sequence[str], row: Dict[str, Any]) -> tuple:
        """Convert row values to parameters, wrapping JSON column values."""
        column_types = self._get_column_types(table)
        values = []
        for col in columns:
            value = row.get(col)
            if value is not None and (
                isinstance(value, dict) or column_types.get(col) in JSON_TYPES
            ):
                value = Json(value)
            values.append(value)
        return tuple(values)

    def _get_column_types(self, table: str) -> Dict[str, str]:
        if table not in self._column_types:
            self._column_types[table] = schemas.get_column_types(
                self._require_connection(), table, self.schema
            )
        return self._column_types[table]

    def reset_sequence(self, table: str, column: str):
        """
        Move a column's sequence past the highest migrated value.

        Args:
            table: Table name
            column: Serial column name
        """
        conn = self._require_connection()

        query = sql.SQL(
            "SELECT setval(pg_get_serial_sequence(%s, %s), "
            "COALESCE(MAX({column}), 1), MAX({column}) IS NOT NULL) FROM {table}"
        ).format(
            column=sql.Identifier(column),
            table=qualified_table(self.schema, table),
        )
        qualified_name = f'"{self.schema}"."{table}"'

        try:
            with conn.cursor() as cursor:
                cursor.execute(query, (qualified_name, column))
            conn.commit()
            logger.info(f"Reset sequence for {table}.{column}")
        except psycopg2.Error as e:
            self.rollback()
            logger.warning(f"Failed to reset sequence for {table}.{column}: {e}")

    def reset_sequences(self, tables: Sequence[str]):
        """Reset sequences of all serial columns in the given tables."""
        conn = self._require_connection()

        for table in tables:
            for column in schemas.get_serial_columns(conn, table, self.schema):
                self.reset_sequence(table, column)
