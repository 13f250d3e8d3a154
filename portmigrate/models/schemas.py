"""
PostgreSQL catalog introspection helpers.
"""

from typing import Dict, List, Tuple
from psycopg2 import sql


def table_exists(conn, table: str, schema: str = 'public') -> bool:
    """
    Check if a table exists in the database.

    Args:
        conn: Database connection
        table: Table name
        schema: Schema name

    Returns:
        True if table exists, False otherwise
    """
    with conn.cursor() as cursor:
        cursor.execute("""
            SELECT EXISTS (
                SELECT 1
                FROM information_schema.tables
                WHERE table_schema = %s
                AND table_name = %s
            )
        """, (schema, table))
        result = cursor.fetchone()
        return bool(result[0]) if result else False


def get_columns(conn, table: str, schema: str = 'public') -> List[str]:
    """
    Get column names for a table, in physical column order.

    Args:
        conn: Database connection
        table: Table name
        schema: Schema name

    Returns:
        List of column names
    """
    with conn.cursor() as cursor:
        cursor.execute("""
            SELECT column_name
            FROM information_schema.columns
            WHERE table_schema = %s
            AND table_name = %s
            ORDER BY ordinal_position
        """, (schema, table))
        return [row[0] for row in cursor.fetchall()]


def get_column_types(conn, table: str, schema: str = 'public') -> Dict[str, str]:
    """
    Get column data types for a table.

    Args:
        conn: Database connection
        table: Table name
        schema: Schema name

    Returns:
        Dictionary of {column_name: data_type}
    """
    with conn.cursor() as cursor:
        cursor.execute("""
            SELECT column_name, data_type
            FROM information_schema.columns
            WHERE table_schema = %s
            AND table_name = %s
            ORDER BY ordinal_position
        """, (schema, table))
        return {row[0]: row[1] for row in cursor.fetchall()}


def get_primary_key(conn, table: str, schema: str = 'public') -> List[str]:
    """
    Get primary key columns for a table.

    Args:
        conn: Database connection
        table: Table name
        schema: Schema name

    Returns:
        Primary key column names in key order (empty if the table has none)
    """
    with conn.cursor() as cursor:
        cursor.execute("""
            SELECT kcu.column_name
            FROM information_schema.table_constraints tc
            JOIN information_schema.key_column_usage kcu
                ON tc.constraint_name = kcu.constraint_name
                AND tc.table_schema = kcu.table_schema
                AND tc.table_name = kcu.table_name
            WHERE tc.constraint_type = 'PRIMARY KEY'
            AND tc.table_schema = %s
            AND tc.table_name = %s
            ORDER BY kcu.ordinal_position
        """, (schema, table))
        return [row[0] for row in cursor.fetchall()]


def get_foreign_key_dependencies(conn, schema: str = 'public') -> List[Tuple[str, str]]:
    """
    Get foreign key dependencies between tables of a schema.

    Args:
        conn: Database connection
        schema: Schema name

    Returns:
        List of (child_table, parent_table) pairs
    """
    with conn.cursor() as cursor:
        cursor.execute("""
            SELECT DISTINCT child.relname, parent.relname
            FROM pg_constraint con
            JOIN pg_class child ON child.oid = con.conrelid
            JOIN pg_class parent ON parent.oid = con.confrelid
            JOIN pg_namespace ns ON ns.oid = child.relnamespace
            WHERE con.contype = 'f'
            AND ns.nspname = %s
        """, (schema,))
        return [(row[0], row[1]) for row in cursor.fetchall()]


def get_serial_columns(conn, table: str, schema: str = 'public') -> List[str]:
    """
    Get columns whose default is backed by a sequence (serial / identity).

    Args:
        conn: Database connection
        table: Table name
        schema: Schema name

    Returns:
        List of column names
    """
    with conn.cursor() as cursor:
        cursor.execute("""
            SELECT column_name
            FROM information_schema.columns
            WHERE table_schema = %s
            AND table_name = %s
            AND pg_get_serial_sequence(
                quote_ident(table_schema) || '.' || quote_ident(table_name),
                column_name
            ) IS NOT NULL
            ORDER BY ordinal_position
        """, (schema, table))
        return [row[0] for row in cursor.fetchall()]


def count_rows(conn, table: str, schema: str = 'public') -> int:
    """
    Count rows in a table.

    Args:
        conn: Database connection
        table: Table name
        schema: Schema name

    Returns:
        Number of rows
    """
    with conn.cursor() as cursor:
        cursor.execute(
            sql.SQL("SELECT COUNT(*) FROM {}").format(qualified_table(schema, table))
        )
        result = cursor.fetchone()
        return int(result[0]) if result else 0


def qualified_table(schema: str, table: str) -> sql.Identifier:
    """Quoted schema-qualified table identifier."""
    return sql.Identifier(schema, table)
