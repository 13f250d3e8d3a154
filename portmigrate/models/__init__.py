"""
Models module for catalog introspection, ordering and results.
"""

from portmigrate.models.schemas import (
    table_exists,
    get_columns,
    get_column_types,
    get_primary_key,
    get_foreign_key_dependencies,
    get_serial_columns,
    count_rows
)
from portmigrate.models.ordering import order_tables
from portmigrate.models.results import (
    TableStatus,
    TableResult,
    MigrationTotals,
    VerificationResult
)

__all__ = [
    'table_exists',
    'get_columns',
    'get_column_types',
    'get_primary_key',
    'get_foreign_key_dependencies',
    'get_serial_columns',
    'count_rows',
    'order_tables',
    'TableStatus',
    'TableResult',
    'MigrationTotals',
    'VerificationResult'
]
