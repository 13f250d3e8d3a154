"""
Shared fixtures: in-memory stand-ins for the source and destination databases.
"""

from typing import Any, Dict, List, Optional, Sequence

import psycopg2
import pytest

from portmigrate.config import DatabaseConfig, MigrationConfig
from portmigrate.main import MigrationOrchestrator


class FakeTable:
    """A table held in memory with a few of PostgreSQL's constraints."""

    def __init__(
        self,
        columns: Sequence[str],
        rows: Sequence[Dict[str, Any]] = (),
        primary_key: Sequence[str] = (),
        unique: Sequence[str] = (),
        not_null: Sequence[str] = ()
    ):
        self.columns = list(columns)
        self.rows = [dict(row) for row in rows]
        self.primary_key = list(primary_key)
        self.unique = list(unique)
        self.not_null = list(not_null)

    def ids(self, column: str = 'id') -> set:
        return {row.get(column) for row in self.rows}


class FakeDatabase:
    """Catalog and connection behaviour shared by the fake extractor and loader."""

    def __init__(self, name: str, tables: Optional[Dict[str, FakeTable]] = None):
        self.config = DatabaseConfig(
            url=f"postgresql://migrator:s3cret@{name}.example.com:5432/{name}",
            name=name
        )
        self.tables: Dict[str, FakeTable] = tables or {}
        self.connected = False
        self.connect_calls = 0
        self.disconnect_calls = 0
        self.rollback_calls = 0
        self.connect_error: Optional[Exception] = None

    def connect(self):
        self.connect_calls += 1
        if self.connect_error:
            raise self.connect_error
        self.connected = True

    def disconnect(self):
        self.disconnect_calls += 1
        self.connected = False

    def rollback(self):
        self.rollback_calls += 1

    def _table(self, table: str) -> FakeTable:
        if table not in self.tables:
            raise psycopg2.ProgrammingError(f'relation "{table}" does not exist')
        return self.tables[table]

    def table_exists(self, table: str) -> bool:
        return table in self.tables

    def get_table_columns(self, table: str) -> List[str]:
        if table not in self.tables:
            return []
        return list(self.tables[table].columns)

    def get_primary_key(self, table: str) -> List[str]:
        return list(self._table(table).primary_key)

    def count_rows(self, table: str) -> int:
        return len(self._table(table).rows)


class FakeExtractor(FakeDatabase):
    def __init__(self, tables=None):
        super().__init__('source', tables)
        self.extract_error: Dict[str, Exception] = {}

    def extract_rows(self, table: str, columns: List[str]) -> List[Dict[str, Any]]:
        if table in self.extract_error:
            raise self.extract_error[table]
        return [{col: row.get(col) for col in columns} for row in self._table(table).rows]


class FakeLoader(FakeDatabase):
    def __init__(self, tables=None):
        super().__init__('destination', tables)
        self.dependencies = []
        self.row_errors: Dict[str, Exception] = {}
        self.insert_calls = 0
        self.reset_tables: List[str] = []

    def get_foreign_key_dependencies(self):
        return list(self.dependencies)

    def row_exists(self, table, key_columns, row) -> bool:
        if table in self.row_errors:
            raise self.row_errors[table]
        return any(
            all(existing.get(col) == row.get(col) for col in key_columns)
            for existing in self._table(table).rows
        )

    def insert_row(self, table, columns, row):
        self.insert_calls += 1
        target = self._table(table)
        new_row = {col: row.get(col) for col in columns}

        for col in target.not_null:
            if new_row.get(col) is None:
                raise psycopg2.IntegrityError(
                    f'null value in column "{col}" of relation "{table}" violates not-null constraint'
                )
        constraints = [target.primary_key] if target.primary_key else []
        constraints += [[col] for col in target.unique]
        for key in constraints:
            if any(
                all(existing.get(col) == new_row.get(col) for col in key)
                for existing in target.rows
            ):
                raise psycopg2.IntegrityError(
                    f'duplicate key value violates unique constraint "{table}_{"_".join(key)}_key"'
                )

        target.rows.append(new_row)

    def reset_sequences(self, tables):
        self.reset_tables.extend(tables)


def households_table(ids, **kwargs) -> FakeTable:
    return FakeTable(
        columns=['id', 'name', 'user_id'],
        rows=[{'id': i, 'name': f"Household {i}", 'user_id': 'u1'} for i in ids],
        primary_key=['id'],
        **kwargs
    )


@pytest.fixture
def migration_config():
    return MigrationConfig(assume_yes=True)


@pytest.fixture
def source():
    return FakeExtractor()


@pytest.fixture
def destination():
    return FakeLoader()


@pytest.fixture
def make_orchestrator(source, destination, migration_config):
    def _make(tables=None, **kwargs):
        kwargs.setdefault('verify_tables', [])
        kwargs.setdefault('exclude_tables', set())
        kwargs.setdefault('table_keys', {})
        return MigrationOrchestrator(
            source,
            destination,
            config=migration_config,
            tables=tables if tables is not None else list(source.tables),
            **kwargs
        )
    return _make
