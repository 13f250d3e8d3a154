"""
Result types reported by a migration run.
"""

from dataclasses import dataclass, field
from typing import List, Optional


class TableStatus:
    """Outcome of migrating one table."""
    MIGRATED = 'migrated'
    EXCLUDED = 'excluded'
    NOT_IN_SOURCE = 'not_in_source'
    NOT_IN_DESTINATION = 'not_in_destination'
    NO_COMMON_COLUMNS = 'no_common_columns'
    NO_KEY = 'no_key'
    EMPTY = 'empty'
    FAILED = 'failed'


@dataclass
class TableResult:
    """Per-table counters."""

    table: str
    imported: int = 0
    skipped: int = 0
    errors: int = 0
    status: str = TableStatus.MIGRATED
    message: Optional[str] = None
    duration: float = 0.0

    @property
    def symbol(self) -> str:
        if self.status == TableStatus.FAILED:
            return '✗'
        if self.status != TableStatus.MIGRATED:
            return '⊘'
        return '⚠' if self.errors > 0 else '✓'

    @property
    def summary(self) -> str:
        """One-line progress message for this table."""
        if self.status == TableStatus.FAILED:
            return f"{self.symbol} {self.table}: {self.message}"
        if self.status != TableStatus.MIGRATED:
            return f"{self.symbol} {self.table}: {self.message}, skipping"
        msg = f"{self.symbol} {self.table}: {self.imported} imported, {self.skipped} skipped"
        if self.errors > 0:
            msg += f", {self.errors} errors"
        return msg


@dataclass
class MigrationTotals:
    """Process-wide counters."""

    imported: int = 0
    skipped: int = 0
    errors: int = 0
    tables: List[TableResult] = field(default_factory=list)

    def add(self, result: TableResult) -> None:
        self.tables.append(result)
        self.imported += result.imported
        self.skipped += result.skipped
        self.errors += result.errors

    @property
    def tables_migrated(self) -> int:
        return sum(1 for result in self.tables if result.status == TableStatus.MIGRATED)

    @property
    def summary(self) -> str:
        return (
            f"Total: {self.imported} records imported, "
            f"{self.skipped} skipped, {self.errors} errors"
        )


@dataclass
class VerificationResult:
    """Row counts of one table on both sides."""

    table: str
    source_count: Optional[int] = None
    destination_count: Optional[int] = None
    error: Optional[str] = None

    @property
    def matches(self) -> bool:
        return (
            self.error is None
            and self.source_count is not None
            and self.source_count == self.destination_count
        )

    @property
    def summary(self) -> str:
        if self.error is not None:
            return f"⚠ {self.table}: Could not verify"
        marker = '✓' if self.matches else '⚠'
        return (
            f"{marker} {self.table}: source={self.source_count}, "
            f"destination={self.destination_count}"
        )
