"""
Main migration orchestration script.
"""

import logging
import sys
import time
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import psycopg2

from portmigrate.config import (
    MIGRATION_CONFIG,
    MigrationConfig,
    TABLE_ORDER,
    TABLE_KEYS,
    VERIFY_TABLES,
    EXCLUDE_TABLES,
    get_source_config,
    get_destination_config
)
from portmigrate.extractors import SourceExtractor
from portmigrate.loaders import DestinationLoader
from portmigrate.models import (
    order_tables,
    TableStatus,
    TableResult,
    MigrationTotals,
    VerificationResult
)
from portmigrate.utils import (
    setup_logging,
    confirm_action,
    print_statistics,
    format_duration,
    mask_database_url,
    truncate_message
)

logger = logging.getLogger(__name__)

# Errors that mean the connection itself is unusable, not just the row
CONNECTION_ERRORS = (psycopg2.OperationalError, psycopg2.InterfaceError)

SKIP_LOG_LEVELS = {
    TableStatus.EXCLUDED: logging.INFO,
    TableStatus.NOT_IN_SOURCE: logging.INFO,
    TableStatus.EMPTY: logging.INFO,
    TableStatus.NOT_IN_DESTINATION: logging.WARNING,
    TableStatus.NO_COMMON_COLUMNS: logging.WARNING,
    TableStatus.NO_KEY: logging.WARNING,
}


class MigrationOrchestrator:
    """Copy missing rows table by table from the source to the destination."""

    def __init__(
        self,
        extractor: SourceExtractor,
        loader: DestinationLoader,
        config: Optional[MigrationConfig] = None,
        tables: Optional[Sequence[str]] = None,
        exclude_tables: Optional[Iterable[str]] = None,
        table_keys: Optional[Dict[str, Tuple[str, ...]]] = None,
        verify_tables: Optional[Sequence[str]] = None
    ):
        """
        Initialize orchestrator.

        Args:
            extractor: Source database reader
            loader: Destination database writer
            config: Migration settings (defaults to MIGRATION_CONFIG)
            tables: Tables to migrate, in fallback order (defaults to TABLE_ORDER)
            exclude_tables: Tables never migrated (defaults to EXCLUDE_TABLES)
            table_keys: Declared row keys per table (defaults to TABLE_KEYS)
            verify_tables: Tables whose counts are compared at the end
        """
        self.extractor = extractor
        self.loader = loader
        self.config = config or MIGRATION_CONFIG
        self.tables = list(tables if tables is not None else TABLE_ORDER)
        self.exclude_tables = set(exclude_tables if exclude_tables is not None else EXCLUDE_TABLES)
        self.table_keys = table_keys if table_keys is not None else TABLE_KEYS
        self.verify_tables = list(verify_tables if verify_tables is not None else VERIFY_TABLES)
        self.totals = MigrationTotals()
        self.verification: List[VerificationResult] = []
        self.statistics = {
            'start_time': None,
            'end_time': None,
            'duration': 0,
        }

    def run(self) -> Optional[MigrationTotals]:
        """
        Run the complete migration process.

        Returns:
            Totals of the run, or None if the user cancelled
        """
        mode = " (DRY RUN)" if self.config.dry_run else ""
        logger.info("=" * 70)
        logger.info(f"PORTFOLIO DATABASE MIGRATION{mode}")
        logger.info("=" * 70)
        logger.info(f"Source:      {mask_database_url(self.extractor.config.url)}")
        logger.info(f"Destination: {mask_database_url(self.loader.config.url)}")

        if not self.config.dry_run and not self.config.assume_yes:
            if not confirm_action("Copy missing rows into the destination database. Continue?"):
                logger.info("Migration cancelled by user")
                return None

        self.statistics['start_time'] = time.time()

        try:
            # Step 1: Connect to both databases
            logger.info("\n[STEP 1] Connecting to databases...")
            self.extractor.connect()
            self.loader.connect()

            # Step 2: Work out table order
            logger.info("\n[STEP 2] Resolving table order...")
            tables = self.resolve_table_order()

            # Step 3: Migrate tables
            logger.info(f"\n[STEP 3] Migrating {len(tables)} tables...")
            for table in tables:
                self.totals.add(self.migrate_table(table))

            # Step 4: Reset sequences
            if self.config.reset_sequences and not self.config.dry_run:
                logger.info("\n[STEP 4] Resetting sequences...")
                self._reset_sequences()
            else:
                logger.info("\n[STEP 4] Skipping sequence reset")

            self.statistics['end_time'] = time.time()
            self.statistics['duration'] = self.statistics['end_time'] - self.statistics['start_time']
            self._print_summary()

            # Step 5: Compare row counts
            self.verification = self.verify_counts()
            self._print_verification()

            return self.totals

        finally:
            # Cleanup
            self.loader.disconnect()
            self.extractor.disconnect()

    def resolve_table_order(self) -> List[str]:
        """Order the table list by destination foreign keys when enabled."""
        if not self.config.order_by_foreign_keys:
            return list(self.tables)

        try:
            dependencies = self.loader.get_foreign_key_dependencies()
        except psycopg2.Error as e:
            self.loader.rollback()
            logger.warning(f"Could not read foreign keys, using listed order: {e}")
            return list(self.tables)

        ordered = order_tables(self.tables, dependencies)
        if ordered != self.tables:
            logger.info("Table order adjusted to follow foreign keys")
        return ordered

    def resolve_key_columns(self, table: str, common_columns: List[str]) -> List[str]:
        """
        Decide which columns identify a row.

        Uses the declared key for the table, else the destination primary
        key, else ``id`` or the first common column.

        Returns:
            Key columns, or an empty list if they are not all shared
        """
        if table in self.table_keys:
            key_columns = list(self.table_keys[table])
        else:
            key_columns = self.loader.get_primary_key(table)
            if not key_columns:
                key_columns = ['id'] if 'id' in common_columns else [common_columns[0]]
                logger.warning(
                    f"  {table}: no primary key found, matching rows on {key_columns[0]}"
                )

        if any(col not in common_columns for col in key_columns):
            return []
        return key_columns

    def migrate_table(self, table: str) -> TableResult:
        """
        Migrate a single table.

        Errors other than per-row database errors are caught here: the table
        then counts as a single error and the run moves on.
        """
        table_start = time.time()

        if table in self.exclude_tables:
            result = TableResult(table, status=TableStatus.EXCLUDED, message="Excluded")
            logger.info(result.summary)
            return result

        try:
            result = self._migrate_table(table)
        except Exception as e:
            self.loader.rollback()
            result = TableResult(
                table,
                errors=1,
                status=TableStatus.FAILED,
                message=truncate_message(str(e), 200)
            )
            logger.error(result.summary)

        result.duration = time.time() - table_start
        return result

    def _migrate_table(self, table: str) -> TableResult:
        if not self.extractor.table_exists(table):
            return self._skip(table, TableStatus.NOT_IN_SOURCE, "Not in source")

        if not self.loader.table_exists(table):
            return self._skip(table, TableStatus.NOT_IN_DESTINATION, "Not in destination")

        # Get columns that exist in both
        source_columns = self.extractor.get_table_columns(table)
        destination_columns = set(self.loader.get_table_columns(table))
        common_columns = [col for col in source_columns if col in destination_columns]

        if not common_columns:
            return self._skip(table, TableStatus.NO_COMMON_COLUMNS, "No common columns")

        key_columns = self.resolve_key_columns(table, common_columns)
        if not key_columns:
            return self._skip(table, TableStatus.NO_KEY, "Key columns not in both schemas")

        rows = self.extractor.extract_rows(table, common_columns)
        if not rows:
            return self._skip(table, TableStatus.EMPTY, "Empty")

        result = TableResult(table)

        for row in rows:
            try:
                if self.loader.row_exists(table, key_columns, row):
                    result.skipped += 1
                    continue

                if not self.config.dry_run:
                    self.loader.insert_row(table, common_columns, row)
                result.imported += 1

            except CONNECTION_ERRORS:
                raise
            except psycopg2.Error as e:
                result.errors += 1
                if result.errors <= self.config.max_logged_errors:
                    logger.warning(
                        f"    ⚠ Error: {truncate_message(str(e), self.config.error_message_length)}"
                    )
                failed_key = {col: row.get(col) for col in key_columns}
                logger.debug(f"Failed row in {table}: key {failed_key}")

        if result.errors > 0:
            logger.warning(result.summary)
        else:
            logger.info(result.summary)
        return result

    def _skip(self, table: str, status: str, message: str) -> TableResult:
        result = TableResult(table, status=status, message=message)
        logger.log(SKIP_LOG_LEVELS.get(status, logging.INFO), result.summary)
        return result

    def _reset_sequences(self):
        """Reset destination sequences of tables that received rows."""
        tables = [result.table for result in self.totals.tables if result.imported > 0]
        try:
            self.loader.reset_sequences(tables)
        except psycopg2.Error as e:
            self.loader.rollback()
            logger.warning(f"Failed to reset sequences: {e}")

    def verify_counts(self) -> List[VerificationResult]:
        """Compare source and destination row counts of the verification tables."""
        results = []
        for table in self.verify_tables:
            try:
                results.append(VerificationResult(
                    table,
                    source_count=self.extractor.count_rows(table),
                    destination_count=self.loader.count_rows(table),
                ))
            except psycopg2.Error as e:
                self.loader.rollback()
                results.append(VerificationResult(table, error=str(e)))
        return results

    def _print_summary(self):
        """Print migration summary."""
        summary = {
            'Duration': format_duration(self.statistics['duration']),
            'Tables Migrated': self.totals.tables_migrated,
            'Rows Imported': self.totals.imported,
            'Rows Skipped': self.totals.skipped,
            'Errors': self.totals.errors,
        }

        title = "MIGRATION SUMMARY (DRY RUN)" if self.config.dry_run else "MIGRATION SUMMARY"
        print_statistics(summary, title)
        print(self.totals.summary)

        # Print per-table statistics
        if self.totals.tables:
            print("\nPer-Table Statistics:")
            print("-" * 70)
            for result in self.totals.tables:
                print(f"  {result.summary} ({format_duration(result.duration)})")
            print("-" * 70)

    def _print_verification(self):
        """Print verification block."""
        if not self.verification:
            return

        print("\nVerification:")
        for result in self.verification:
            print(f"  {result.summary}")


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description='Copy rows missing from the destination PostgreSQL database'
    )
    parser.add_argument(
        '--log-level',
        type=str,
        default=MIGRATION_CONFIG.log_level,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level'
    )
    parser.add_argument(
        '--log-file',
        type=str,
        help='Log to file'
    )
    parser.add_argument(
        '--schema',
        type=str,
        help='Schema holding the tables on both sides (default: public)'
    )
    parser.add_argument(
        '--tables',
        type=str,
        help='Comma-separated list of tables to migrate instead of the built-in list'
    )
    parser.add_argument(
        '--exclude-tables',
        type=str,
        help='Comma-separated list of table names to exclude from migration (e.g., "audit_logs,sessions")'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Check which rows would be imported without writing anything'
    )
    parser.add_argument(
        '--yes', '-y',
        action='store_true',
        help='Do not ask for confirmation'
    )
    parser.add_argument(
        '--no-fk-order',
        action='store_true',
        help='Keep the built-in table order instead of following foreign keys'
    )
    parser.add_argument(
        '--no-reset-sequences',
        action='store_true',
        help='Do not move destination sequences past migrated values'
    )

    args = parser.parse_args(argv)

    # Update configuration from args
    MIGRATION_CONFIG.log_level = args.log_level
    if args.log_file:
        MIGRATION_CONFIG.log_file = args.log_file
    if args.schema:
        MIGRATION_CONFIG.schema = args.schema
    MIGRATION_CONFIG.dry_run = args.dry_run
    MIGRATION_CONFIG.assume_yes = args.yes
    MIGRATION_CONFIG.order_by_foreign_keys = not args.no_fk_order
    MIGRATION_CONFIG.reset_sequences = not args.no_reset_sequences

    setup_logging(
        level=MIGRATION_CONFIG.log_level,
        log_file=MIGRATION_CONFIG.log_file
    )

    tables = None
    if args.tables:
        # Repeated names would migrate and count the same table twice
        tables = list(dict.fromkeys(t.strip() for t in args.tables.split(',') if t.strip()))
        logger.info(f"Migrating only: {', '.join(tables)}")

    # Add excluded tables from command line
    if args.exclude_tables:
        excluded = [t.strip() for t in args.exclude_tables.split(',') if t.strip()]
        EXCLUDE_TABLES.update(excluded)
        logger.info(f"Excluding tables from command line: {', '.join(excluded)}")

    try:
        orchestrator = MigrationOrchestrator(
            SourceExtractor(get_source_config(), MIGRATION_CONFIG.schema),
            DestinationLoader(get_destination_config(), MIGRATION_CONFIG.schema),
            tables=tables
        )
        orchestrator.run()
    except KeyboardInterrupt:
        logger.info("\nMigration interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Migration failed: {e}", exc_info=MIGRATION_CONFIG.log_level == 'DEBUG')
        sys.exit(1)


if __name__ == '__main__':
    main()
