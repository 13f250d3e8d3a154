"""
Configuration module for the portfolio database migration.
"""
from dataclasses import dataclass
from typing import Dict, Optional, Tuple
import os
from pathlib import Path
from urllib.parse import urlparse
from dotenv import load_dotenv

# Load environment variables from .env file (in project root)
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=env_path)


@dataclass
class DatabaseConfig:
    """Database configuration."""
    url: str
    name: str = 'database'
    connect_timeout: int = 10

    @property
    def host(self) -> str:
        parsed = urlparse(self.url)
        if parsed.port:
            return f"{parsed.hostname}:{parsed.port}"
        return parsed.hostname or 'localhost'

    @property
    def database(self) -> str:
        return urlparse(self.url).path.lstrip('/')


@dataclass
class MigrationConfig:
    """Migration configuration."""
    schema: str = 'public'
    dry_run: bool = False
    assume_yes: bool = False

    # Ordering and post-processing
    order_by_foreign_keys: bool = True
    reset_sequences: bool = True

    # Per-table error reporting
    max_logged_errors: int = 3
    error_message_length: int = 80

    # Logging
    log_level: str = 'INFO'
    log_file: Optional[str] = None


def _get_env_required(*keys: str) -> str:
    """Get the first set environment variable among keys or raise error."""
    for key in keys:
        value = os.getenv(key)
        if value:
            return value
    raise ValueError(
        f"Required environment variable '{keys[0]}' is not set"
        + (f" (also checked: {', '.join(keys[1:])})" if len(keys) > 1 else "")
    )


def get_source_config() -> DatabaseConfig:
    """Source database configuration (must be set via environment variables)."""
    return DatabaseConfig(
        url=_get_env_required('SOURCE_DATABASE_URL', 'LOCAL_DATABASE_URL'),
        name='source',
    )


def get_destination_config() -> DatabaseConfig:
    """Destination database configuration (must be set via environment variables)."""
    return DatabaseConfig(
        url=_get_env_required('DESTINATION_DATABASE_URL', 'DATABASE_URL'),
        name='destination',
    )


MIGRATION_CONFIG = MigrationConfig(
    schema=os.getenv('MIGRATION_SCHEMA', 'public'),
    log_level=os.getenv('MIGRATION_LOG_LEVEL', 'INFO'),
    log_file=os.getenv('MIGRATION_LOG_FILE') or None,
)


# Table migration order (respecting foreign key dependencies)
TABLE_ORDER = [
    # Core tables (no dependencies)
    "users",
    "sessions",
    "universal_holdings",

    # Client records
    "households",
    "household_shares",
    "individuals",
    "corporations",

    # Accounts and ownership
    "individual_accounts",
    "corporate_accounts",
    "joint_accounts",
    "joint_account_ownership",

    # Holdings and account data
    "positions",
    "account_target_allocations",
    "account_tasks",
    "audit_logs",
    "milestones",
    "milestone_completions",

    # Model portfolios
    "planned_portfolios",
    "planned_portfolio_allocations",
    "freelance_portfolios",
    "freelance_portfolio_allocations",

    # Journals, planning and reference data
    "trading_journal_entries",
    "trading_journal_images",
    "reference_links",
    "prospects",
    "dca_plans",
    "dcp_plans",
    "library_items",
    "kpi_targets",
    "roadmap_initiatives",
    "roadmap_tasks",

    # Revenue, alerts and settings
    "investment_revenue_records",
    "insurance_revenue_records",
    "alerts",
    "user_settings",
]

# Row identity for tables whose key is not a column named "id"
TABLE_KEYS: Dict[str, Tuple[str, ...]] = {
    "sessions": ("sid",),
}

# Tables whose row counts are compared after migration
VERIFY_TABLES = [
    "households",
    "individuals",
    "positions",
    "account_tasks",
]

# Tables to exclude from migration
EXCLUDE_TABLES = set()
