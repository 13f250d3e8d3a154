"""
Utils module for common utilities.
"""

from portmigrate.utils.logger import (
    setup_logging,
    ColoredFormatter
)
from portmigrate.utils.helpers import (
    confirm_action,
    print_statistics,
    format_duration,
    mask_database_url,
    truncate_message
)

__all__ = [
    'setup_logging',
    'ColoredFormatter',
    'confirm_action',
    'print_statistics',
    'format_duration',
    'mask_database_url',
    'truncate_message'
]
