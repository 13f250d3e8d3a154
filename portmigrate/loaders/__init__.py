"""
Loaders module for writing data to the destination database.
"""

from portmigrate.loaders.database import DestinationLoader

__all__ = ['DestinationLoader']
