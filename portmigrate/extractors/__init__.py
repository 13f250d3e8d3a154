"""
Extractors module for reading data from the source database.
"""

from portmigrate.extractors.database import SourceExtractor

__all__ = ['SourceExtractor']
