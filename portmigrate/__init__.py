"""
Copy rows between two PostgreSQL databases of the portfolio management app.
"""

__version__ = '1.0.0'
