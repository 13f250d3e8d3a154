"""
Helper utility functions.
"""

import re
from typing import Dict, Any
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

# password=value in a libpq keyword string, value optionally single-quoted
KEYWORD_PASSWORD = re.compile(r"(\bpassword\s*=\s*)('(?:[^'\\]|\\.)*'|\S+)")


def confirm_action(prompt: str) -> bool:
    """
    Ask user to confirm an action.

    Args:
        prompt: Confirmation prompt message

    Returns:
        True if user confirms, False otherwise
    """
    while True:
        response = input(f"{prompt} (yes/no): ").strip().lower()
        if response in ('yes', 'y'):
            return True
        elif response in ('no', 'n'):
            return False
        else:
            print("Please enter 'yes' or 'no'")


def print_statistics(stats: Dict[str, Any], title: str = "STATISTICS"):
    """
    Print statistics in a formatted table.

    Args:
        stats: Dictionary of statistics to print
        title: Title for the statistics table
    """
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)

    max_key_length = max(len(str(k)) for k in stats.keys()) if stats else 0

    for key, value in stats.items():
        key_str = str(key).ljust(max_key_length)
        print(f"  {key_str}: {value}")

    print("=" * 70)


def format_duration(seconds: float) -> str:
    """
    Format duration in seconds to human-readable string.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration string (e.g., "1h 23m 45s")
    """
    if seconds < 0:
        return "0s"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    milliseconds = int((seconds % 1) * 1000)

    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")
    if milliseconds > 0 and seconds < 60:
        parts.append(f"{milliseconds}ms")

    return " ".join(parts)


def mask_database_url(url: str) -> str:
    """
    Hide the password of a connection string for display.

    Handles ``user:password@`` URLs, ``?password=`` query parameters and
    libpq keyword strings (``host=... password=...``).

    Args:
        url: PostgreSQL connection URL or keyword/value DSN

    Returns:
        Connection string with the password replaced by ``***``
    """
    if '://' not in url:
        return KEYWORD_PASSWORD.sub(r"\1***", url)

    parsed = urlparse(url)

    netloc = parsed.netloc
    if parsed.password is not None:
        netloc = f"{parsed.username}:***@{parsed.hostname}"
        if parsed.port:
            netloc += f":{parsed.port}"

    query = parsed.query
    if query:
        params = parse_qsl(query, keep_blank_values=True)
        if any(key == 'password' for key, _ in params):
            query = urlencode(
                [(key, '***' if key == 'password' else value) for key, value in params],
                safe='*'
            )

    return urlunparse(parsed._replace(netloc=netloc, query=query))


def truncate_message(message: str, length: int) -> str:
    """Collapse a (possibly multi-line) error message to one line of at most length chars."""
    text = " ".join(str(message).split())
    if len(text) <= length:
        return text
    return text[:length]
