"""
Foreign-key aware ordering of the migration table list.
"""

import logging
from typing import Dict, Iterable, List, Set, Tuple

logger = logging.getLogger(__name__)


def order_tables(
    tables: List[str],
    dependencies: Iterable[Tuple[str, str]]
) -> List[str]:
    """
    Order tables so that every referenced (parent) table precedes the
    tables referencing it.

    The sort is stable: among tables that are ready at the same time, the
    position in ``tables`` decides. Self references and dependencies on
    tables outside ``tables`` are ignored. Tables caught in a cycle are
    appended at the end in their original relative order.

    Args:
        tables: Tables in the fallback (hand-maintained) order
        dependencies: (child_table, parent_table) pairs

    Returns:
        Reordered list containing exactly the tables in ``tables``
    """
    position = {table: index for index, table in enumerate(tables)}
    parents: Dict[str, Set[str]] = {table: set() for table in tables}
    children: Dict[str, Set[str]] = {table: set() for table in tables}

    for child, parent in dependencies:
        if child == parent or child not in position or parent not in position:
            continue
        parents[child].add(parent)
        children[parent].add(child)

    remaining = {table: len(parents[table]) for table in tables}
    ready = [table for table in tables if remaining[table] == 0]
    ordered: List[str] = []

    while ready:
        ready.sort(key=position.__getitem__)
        table = ready.pop(0)
        ordered.append(table)
        for child in children[table]:
            remaining[child] -= 1
            if remaining[child] == 0:
                ready.append(child)

    if len(ordered) < len(tables):
        placed = set(ordered)
        cyclic = [table for table in tables if table not in placed]
        logger.warning(
            f"Circular foreign keys between {', '.join(cyclic)}; "
            f"keeping their listed order"
        )
        ordered.extend(cyclic)

    return ordered
