from portmigrate.config import TABLE_ORDER
from portmigrate.models import order_tables


def test_no_dependencies_keeps_order():
    assert order_tables(['c', 'a', 'b'], []) == ['c', 'a', 'b']


def test_parent_moves_before_child():
    tables = ['positions', 'individual_accounts', 'households']
    dependencies = [
        ('positions', 'individual_accounts'),
        ('individual_accounts', 'households'),
    ]

    assert order_tables(tables, dependencies) == ['households', 'individual_accounts', 'positions']


def test_listed_order_breaks_ties():
    tables = ['alerts', 'users', 'households', 'prospects']
    dependencies = [('households', 'users'), ('alerts', 'users')]

    assert order_tables(tables, dependencies) == ['users', 'alerts', 'households', 'prospects']


def test_ignores_self_references_and_unknown_tables():
    tables = ['roadmap_tasks', 'roadmap_initiatives']
    dependencies = [
        ('roadmap_tasks', 'roadmap_tasks'),
        ('roadmap_tasks', 'users'),
    ]

    assert order_tables(tables, dependencies) == ['roadmap_tasks', 'roadmap_initiatives']


def test_cycle_keeps_listed_order_at_end(caplog):
    tables = ['a', 'b', 'c', 'd']
    dependencies = [('b', 'c'), ('c', 'b'), ('d', 'a')]

    assert order_tables(tables, dependencies) == ['a', 'd', 'b', 'c']
    assert "Circular foreign keys" in caplog.text


def test_builtin_order_already_satisfies_known_dependencies():
    dependencies = [
        ('households', 'users'),
        ('individuals', 'households'),
        ('individual_accounts', 'individuals'),
        ('positions', 'individual_accounts'),
        ('planned_portfolio_allocations', 'planned_portfolios'),
        ('planned_portfolio_allocations', 'universal_holdings'),
    ]

    assert order_tables(TABLE_ORDER, dependencies) == TABLE_ORDER
