import dataclasses

import pytest

from portmigrate import main as main_module
from portmigrate.config import EXCLUDE_TABLES, MIGRATION_CONFIG


@pytest.fixture(autouse=True)
def restore_config(monkeypatch):
    saved = dataclasses.asdict(MIGRATION_CONFIG)
    saved_excluded = set(EXCLUDE_TABLES)
    monkeypatch.setattr(main_module, 'setup_logging', lambda **kwargs: None)
    monkeypatch.setenv('SOURCE_DATABASE_URL', 'postgresql://u:p@source.example.com/app')
    monkeypatch.setenv('DESTINATION_DATABASE_URL', 'postgresql://u:p@dest.example.com/app')
    yield
    for key, value in saved.items():
        setattr(MIGRATION_CONFIG, key, value)
    EXCLUDE_TABLES.clear()
    EXCLUDE_TABLES.update(saved_excluded)


class RecordingOrchestrator:
    instances = []
    error = None

    def __init__(self, extractor, loader, tables=None):
        self.extractor = extractor
        self.loader = loader
        self.tables = tables
        RecordingOrchestrator.instances.append(self)

    def run(self):
        if RecordingOrchestrator.error:
            raise RecordingOrchestrator.error


@pytest.fixture
def orchestrator(monkeypatch):
    RecordingOrchestrator.instances = []
    RecordingOrchestrator.error = None
    monkeypatch.setattr(main_module, 'MigrationOrchestrator', RecordingOrchestrator)
    return RecordingOrchestrator


def test_arguments_update_config(orchestrator):
    main_module.main([
        '--dry-run', '--yes', '--no-fk-order', '--no-reset-sequences',
        '--schema', 'archive', '--tables', 'households, positions',
        '--exclude-tables', 'audit_logs,sessions',
    ])

    assert MIGRATION_CONFIG.dry_run is True
    assert MIGRATION_CONFIG.assume_yes is True
    assert MIGRATION_CONFIG.order_by_foreign_keys is False
    assert MIGRATION_CONFIG.reset_sequences is False
    assert {'audit_logs', 'sessions'} <= EXCLUDE_TABLES

    created = orchestrator.instances[0]
    assert created.tables == ['households', 'positions']
    assert created.extractor.schema == 'archive'
    assert created.loader.schema == 'archive'
    assert created.loader.config.url == 'postgresql://u:p@dest.example.com/app'


def test_repeated_tables_are_migrated_once(orchestrator):
    main_module.main(['--yes', '--tables', 'households,households, positions,households'])

    assert orchestrator.instances[0].tables == ['households', 'positions']


def test_defaults_use_builtin_tables(orchestrator):
    main_module.main([])

    assert orchestrator.instances[0].tables is None
    assert MIGRATION_CONFIG.order_by_foreign_keys is True


def test_missing_configuration_exits_nonzero(orchestrator, monkeypatch):
    for var in ('SOURCE_DATABASE_URL', 'LOCAL_DATABASE_URL'):
        monkeypatch.delenv(var, raising=False)

    with pytest.raises(SystemExit) as exc:
        main_module.main(['--yes'])

    assert exc.value.code == 1
    assert orchestrator.instances == []


def test_top_level_failure_exits_nonzero(orchestrator):
    orchestrator.error = ConnectionError("Failed to connect to source")

    with pytest.raises(SystemExit) as exc:
        main_module.main(['--yes'])

    assert exc.value.code == 1


def test_interrupt_exits_130(orchestrator):
    orchestrator.error = KeyboardInterrupt()

    with pytest.raises(SystemExit) as exc:
        main_module.main(['--yes'])

    assert exc.value.code == 130
