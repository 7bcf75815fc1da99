from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError
from django.db import ProgrammingError

from simpleschema.verification import TableStats, VerificationReport


@pytest.fixture(autouse=True)
def fixed_target(settings):
    settings.PROVISIONING = dict(settings.PROVISIONING, TABLE_OWNER='postgres')


def test_provision_example_reports_created_rows(fake_connections):
    out = StringIO()
    call_command('provision_example', '--customers', '10', '--orders', '20', '--items', '30', stdout=out)

    output = out.getvalue()
    assert 'Provisioning database example (server mode)' in output
    assert 'Created 10 customer records' in output
    assert 'Created 20 order records' in output
    assert 'Created 30 item records' in output
    assert 'Provisioning complete' in output
    assert fake_connections.statements[0] == 'CREATE DATABASE example'


def test_provision_example_fails_with_statement(fake_connections, db_error):
    fake_connections.fail(
        'CREATE DATABASE',
        db_error(ProgrammingError, 'database "example" already exists', '42P04'),
    )

    with pytest.raises(CommandError) as excinfo:
        call_command('provision_example', stdout=StringIO())

    message = str(excinfo.value)
    assert message.startswith('DuplicateObjectError:')
    assert 'CREATE DATABASE example' in message
    assert excinfo.value.returncode == 1
    assert fake_connections.statements == []


def test_provision_example_rejects_bad_counts(fake_connections):
    with pytest.raises(CommandError, match='customer row count'):
        call_command('provision_example', '--customers', '0', stdout=StringIO())
    assert fake_connections.statements == []


def test_provision_example_host_mode_with_seed(fake_connections):
    out = StringIO()
    call_command(
        'provision_example', '--mode', 'host', '--seed', '1', '--batch-size', '3',
        '--customers', '4', '--orders', '5', '--items', '6', '--skip-database',
        stdout=out,
    )

    assert 'CREATE DATABASE example' not in fake_connections.statements
    assert 'Created 6 item records' in out.getvalue()


def test_provision_example_verify_flag(fake_connections, monkeypatch):
    report = VerificationReport(problems={'order': ['3 rows reference a missing parent']})
    monkeypatch.setattr(
        'simpleschema.management.commands.provision_example.verify', lambda expected: report,
    )

    with pytest.raises(CommandError, match='order: 3 rows reference a missing parent'):
        call_command('provision_example', '--verify', stdout=StringIO())


def test_verify_example_passes(monkeypatch):
    seen = {}

    def fake_verify(expected):
        seen.update(expected)
        return VerificationReport(
            stats=[TableStats('customer', 1000, 1, 1000)],
            problems={'customer': [], 'order': [], 'item': []},
        )

    monkeypatch.setattr('simpleschema.management.commands.verify_example.verify', fake_verify)
    out = StringIO()
    call_command('verify_example', stdout=out)

    assert seen == {'customer': 1000, 'order': 10000, 'item': 100000}
    assert 'customer: 1,000 rows, ids [1, 1000]' in out.getvalue()
    assert 'All checks passed' in out.getvalue()


def test_verify_example_fails_on_problems(monkeypatch):
    report = VerificationReport(problems={'customer': ['expected 1,000 rows, found 0']})
    monkeypatch.setattr('simpleschema.management.commands.verify_example.verify', lambda expected: report)

    with pytest.raises(CommandError, match='customer: expected 1,000 rows, found 0'):
        call_command('verify_example', stdout=StringIO())
