from collections.abc import Callable
from dataclasses import replace
from pathlib import Path

import pytest

from ofx_viewer import cli
from ofx_viewer.config import default_settings
from ofx_viewer.errors import OfxIOError
from ofx_viewer.models import ProcessingJob


@pytest.fixture
def statement_file(tmp_path: Path, sample_text: str) -> Path:
    target = tmp_path / 'statement.ofx'
    target.write_text(sample_text, encoding='cp1252')
    return target


@pytest.fixture
def emitted(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    messages: list[str] = []
    monkeypatch.setattr(cli.LOGGER, 'log', lambda _level, message: messages.append(message))
    return messages


@pytest.fixture(autouse=True)
def _no_user_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, 'load_settings', lambda _path: default_settings())


def test_parse_args_basic() -> None:
    args = cli.parse_args(['foo.ofx'])
    assert args.targets == ['foo.ofx']
    assert not args.csv
    assert args.limit is None


def test_parse_args_short_flags(tmp_path: Path) -> None:
    output = tmp_path / 'out.csv'
    args = cli.parse_args(['-l', '5', '-o', str(output), '-q', 'foo.ofx'])
    assert args.limit == 5
    assert args.output == output
    assert args.quiet


def test_main_prints_tables(statement_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = cli.main([str(statement_file)])
    assert exit_code == 0
    out = capsys.readouterr().out
    assert 'statement.ofx: statement generated 2025-06-04T00:00:00-03:00 from Banco Exemplo' in out
    assert 'Account *****6789 (CHECKING) at bank 0341 [BRL]' in out
    assert out.index('Padaria') < out.index('Salario')
    assert '2000.00' in out


def test_main_limit(statement_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main([str(statement_file), '--limit', '1', '-q']) == 0
    out = capsys.readouterr().out
    assert 'Padaria' in out
    assert 'Salario' not in out


def test_main_writes_csv_stdout(statement_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main([str(statement_file), '--csv', '-q']) == 0
    out = capsys.readouterr().out
    assert out.splitlines()[0] == 'fitid,date,type,amount,name,memo'
    assert 'TX-1,2025-06-02,DEBIT,-100.00,Padaria,Cafe da manha' in out


def test_main_writes_csv_file(statement_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    output = tmp_path / 'exports' / 'out.csv'
    assert cli.main([str(statement_file), '-o', str(output), '-q']) == 0
    assert output.read_text(encoding='utf-8').count('\n') == 3
    assert 'fitid' not in capsys.readouterr().out


def test_main_reports_failures(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    emitted: list[str],
) -> None:
    job = ProcessingJob(source=str(tmp_path / 'gone.ofx'))
    monkeypatch.setattr(cli, 'gather_jobs', lambda _targets: [job])

    def fake_process(failing: ProcessingJob, _settings: object) -> None:
        raise OfxIOError(failing.source, 'No such file or directory')

    monkeypatch.setattr(cli, 'process_job', fake_process)
    assert cli.main(['gone.ofx']) == 1
    assert emitted == [f'Error processing {job.source}: IO error: {job.source}: No such file or directory']


def test_main_reports_version_errors(
    tmp_path: Path,
    make_document: Callable[..., str],
    emitted: list[str],
) -> None:
    target = tmp_path / 'future.ofx'
    target.write_text(make_document(header='OFXHEADER:100\nVERSION:200\n\n'), encoding='utf-8')
    assert cli.main([str(target)]) == 1
    assert any('Invalid OFX version: 200' in message for message in emitted)


def test_main_verbose_lists_diagnostics(statement_file: Path, emitted: list[str]) -> None:
    assert cli.main([str(statement_file), '-v']) == 0
    assert emitted[0] == 'statement.ofx: 2 transactions in 1 statements, accounts 123456789'
    assert any(message.startswith('Diagnostic: [header] Unknown header key: DATA') for message in emitted)


def test_main_quiet_suppresses_summary(statement_file: Path, emitted: list[str]) -> None:
    assert cli.main([str(statement_file), '-q']) == 0
    assert emitted == []


def test_main_reports_unknown_encoding(
    monkeypatch: pytest.MonkeyPatch,
    statement_file: Path,
    emitted: list[str],
) -> None:
    settings = replace(default_settings(), fallback_encoding='no-such-codec')
    monkeypatch.setattr(cli, 'load_settings', lambda _path: settings)
    text = statement_file.read_text(encoding='cp1252').replace('CHARSET:1252', 'CHARSET:NONE')
    statement_file.write_text(text, encoding='ascii')
    assert cli.main([str(statement_file)]) == 1
    assert emitted == [f"Error processing {statement_file}: Unsupported OFX feature: text encoding 'no-such-codec'"]
