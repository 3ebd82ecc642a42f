from pathlib import Path

import pytest

from ofx_viewer.detect import gather_jobs, is_ofx_file, iter_jobs


def test_is_ofx_file_extensions(tmp_path: Path) -> None:
    assert is_ofx_file(tmp_path / 'statement.ofx')
    assert is_ofx_file(tmp_path / 'statement.QFX')
    assert not is_ofx_file(tmp_path / 'statement.csv')


def test_iter_jobs_directory(tmp_path: Path) -> None:
    first = tmp_path / 'a.ofx'
    first.write_text('data', encoding='utf-8')
    second = tmp_path / 'b.qfx'
    second.write_text('data', encoding='utf-8')
    ignored = tmp_path / 'notes.txt'
    ignored.write_text('ignore', encoding='utf-8')
    (tmp_path / 'nested.ofx').mkdir()

    jobs = list(iter_jobs(str(tmp_path)))
    assert [job.source for job in jobs] == [str(first), str(second)]
    assert jobs[0].name == 'a.ofx'
    assert not jobs[0].is_remote


def test_iter_jobs_url() -> None:
    (job,) = iter_jobs('https://bank.example/export/statement.ofx')
    assert job.is_remote
    assert job.name == 'statement.ofx'


def test_iter_jobs_file_unknown_extension(tmp_path: Path) -> None:
    weird = tmp_path / 'weird.ext'
    weird.write_text('x', encoding='utf-8')

    with pytest.raises(ValueError, match='Unsupported input format'):
        list(iter_jobs(str(weird)))


def test_iter_jobs_missing_path(tmp_path: Path) -> None:
    missing = tmp_path / 'unknown'
    with pytest.raises(FileNotFoundError):
        list(iter_jobs(str(missing)))


def test_gather_jobs_multiple_targets(tmp_path: Path) -> None:
    single = tmp_path / 'first.ofx'
    single.write_text('data', encoding='utf-8')
    folder = tmp_path / 'nested'
    folder.mkdir()
    other = folder / 'second.ofx'
    other.write_text('data', encoding='utf-8')

    jobs = gather_jobs([str(single), str(folder)])
    assert {job.source for job in jobs} == {str(single), str(other)}
