#!/usr/bin/env python3
"""
Test suite for filmlog/importer.py — end-to-end runs against an in-memory vault
"""

import pytest
import sys
from pathlib import Path
from unittest.mock import MagicMock

sys.path.insert(0, str(Path(__file__).parent.parent))

from filmlog.csv_parser import FormatError
from filmlog.frontmatter import split_frontmatter
from filmlog.importer import DiaryImporter, ImportSummary, run_import
from filmlog.settings import ImportSettings, MissingConfigError
from filmlog.vault import InMemoryVault

POSTER = 'https://image.tmdb.org/t/p/w185/heat.jpg'


@pytest.fixture
def settings():
    return ImportSettings(tmdb_api_key='dummy_key', output_folder='Movies')


@pytest.fixture
def tmdb():
    client = MagicMock()
    client.get_poster_url.return_value = POSTER
    return client


@pytest.fixture
def vault():
    return InMemoryVault()


def run(csv_text, settings, vault, tmdb, progress=None):
    return DiaryImporter(settings, vault, tmdb=tmdb, progress=progress).run(csv_text)


class TestEndToEnd:
    """Full import of a small diary"""

    def test_heat_example(self, settings, vault, tmdb):
        summary = run('Name,Year,Watched Date,Rating\n"Heat",1995,2024-01-01,5', settings, vault, tmdb)

        assert (summary.created, summary.updated, summary.skipped, summary.total) == (1, 0, 0, 1)
        text = vault.read('Movies/Heat (1995).md')
        assert 'watches: 1' in text
        assert "Rating: '5'" in text
        assert '## Watch History' in text
        assert '### 2024-01-01' in text
        assert '**Rating:** 5' in text
        assert f"poster: '{POSTER}'" in text
        tmdb.get_poster_url.assert_called_once_with('Heat')

    def test_output_folder_created(self, settings, vault, tmdb):
        run('Name\nHeat', settings, vault, tmdb)
        assert 'Movies' in vault.folders

    def test_tags_from_settings(self, vault, tmdb):
        settings = ImportSettings(tmdb_api_key='k', output_folder='Movies', tags='movie, watched')
        run('Name\nHeat', settings, vault, tmdb)
        data, _ = split_frontmatter(vault.read('Movies/Heat.md'))
        assert data['tags'] == ['movie', 'watched']

    def test_no_poster_found(self, settings, vault, tmdb):
        tmdb.get_poster_url.return_value = ''
        run('Name\nHeat', settings, vault, tmdb)
        assert 'poster' not in vault.read('Movies/Heat.md')

    def test_vault_root_output(self, vault, tmdb):
        settings = ImportSettings(tmdb_api_key='k', output_folder='')
        run('Name\nHeat', settings, vault, tmdb)
        assert vault.exists('Heat.md')

    def test_run_import_wrapper(self, settings, vault, tmdb):
        summary = run_import('Name\nHeat\nAlien', settings, vault, tmdb=tmdb)
        assert isinstance(summary, ImportSummary)
        assert summary.created == 2


class TestDuplicatePolicies:
    """Re-imports against documents written by earlier runs"""

    DIARY = 'Name,Year,Watched Date,Rating\nHeat,1995,2024-01-01,5\n'

    def test_append_same_date_twice(self, settings, vault, tmdb):
        run(self.DIARY, settings, vault, tmdb)
        first = vault.read('Movies/Heat (1995).md')

        summary = run(self.DIARY, settings, vault, tmdb)

        assert (summary.created, summary.updated, summary.skipped) == (0, 0, 1)
        text = vault.read('Movies/Heat (1995).md')
        assert text == first
        assert text.count('### 2024-01-01') == 1
        assert 'watches: 1' in text

    def test_append_two_dates(self, settings, vault, tmdb):
        run(self.DIARY, settings, vault, tmdb)
        summary = run('Name,Year,Watched Date,Rating\nHeat,1995,2024-06-01,4\n', settings, vault, tmdb)

        assert summary.updated == 1
        text = vault.read('Movies/Heat (1995).md')
        assert text.count('### ') == 2
        assert 'watches: 2' in text

    def test_rewatch_within_one_file(self, settings, vault, tmdb):
        diary = (
            'Name,Year,Watched Date\n'
            'Heat,1995,2024-01-01\n'
            'Heat,1995,2024-06-01\n'
            'Heat,1995,2024-06-01\n'
        )
        summary = run(diary, settings, vault, tmdb)
        assert (summary.created, summary.updated, summary.skipped) == (1, 1, 1)
        assert 'watches: 2' in vault.read('Movies/Heat (1995).md')

    def test_same_title_different_year_is_separate(self, settings, vault, tmdb):
        summary = run('Name,Year\nScarface,1932\nScarface,1983', settings, vault, tmdb)
        assert summary.created == 2
        assert vault.exists('Movies/Scarface (1932).md')
        assert vault.exists('Movies/Scarface (1983).md')

    def test_update_policy(self, settings, vault, tmdb):
        run(self.DIARY, settings, vault, tmdb)
        history = vault.read('Movies/Heat (1995).md').split('## Watch History', 1)[1]

        settings.duplicate_handling = 'update'
        summary = run('Name,Year,Watched Date,Rating\nHeat,1995,2024-06-01,2\n', settings, vault, tmdb)

        assert summary.updated == 1
        text = vault.read('Movies/Heat (1995).md')
        data, _ = split_frontmatter(text)
        assert data['Rating'] == '2'
        assert data['watches'] == 2
        assert text.endswith('## Watch History' + history)

    def test_skip_policy(self, settings, vault, tmdb):
        run(self.DIARY, settings, vault, tmdb)
        before = dict(vault.documents)
        writes = vault.writes

        settings.duplicate_handling = 'skip'
        summary = run('Name,Year,Watched Date\nHeat,1995,2024-06-01\n', settings, vault, tmdb)

        assert (summary.created, summary.updated, summary.skipped) == (0, 0, 1)
        assert vault.documents == before
        assert vault.writes == writes

    def test_existing_note_without_front_matter_is_skipped(self, settings, tmdb):
        vault = InMemoryVault({'Movies/Heat (1995).md': '# Heat\n\nHand-written note.\n'})
        summary = run(self.DIARY, settings, vault, tmdb)

        assert summary.skipped == 1
        assert summary.error is None
        assert vault.read('Movies/Heat (1995).md') == '# Heat\n\nHand-written note.\n'


class TestRowHandling:

    def test_row_without_title_skipped(self, settings, vault, tmdb):
        summary = run('Name,Rating\n,5\nHeat,4', settings, vault, tmdb)
        assert (summary.created, summary.skipped, summary.total) == (1, 1, 2)
        assert tmdb.get_poster_url.call_count == 1

    def test_malformed_row_not_counted(self, settings, vault, tmdb):
        summary = run('Name,Year\nHeat,1995\nBroken\nAlien,1979', settings, vault, tmdb)
        assert summary.total == 2
        assert summary.created == 2

    def test_filename_sanitized(self, settings, vault, tmdb):
        run('Name,Year\n"Mission: Impossible",1996', settings, vault, tmdb)
        assert vault.exists('Movies/Mission- Impossible (1996).md')

    def test_title_whitespace_trimmed_for_lookup(self, settings, vault, tmdb):
        run('Name\n"  Heat  "', settings, vault, tmdb)
        tmdb.get_poster_url.assert_called_once_with('Heat')


class TestProgress:

    def test_progress_every_ten(self, settings, vault, tmdb):
        calls = []
        diary = 'Name\n' + '\n'.join(f'Film {n}' for n in range(25))
        run(diary, settings, vault, tmdb, progress=lambda done, total: calls.append((done, total)))
        assert calls == [(10, 25), (20, 25)]

    def test_skips_do_not_trigger_progress(self, settings, vault, tmdb):
        calls = []
        diary = 'Name,Rating\n' + '\n'.join(',1' for _ in range(12))
        run(diary, settings, vault, tmdb, progress=lambda done, total: calls.append(done))
        assert calls == []


class TestFailures:
    """Run-level errors"""

    def test_missing_api_key(self, vault, tmdb):
        settings = ImportSettings(tmdb_api_key='')
        with pytest.raises(MissingConfigError):
            run('Name\nHeat', settings, vault, tmdb)
        assert vault.documents == {}
        assert vault.folders == set()
        tmdb.get_poster_url.assert_not_called()

    def test_header_only(self, settings, vault, tmdb):
        with pytest.raises(FormatError):
            run('Name,Year\n', settings, vault, tmdb)
        assert vault.documents == {}

    def test_storage_failure_keeps_partial_progress(self, settings, tmdb):
        vault = InMemoryVault()
        original_create = vault.create

        def flaky_create(path, text):
            if 'Alien' in path:
                raise OSError('disk full')
            original_create(path, text)

        vault.create = flaky_create
        summary = run('Name\nHeat\nAlien\nBrazil', settings, vault, tmdb)

        assert summary.error == 'disk full'
        assert summary.created == 1
        assert vault.exists('Movies/Heat.md')
        assert not vault.exists('Movies/Brazil.md')
        assert 'Import stopped' in summary.message()

    def test_summary_message(self):
        summary = ImportSummary(created=3, updated=2, skipped=1, total=6)
        assert summary.message() == 'Import complete! Created: 3, Updated: 2, Skipped: 1'
