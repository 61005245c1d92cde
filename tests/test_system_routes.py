from __future__ import annotations

import io
import sqlite3
from pathlib import Path

import pytest

import routes.system
from app import create_app
from helpers import add_photo


@pytest.fixture
def client(config):
    app = create_app(config)
    app.config['TESTING'] = True
    return app.test_client()


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("x", encoding="utf-8")
    return path


def test_health_reports_index_stats(client, config):
    add_photo(config.db, "ps1", "a.jpg")

    response = client.get('/api/health')

    assert response.status_code == 200
    data = response.get_json()
    assert data['status'] == 'ok'
    assert data['stats']['total_photos'] == 1


def test_health_reports_unavailable_database(client, config, monkeypatch):
    def broken_stats():
        raise sqlite3.OperationalError("unable to open database file")

    monkeypatch.setattr(config.db, "get_stats", broken_stats)

    response = client.get('/api/health')

    assert response.status_code == 503
    assert response.get_json()['database'] == 'unavailable'


def test_config_never_exposes_admin_password(client, config):
    response = client.get('/api/config')

    data = response.get_json()
    assert data['cache_path'] == config.cache_path
    assert data['admin_password_set'] is True
    assert 'secret123' not in response.get_data(as_text=True)


def test_reset_preview_counts_stage_entries(client, config):
    _touch(Path(config.cache_path) / "thumbnails" / "a.jpg")
    _touch(Path(config.sidecar_path) / "x" / "y" / "a.json")
    _touch(Path(config.sidecar_path) / "b.json")
    _touch(Path(config.sidecar_path) / "c.txt")

    response = client.get('/api/system/reset/preview')

    counts = {stage['name']: stage['count'] for stage in response.get_json()['stages']}
    assert counts == {'cache': 1, 'sidecar_json': 2, 'sidecar_yaml': 0, 'album_yaml': 0}
    assert Path(config.sidecar_path, "b.json").exists()


def test_reset_is_refused_unless_enabled(client, config):
    add_photo(config.db, "ps1", "a.jpg")

    response = client.post('/api/system/reset')

    assert response.status_code == 403
    assert config.db.get_stats()['total_photos'] == 1


def test_reset_recreates_index_only(client, config):
    config.allow_system_reset = True
    add_photo(config.db, "ps1", "a.jpg")
    thumb = _touch(Path(config.cache_path) / "thumbnails" / "a.jpg")

    response = client.post('/api/system/reset')

    assert response.status_code == 200
    data = response.get_json()
    assert list(data['stages']) == ['index']
    assert data['stages']['index']['failed'] == 0
    assert config.db.get_stats()['total_photos'] == 0
    assert config.db.check_admin_password("secret123")
    assert thumb.exists()


def test_reset_reports_database_failure(client, config, monkeypatch):
    config.allow_system_reset = True

    def broken_drop():
        raise sqlite3.OperationalError("database is locked")

    monkeypatch.setattr(config.db, "drop_all", broken_drop)

    response = client.post('/api/system/reset')

    assert response.status_code == 500
    assert 'database is locked' in response.get_json()['error']


def test_reset_keeps_progress_out_of_server_output(client, config, monkeypatch, capsys):
    config.allow_system_reset = True
    calls = []
    real_run_reset = routes.system.run_reset

    def recording_run_reset(conf, request, ask=None, out=None):
        calls.append(out)
        return real_run_reset(conf, request, ask=ask, out=out)

    monkeypatch.setattr(routes.system, "run_reset", recording_run_reset)

    response = client.post('/api/system/reset')

    assert response.status_code == 200
    assert len(calls) == 1
    assert isinstance(calls[0], io.StringIO)
    assert capsys.readouterr().out == ""
