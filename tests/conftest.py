from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
for path in (ROOT, ROOT / "tests"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from shared import Config  # noqa: E402


@pytest.fixture
def config(tmp_path):
    """Initialized configuration with every path below tmp_path"""
    conf = Config.from_env({
        'DATA_DIR': str(tmp_path / 'data'),
        'ADMIN_PASSWORD': 'secret123',
    })
    conf.init()
    yield conf
    conf.shutdown()
