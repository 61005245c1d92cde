"""
Shared configuration for the gallery maintenance tools
Read from environment variables and passed explicitly to every component
"""

import os
from dataclasses import dataclass
from typing import Dict, Optional

from database import Database

TRUE_VALUES = {'1', 'true', 'yes', 'on'}


@dataclass
class Config:
    """Paths and credentials of one gallery data store"""

    data_dir: str
    database_path: str
    cache_path: str
    sidecar_path: str
    albums_path: str
    admin_password: str = ''
    allow_system_reset: bool = False

    def __post_init__(self):
        self._db: Optional[Database] = None

    @classmethod
    def from_env(cls, environ: Dict[str, str] = None) -> 'Config':
        """Build configuration from environment variables (with defaults relative to DATA_DIR)"""
        env = os.environ if environ is None else environ

        data_dir = os.path.abspath(env.get('DATA_DIR', 'data'))

        return cls(
            data_dir=data_dir,
            database_path=os.path.abspath(env.get('DATABASE_PATH', os.path.join(data_dir, 'gallery.db'))),
            cache_path=os.path.abspath(env.get('CACHE_DIR', os.path.join(data_dir, 'cache'))),
            sidecar_path=os.path.abspath(env.get('SIDECAR_DIR', os.path.join(data_dir, 'sidecar'))),
            albums_path=os.path.abspath(env.get('ALBUMS_DIR', os.path.join(data_dir, 'albums'))),
            admin_password=env.get('ADMIN_PASSWORD', ''),
            allow_system_reset=env.get('ALLOW_SYSTEM_RESET', 'false').strip().lower() in TRUE_VALUES,
        )

    def init(self) -> Database:
        """Create the data directories and open the index database"""
        for directory in [self.data_dir, self.cache_path, self.sidecar_path, self.albums_path,
                          os.path.dirname(self.database_path)]:
            os.makedirs(directory, exist_ok=True)

        self._db = Database(self.database_path)
        return self._db

    def shutdown(self):
        self._db = None

    @property
    def db(self) -> Database:
        if self._db is None:
            raise RuntimeError("configuration not initialized, call init() first")
        return self._db

    def public_dict(self) -> Dict:
        """Paths safe to expose over the API (no credentials)"""
        return {
            'data_dir': self.data_dir,
            'database_path': self.database_path,
            'cache_path': self.cache_path,
            'sidecar_path': self.sidecar_path,
            'albums_path': self.albums_path,
            'admin_password_set': bool(self.admin_password),
            'allow_system_reset': self.allow_system_reset,
        }
