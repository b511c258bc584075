"""Configuration for TeamPad."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

_ENV_PREFIX = "TEAMPAD_"


@dataclass(frozen=True)
class Config:
    """Application configuration."""

    data_dir: Path = field(default_factory=lambda: Path.home() / ".local" / "share" / "teampad")
    backend: str = "local"
    firebase_api_key: str = ""
    min_password_length: int = 6
    banner_seconds: float = 4.0

    @property
    def db_path(self) -> Path:
        return self.data_dir / "storage.db"

    @classmethod
    def from_env(cls, **overrides: object) -> Config:
        """Build a config from ``TEAMPAD_*`` environment variables.

        Explicit keyword overrides win over the environment; ``None`` values
        are ignored so CLI options can be passed through unconditionally.
        """
        values: dict[str, object] = {}
        data_dir = os.environ.get(f"{_ENV_PREFIX}DATA_DIR", "").strip()
        if data_dir:
            values["data_dir"] = Path(data_dir).expanduser()
        backend = os.environ.get(f"{_ENV_PREFIX}BACKEND", "").strip().lower()
        if backend:
            values["backend"] = backend
        api_key = os.environ.get(f"{_ENV_PREFIX}FIREBASE_API_KEY", "").strip()
        if api_key:
            values["firebase_api_key"] = api_key
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)  # type: ignore[arg-type]
