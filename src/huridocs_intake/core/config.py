"""
Runtime configuration read from the environment (and an optional .env file).
"""
import os
import logging
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_MODEL = 'gpt-4o-mini'


def _env_number(name: str, default, cast=int):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw)
    except ValueError:
        logger.warning(f"Invalid value for {name}: {raw!r}, using {default}")
        return default
    if value <= 0:
        logger.warning(f"{name} must be positive, using {default}")
        return default
    return value


@dataclass
class Settings:
    model: str = DEFAULT_MODEL
    cache_dir: Path = field(default_factory=lambda: Path('./.cache'))
    output_dir: Path = field(default_factory=lambda: Path('./reports'))
    request_timeout: float = 60.0
    max_attempts: int = 1
    content_limit: int = 5000
    huridocs_max_tokens: int = 3072
    generic_max_tokens: int = 2048

    @classmethod
    def from_env(cls, env_file: Path = None) -> 'Settings':
        """Build settings from environment variables, loading .env first."""
        load_dotenv(env_file if env_file is not None else Path.cwd() / '.env')

        return cls(
            model=os.getenv('OPENAI_MODEL', DEFAULT_MODEL),
            cache_dir=Path(os.getenv('HRI_CACHE_DIR', './.cache')),
            output_dir=Path(os.getenv('HRI_OUTPUT_DIR', './reports')),
            request_timeout=_env_number('HRI_REQUEST_TIMEOUT', 60.0, float),
            max_attempts=_env_number('HRI_MAX_ATTEMPTS', 1),
            content_limit=_env_number('HRI_CONTENT_LIMIT', 5000),
        )
