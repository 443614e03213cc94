"""Runtime configuration read from the environment."""
import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    database_url: str = 'sqlite:///tmp/minitwit.db'
    secret_key: str = 'development key'
    hash_method: str = 'scrypt'
    log_level: str = 'INFO'
    host: str = '0.0.0.0'
    port: int = 5000

    @classmethod
    def from_env(cls):
        """Build settings from ``MINITWIT_*`` environment variables."""
        return cls(
            database_url=os.getenv('MINITWIT_DATABASE_URL', cls.database_url),
            secret_key=os.getenv('MINITWIT_SECRET_KEY', cls.secret_key),
            hash_method=os.getenv('MINITWIT_HASH_METHOD', cls.hash_method),
            log_level=os.getenv('MINITWIT_LOG_LEVEL', cls.log_level).upper(),
            host=os.getenv('MINITWIT_HOST', cls.host),
            port=int(os.getenv('MINITWIT_PORT', cls.port)),
        )
