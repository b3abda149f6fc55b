"""
Environment configuration for the Room Chat Server
"""

import os
from typing import Optional

from dotenv import load_dotenv


class Settings:
    """
    Setup environment variables.
        - ADMIN_TOKEN shared admin secret; empty disables admin actions
        - HOST / PORT listen address
        - DATABASE_URL SQLAlchemy async URL of the message store
        - LOG_LEVEL logging level name
    """

    def __init__(
        self,
        admin_token: Optional[str] = None,
        host: Optional[str] = None,
        port: Optional[int] = None,
        database_url: Optional[str] = None,
        log_level: Optional[str] = None,
    ):
        # Load environment variables from the .env file
        load_dotenv()

        self.ADMIN_TOKEN: str = admin_token if admin_token is not None else os.getenv("ADMIN_TOKEN", "")
        self.HOST: str = host or os.getenv("HOST", "0.0.0.0")
        self.PORT: int = port if port is not None else int(os.getenv("PORT", "3000"))
        self.DATABASE_URL: str = database_url or os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./chat.db")
        self.LOG_LEVEL: str = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()
