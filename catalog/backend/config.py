"""
Service configuration loaded from environment variables.
A local `.env` file is honoured for development.
"""
import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """
    Connection and runtime settings with defaults suitable for local development.
    """

    def __init__(self):
        # MongoDB
        self.mongo_uri = os.environ.get("MONGO_URI", "mongodb://localhost:27017")
        self.mongo_db_name = os.environ.get("MONGO_DB_NAME", "testdb")
        self.mongo_max_pool_size = int(os.environ.get("MONGO_MAX_POOL_SIZE", 10))
        self.mongo_server_selection_timeout_ms = int(
            os.environ.get("MONGO_SERVER_SELECTION_TIMEOUT_MS", 5000)
        )
        self.mongo_socket_timeout_ms = int(os.environ.get("MONGO_SOCKET_TIMEOUT_MS", 45000))

        # Redis
        self.redis_host = os.environ.get("REDIS_HOST", "localhost")
        self.redis_port = int(os.environ.get("REDIS_PORT", 6379))
        self.redis_password: Optional[str] = os.environ.get("REDIS_PASSWORD") or None
        self.redis_socket_timeout = float(os.environ.get("REDIS_SOCKET_TIMEOUT", 5))
        self.redis_max_retries = int(os.environ.get("REDIS_MAX_RETRIES", 3))

        # Cache / HTTP
        self.cache_ttl_seconds = int(os.environ.get("CACHE_TTL_SECONDS", 3600))
        self.port = int(os.environ.get("PORT", 3000))
        self.log_level = os.environ.get("LOG_LEVEL", "INFO").upper()

    def __repr__(self) -> str:
        return (
            f"Settings("
            f"mongo_db_name={self.mongo_db_name}, "
            f"redis={self.redis_host}:{self.redis_port}, "
            f"cache_ttl_seconds={self.cache_ttl_seconds}, "
            f"port={self.port})"
        )
