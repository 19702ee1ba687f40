"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
service starts with a local SQLite file and no further setup.  In a
production deployment you should override these via environment
variables.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Traffic Rewards API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # Path to the SQLite file holding every partition (counters and
    # record maps).  A relative path is resolved against the project
    # root by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "traffic_rewards.db")

    # Points credited to the reporter each time a traffic report is
    # submitted.
    report_reward_points: int = int(os.getenv("REPORT_REWARD_POINTS", "10"))

    # Reporter identity used until an authentication layer supplies the
    # real caller.
    default_reporter_id: int = int(os.getenv("DEFAULT_REPORTER_ID", "1"))

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# should be set before importing this module.
settings = Settings()
