"""
Application context: the counters and stores shared by all services.

``AppContext.open`` is the one place where partitions are assigned,
so two stores can never end up sharing a partition.  The application
builds one context at startup and keeps it on ``app.state``; tests
build a fresh one per test on a temporary database file.
"""

import logging
from dataclasses import dataclass

from fastapi import Request

from .db import CELL, MAP, MemoryManager
from .stable import IdCounter, RecordStore
from ..schemas.profile import PROFILE_CODEC, UserProfile
from ..schemas.report import REPORT_CODEC, TrafficReport

logger = logging.getLogger(__name__)

# Fixed partition layout of the database file.
REPORT_COUNTER_PARTITION = 0
USER_COUNTER_PARTITION = 1
REPORT_STORE_PARTITION = 2
USER_STORE_PARTITION = 3


@dataclass
class AppContext:
    memory: MemoryManager
    report_counter: IdCounter
    # Profiles are keyed by the caller-supplied user ID; this counter is
    # allocated so the layout has room for server-issued user IDs.
    user_counter: IdCounter
    reports: RecordStore[TrafficReport]
    profiles: RecordStore[UserProfile]

    @classmethod
    def open(cls, db_path: str) -> "AppContext":
        """Open (creating on first use) every partition in ``db_path``."""
        memory = MemoryManager(db_path)
        context = cls(
            memory=memory,
            report_counter=IdCounter(memory.get(REPORT_COUNTER_PARTITION, CELL)),
            user_counter=IdCounter(memory.get(USER_COUNTER_PARTITION, CELL)),
            reports=RecordStore(memory.get(REPORT_STORE_PARTITION, MAP), REPORT_CODEC),
            profiles=RecordStore(memory.get(USER_STORE_PARTITION, MAP), PROFILE_CODEC),
        )
        logger.info(
            "Storage opened at %s (last report ID %s)", db_path, context.report_counter.get()
        )
        return context


def get_context(request: Request) -> AppContext:
    """FastAPI dependency returning the context built at startup."""
    return request.app.state.context
