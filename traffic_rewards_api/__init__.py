"""
Top-level package for the Traffic Rewards API.

All functionality lives in submodules under ``app``; run the server
with ``uvicorn traffic_rewards_api.app.main:app`` or ``python run.py``.
"""

__all__ = []
