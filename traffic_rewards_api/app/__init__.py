"""
Application package initializer.

The API lives in ``api/v1``, business logic in ``services``, payload
and record models in ``schemas`` and storage plus configuration in
``core``.
"""

from .main import app, create_app  # noqa: F401
