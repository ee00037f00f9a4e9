"""
Database utilities and ORM models.
"""

from .models import Analysis, Base, NamedAnalysis  # noqa: F401
from .session import create_engine_from_settings, get_session_maker, init_models  # noqa: F401
