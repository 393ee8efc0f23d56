"""Database utilities and models."""

from weekplan.db.base import Base
from weekplan.db import models  # noqa: F401  (imported for side effects)

__all__ = ["Base"]
