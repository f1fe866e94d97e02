"""ORM models. Importing this package registers every table on Base.metadata."""

from app.models.residency import Residency
from app.models.user import User

__all__ = ["Residency", "User"]
