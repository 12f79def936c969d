"""Database engine and repository for Panel Monitor."""

from panel_monitor.db.engine import close_db, init_db
from panel_monitor.db.repository import Repository

__all__ = ["close_db", "init_db", "Repository"]
