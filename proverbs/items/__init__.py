"""Single-verse management (admin CRUD)."""

from .service import ItemService

__all__ = ["ItemService"]
