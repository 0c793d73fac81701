"""Classification tags and their offset-keyed store."""

from .store import Tag, TagStore

__all__ = ["Tag", "TagStore"]
