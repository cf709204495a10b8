"""Database models."""

from gallery.models.card import Card

__all__ = [
    "Card",
]
