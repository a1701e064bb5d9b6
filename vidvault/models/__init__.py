"""
Database Models
"""
from vidvault.models.video import Video

__all__ = ["Video"]
