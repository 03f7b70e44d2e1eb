from .walks import WalksRepository
from . import models

__all__ = ["WalksRepository", "models"]
