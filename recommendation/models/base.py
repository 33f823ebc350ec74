# Re-export the main Base class from db.py so the dataset models share
# one metadata with the rest of the app
from db import Base

__all__ = ["Base"]
