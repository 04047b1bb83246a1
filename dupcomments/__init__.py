"""Find duplicate comments on the same post and move older copies to the trash."""

__version__ = "1.1.0"
