"""classdict - Latin and Greek dictionary headword lookup."""

__version__ = "0.1.0"
