"""automodels - database schema introspection and relationship inference."""

__version__ = "0.1.0"
