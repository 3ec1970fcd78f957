"""too - a hierarchical todo list kept in a single JSON file."""

__version__ = "0.4.0"
