"""Interactive force-directed graph of countries and their shared land borders."""
__version__ = "0.1.0"
