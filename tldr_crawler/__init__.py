"""
Concurrent one-level web crawler: seed page links -> linked page descriptions.
"""

__version__ = "1.0.0"
