"""
Campaign pricing engine.

Derives time-bounded campaign prices for catalog items from prioritized
discount rules and keeps an append-only audit trail of every change.
"""

__version__ = "1.0.0"
