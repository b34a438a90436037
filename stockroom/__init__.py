"""stockroom: local inventory tracker.

Keeps a catalog of items (name, quantity, category, unit price) in a JSON
file or SQLite database and changes it through a small set of atomic
operations. Ids are assigned on insert and never reused.

Usage:
    python -m stockroom add "Widget" --qty 10 --price 2.50 -c Hardware
    python -m stockroom adjust 1 -5                # Take 5 out of stock
    python -m stockroom list                       # Show everything
    python -m stockroom summary                    # Totals per category
"""

__version__ = "0.1.0"
