"""rcc: a small calculator and Unix timestamp helper for the command line.

Evaluates arithmetic expressions and converts Unix timestamps between
timezones and human-readable local time.

Usage:
    rcc "13 + 14 * 2"                    # Evaluate an expression
    rcc ctz 1700000000 America/New_York  # Timestamp in a timezone
    rcc ctr 1700000000                   # Timestamp in local time
    rcc ct                               # Current Unix timestamp
"""

__version__ = "0.0.2"
