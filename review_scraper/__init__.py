"""Date-bounded review scraping for G2, Capterra and Trustpilot."""

__version__ = "0.1.0"
