"""Receipt ledger: receipt expense extraction and running bill statistics."""

__version__ = "0.1.0"
