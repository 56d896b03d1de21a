"""Cash Book: personal expense, budget and wallet tracker API."""

__version__ = "0.1.0"
