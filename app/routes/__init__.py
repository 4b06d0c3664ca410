"""Route modules registered with the shared FunctionApp."""

from . import docs, identifiers, rules  # noqa: F401

__all__ = ["docs", "identifiers", "rules"]
