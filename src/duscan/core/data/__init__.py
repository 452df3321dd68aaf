"""Data collection modules."""
