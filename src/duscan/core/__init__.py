"""Core scanning and reporting logic."""
