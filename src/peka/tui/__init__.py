"""Textual interface for Peka."""
