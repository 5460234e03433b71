"""Nightmare command-line interface."""
