"""Command line interface for dreflow."""
