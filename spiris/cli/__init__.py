"""Command-line interface for the Spiris client."""
