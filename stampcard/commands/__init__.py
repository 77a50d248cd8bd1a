"""
CLI Commands for Stampcard.

Usage:
    flask loyalty create-business --name "Kinyozi Cuts" --visits-required 8
    flask loyalty stats --business-id 1            # Dashboard headline stats
    flask loyalty analytics --business-id 1 --json # Trends, top customers, growth
"""
from .loyalty import init_app as init_loyalty_commands


def init_app(app):
    """Register all CLI commands with the Flask app."""
    init_loyalty_commands(app)
