"""
JSON API blueprints for Stampcard.
"""
