"""
Domain logic for the storefront. Functions take the Motor database as their
first argument and return raw MongoDB documents.
"""
