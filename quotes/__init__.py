"""
QUOTES App - Price estimates and quote requests for Courier Express
"""
