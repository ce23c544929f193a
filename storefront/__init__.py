"""
TechTots Storefront - Backend API
"""
__version__ = "1.0.0"
