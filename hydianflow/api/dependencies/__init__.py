"""
API dependencies
"""
