"""
Database layer
"""
