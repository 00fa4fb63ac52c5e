"""
Hydianflow GitHub sync service
"""
