"""
GitHub webhook domain: signatures, payloads, branch and message matching
"""
