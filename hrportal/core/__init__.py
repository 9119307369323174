"""
Core infrastructure: configuration, database, auth, errors, responses
"""
