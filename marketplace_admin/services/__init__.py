"""Form state, validation and backend access.

Services hold the decision logic; routes stay thin.
"""
