"""
Integration Tests Package

End-to-end API flows across users, challenges and submissions, run against
the in-memory tables.

Run with:
    pytest tests/integration/ -v
"""
