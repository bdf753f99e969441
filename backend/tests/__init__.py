"""
Pytest test suite for the SuiFlow payment backend.
"""
