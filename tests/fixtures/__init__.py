"""
Test fixtures package.

Factory functions and ledger fakes shared across the test suite.
"""
