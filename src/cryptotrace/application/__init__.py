"""
Application-level support for cryptotrace.

- errors: exception hierarchy for fatal analysis failures
"""
