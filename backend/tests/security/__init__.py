"""
Security tests for the bookmark API.

Covers cross-user access (IDOR) and hostile input. Run with the rest of
the suite so regressions fail CI.
"""
