"""
Test suites package.

Kept importable so unit test modules can share helpers from
``testsuites.conftest``.
"""
