"""Step definitions package for BDD tests.

This package contains modular step definitions organized by functionality.
All modules are registered as plugins by the root conftest.py so pytest-bdd
can discover them.
"""
