"""
Starfall Test Suite
===================

Test Organization
-----------------
- tests/unit/          : Fast unit tests against in-memory store fakes
- tests/integration/   : Integration tests with testcontainers (real Redis)

Testing Philosophy
------------------
- Unit tests: fast, isolated, cover game rules and wire shapes
- Integration tests: slower, cover real infrastructure interactions
- Use pytest markers to categorize and selectively run tests
- Follow AAA pattern: Arrange, Act, Assert
"""
