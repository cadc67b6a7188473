"""
Application layer package.

Use cases for quotes, tournaments, positions and funded accounts.
Each use case takes its ports in the constructor and exposes ``execute``.
"""
