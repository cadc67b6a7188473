"""
Infrastructure layer package.

Adapters that connect domain ports to external systems.
"""
