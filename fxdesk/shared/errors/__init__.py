"""
Exception handlers translating trading and persistence errors
into ``{"error", "detail"}`` JSON responses.
"""
