"""
Cross-cutting concerns shared by the API and the price feed:
error mapping, caller identity, rate limits, response headers, logging.
"""
