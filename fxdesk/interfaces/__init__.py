"""
Interfaces layer package.

HTTP routes under ``/api/v1`` plus the price WebSocket and SSE stream.
Requests are validated by Pydantic schemas and handed to use cases.
"""
