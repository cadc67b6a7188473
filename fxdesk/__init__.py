"""
FXDesk: forex trading dashboard backend.

Application package root. This is a modular monolith using
hexagonal architecture (ports & adapters).

Bounded contexts:
    - trading: Currency-pair quotes, tournaments, positions, funded accounts.

Layers:
    - domain: Pure business logic, entities, ports (ABCs), errors.
    - application: Use cases, DTOs, orchestration.
    - infrastructure: Adapters (SQL persistence) implementing domain ports.
    - interfaces: FastAPI routers, Pydantic schemas.
    - realtime: Price feed scheduler and subscriber broadcast channel.
    - shared: Cross-cutting concerns (errors, security, logging).
"""

__version__ = "0.1.0"
