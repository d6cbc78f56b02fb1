"""Infrastructure layer — database, graph engine, workspace.

This layer depends on stdlib, the domain value types, and third-party libs
(SQLAlchemy, NetworkX, structlog). It must never import from services,
commands, or output.
"""
