"""Infrastructure layer — credential storage, transport port, file I/O.

This layer depends on stdlib and the domain layer.
It must never import from services, commands, or output.
The service layer bridges between domain models and infrastructure.
"""
