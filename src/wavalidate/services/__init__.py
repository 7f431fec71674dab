"""Service layer — session lifecycle and batch validation.

Services may import from domain and infrastructure layers.
They must never import from commands or output.
"""
