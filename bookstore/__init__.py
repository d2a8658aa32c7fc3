"""
Bookstore catalog service.

A REST backend for managing a book catalog, built around a hexagonal core:
domain entities and services, a relational repository adapter, and a
FastAPI delivery layer.
"""

__version__ = "1.0.0"
