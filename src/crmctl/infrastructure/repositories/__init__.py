"""Read-side SQL shared by the services."""

from crmctl.infrastructure.repositories.query import QueryRepository, like_pattern

__all__ = ["QueryRepository", "like_pattern"]
