from .containers import ContainerService

__all__ = ["ContainerService"]
