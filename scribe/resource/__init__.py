from .library import RESOURCE_TYPES, ResourceLibrary

__all__ = ["RESOURCE_TYPES", "ResourceLibrary"]
