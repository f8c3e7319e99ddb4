"""
Public plugin API.

Provides the registry used to select dictionary initializers by name.
"""

from .registry import register, get_registry, create_from_config, list_registered, unregister

__all__ = [
    'register', 'get_registry', 'create_from_config', 'list_registered', 'unregister'
]
