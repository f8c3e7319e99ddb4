"""
Plugin registry for pluggable dictionary learning components.

Initializers register themselves under a name so that configuration files and
the command line can select them without importing the implementing class.
"""

from typing import Dict, Any, Type, Callable, Union, Optional, List
import inspect
import warnings

# Global registry storage
_REGISTRY: Dict[str, Dict[str, Any]] = {
    "initializer": {},
}

VALID_KINDS = {"initializer"}


def register(kind: str, name: str, *, override: bool = False):
    """
    Register a component in the plugin system.

    Args:
        kind: Component type ('initializer')
        name: Unique name within the kind
        override: Whether to allow overriding existing registrations silently

    Returns:
        Decorator returning the original class/function

    Examples:
        @register("initializer", "random")
        class RandomInitializer: ...
    """
    if kind not in VALID_KINDS:
        raise ValueError(f"Invalid kind '{kind}'. Must be one of: {VALID_KINDS}")

    def decorator(cls_or_fn: Union[Type, Callable]) -> Union[Type, Callable]:
        if name in _REGISTRY[kind] and not override:
            existing = _REGISTRY[kind][name]
            if existing is not cls_or_fn:
                warnings.warn(
                    f"Overriding existing {kind} '{name}': {existing} -> {cls_or_fn}. "
                    f"Use override=True to suppress this warning."
                )

        _validate_component(cls_or_fn, kind)

        _REGISTRY[kind][name] = cls_or_fn
        return cls_or_fn

    return decorator


def get_registry(kind: str, name: str) -> Any:
    """
    Get registered component by kind and name.

    Raises:
        KeyError: If component not found
        ValueError: If kind invalid
    """
    if kind not in VALID_KINDS:
        raise ValueError(f"Invalid kind '{kind}'. Must be one of: {VALID_KINDS}")

    if name not in _REGISTRY[kind]:
        available = sorted(_REGISTRY[kind].keys())
        raise KeyError(
            f"No {kind} named '{name}' found. Available: {available}"
        )

    return _REGISTRY[kind][name]


def list_registered(kind: Optional[str] = None) -> Union[Dict[str, List[str]], List[str]]:
    """
    List all registered components.

    Args:
        kind: Specific kind to list, or None for all

    Returns:
        Dict mapping kinds to component names, or list of names for specific kind
    """
    if kind is None:
        return {k: sorted(v.keys()) for k, v in _REGISTRY.items()}

    if kind not in VALID_KINDS:
        raise ValueError(f"Invalid kind '{kind}'. Must be one of: {VALID_KINDS}")

    return sorted(_REGISTRY[kind].keys())


def create_from_config(config: Dict[str, Any]) -> Any:
    """
    Create component instance from configuration.

    Args:
        config: Configuration dict with 'kind', 'name', and optional 'params'

    Example:
        config = {
            'kind': 'initializer',
            'name': 'fixed',
            'params': {'dictionary': D}
        }
        initializer = create_from_config(config)
    """
    required_keys = {'kind', 'name'}
    if not required_keys.issubset(config.keys()):
        missing = required_keys - config.keys()
        raise ValueError(f"Config missing required keys: {missing}")

    kind = config['kind']
    name = config['name']
    params = config.get('params', {})

    component_cls = get_registry(kind, name)

    try:
        return component_cls(**params)
    except TypeError as e:
        raise TypeError(
            f"Failed to instantiate {kind} '{name}' with params {params}: {e}"
        ) from e


def unregister(kind: str, name: str) -> bool:
    """Remove component from registry. Returns True if it was registered."""
    if kind not in VALID_KINDS:
        raise ValueError(f"Invalid kind '{kind}'. Must be one of: {VALID_KINDS}")

    if name in _REGISTRY[kind]:
        del _REGISTRY[kind][name]
        return True
    return False


def _validate_component(component: Any, kind: str) -> None:
    """Warn when a component lacks the methods its protocol requires."""
    from ..core.interfaces import DictionaryInitializer

    protocol_map = {
        'initializer': DictionaryInitializer,
    }

    protocol = protocol_map[kind]

    required_methods = [
        name for name, obj in inspect.getmembers(protocol)
        if not name.startswith('_') and callable(obj)
    ]

    missing_methods = [m for m in required_methods if not hasattr(component, m)]

    if missing_methods:
        warnings.warn(
            f"{kind.title()} '{component}' may not implement required methods: {missing_methods}. "
            f"This may cause runtime errors."
        )

