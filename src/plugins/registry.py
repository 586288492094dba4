"""Plugin registry: resource-type name -> handler, plus capability dispatch.

The registry is built once at start-up, frozen, and then passed to the
components that need it. It holds no business logic.
"""

import importlib
import importlib.util
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Optional, Union

from errors import (
    CapabilityNotFoundError,
    NotFoundError,
    OrchestratorError,
    PluginInvocationError,
    PluginLoadError,
)
from plugins.base import Capability

if TYPE_CHECKING:
    from config import OrchestratorConfig

logger = logging.getLogger(__name__)


@dataclass
class PluginHandle:
    """A loaded resource-type handler.

    Attributes:
        name: Resource-type name the handler is registered under
        handler: Module or object exposing capability callables
        source: Where the handler was loaded from (for diagnostics)
    """
    name: str
    handler: Any
    source: str = ''

    def capability(self, capability: Union[Capability, str]) -> Optional[Callable]:
        """Resolve a capability callable, or None if absent."""
        attr = capability.value if isinstance(capability, Capability) else capability
        fn = getattr(self.handler, attr, None)
        return fn if callable(fn) else None

    def missing_capabilities(self) -> list[str]:
        return [c.value for c in Capability if self.capability(c) is None]


@dataclass
class PluginRegistry:
    """Maps resource-type names to plugin handles."""
    _plugins: dict[str, PluginHandle] = field(default_factory=dict, init=False, repr=False)
    _frozen: bool = field(default=False, init=False)

    @classmethod
    def with_builtins(cls) -> 'PluginRegistry':
        """Registry with the built-in namespace, deployment, service and network handlers."""
        from plugins import deployment, namespace, service
        from plugins.network import NetworkPlugin

        registry = cls()
        registry.register('namespace', namespace, source=namespace.__name__)
        registry.register('deployment', deployment, source=deployment.__name__)
        registry.register('service', service, source=service.__name__)
        registry.register('network', NetworkPlugin.with_builtins(), source='plugins.network')
        return registry

    @classmethod
    def from_config(cls, config: 'OrchestratorConfig') -> 'PluginRegistry':
        """Built-ins plus config.plugins_dir, frozen."""
        registry = cls.with_builtins()
        if config.plugins_dir is not None:
            registry.load_directory(config.plugins_dir)
        registry.freeze()
        return registry

    def _check_writable(self, name: str) -> None:
        if self._frozen:
            raise PluginLoadError(f"Cannot register '{name}': plugin registry is frozen")

    def register(self, name: str, handler: Any, source: str = '') -> PluginHandle:
        """Register an already-imported handler under name."""
        self._check_writable(name)
        handle = PluginHandle(name=name, handler=handler, source=source or repr(handler))
        if missing := handle.missing_capabilities():
            logger.warning(f"Plugin '{name}' is missing capabilities: {', '.join(missing)}")
        if name in self._plugins:
            logger.warning(f"Replacing plugin '{name}' ({self._plugins[name].source})")
        self._plugins[name] = handle
        logger.debug(f"Registered plugin '{name}' from {handle.source}")
        return handle

    def load(self, name: str, module_path: Union[str, Path]) -> PluginHandle:
        """Load a handler module and register it under name.

        Args:
            name: Resource-type name (e.g. 'deployment')
            module_path: Path to a .py file, or a dotted module name

        Raises:
            PluginLoadError: If the module cannot be loaded or the registry is frozen
        """
        self._check_writable(name)
        path = Path(module_path)
        try:
            if path.suffix == '.py':
                if not path.is_file():
                    raise PluginLoadError(f"Plugin file not found: {path}")
                spec = importlib.util.spec_from_file_location(f'kubebundle_plugin_{name}', path)
                if spec is None or spec.loader is None:
                    raise PluginLoadError(f"Cannot load plugin from {path}")
                module = importlib.util.module_from_spec(spec)
                spec.loader.exec_module(module)
            else:
                module = importlib.import_module(str(module_path))
        except PluginLoadError:
            raise
        except Exception as e:
            raise PluginLoadError(f"Error loading plugin '{name}' from {module_path}: {e}") from e

        return self.register(name, module, source=str(module_path))

    def load_directory(self, directory: Union[str, Path]) -> list[str]:
        """Load every *.py file in directory, registered under its file stem.

        Returns:
            Names loaded, in sorted order
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise PluginLoadError(f"Plugins directory not found: {directory}")
        loaded = []
        for path in sorted(directory.glob('*.py')):
            if path.name.startswith('_'):
                continue
            self.load(path.stem, path)
            loaded.append(path.stem)
        logger.info(f"Loaded {len(loaded)} plugin(s) from {directory}")
        return loaded

    def freeze(self) -> None:
        """Make the registry read-only."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def lookup(self, name: str) -> Optional[PluginHandle]:
        return self._plugins.get(name)

    def require(self, name: str) -> PluginHandle:
        """Lookup that fails for unregistered resource types.

        Raises:
            NotFoundError: If no plugin is registered under name
        """
        handle = self._plugins.get(name)
        if handle is None:
            raise NotFoundError(f"No plugin for resource {name} found")
        return handle

    def names(self) -> list[str]:
        return sorted(self._plugins)

    def __contains__(self, name: str) -> bool:
        return name in self._plugins

    def invoke(self, handle: PluginHandle, capability: Union[Capability, str], *args: Any) -> Any:
        """Call a capability on a handle.

        OrchestratorError subclasses raised by the plugin keep their class and
        gain '<type> <capability>' context; other exceptions are wrapped in
        PluginInvocationError.

        Raises:
            CapabilityNotFoundError: If the handle lacks the capability
        """
        cap_name = capability.value if isinstance(capability, Capability) else capability
        fn = handle.capability(cap_name)
        if fn is None:
            raise CapabilityNotFoundError(handle.name, cap_name)
        try:
            return fn(*args)
        except OrchestratorError as e:
            raise e.with_context(f"{handle.name} {cap_name}")
        except Exception as e:
            raise PluginInvocationError(handle.name, cap_name, e) from e
