"""Bundle lifecycle: ordered creation and destruction of a bundle's resources.

Instantiation walks the manifest in order, one resource type at a time and
one file at a time, dispatching each file to the plugin registered for its
type. It is not transactional: the first failure aborts, and resources
created before it stay live unless rollback_on_failure is set. The error
raised carries the partial resource map either way.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from bundle.manifest import BundleManifest, ManifestLoader
from bundle.state import InstantiationState, Stage
from common import ResourceRequest, generate_external_id, internal_vnf_id
from config import OrchestratorConfig
from errors import OrchestratorError, PartialInstantiationError
from plugins.base import Capability
from plugins.registry import PluginRegistry

logger = logging.getLogger(__name__)

NAMESPACE_PLUGIN = 'namespace'


def _copy_resources(resources: dict[str, list[str]]) -> dict[str, list[str]]:
    return {rtype: list(names) for rtype, names in resources.items()}


@dataclass
class BundleLifecycleManager:
    """Instantiates and destroys bundles through the plugin registry.

    Attributes:
        registry: Resource-type plugins (populated and frozen at start-up)
        loader: Manifest loader for the CSAR directory
        rollback_on_failure: Destroy the partial resource map when creation fails
        list_limit: Default limit for list_resources()
        last_state: State of the most recent instantiate() call
    """
    registry: PluginRegistry
    loader: ManifestLoader
    rollback_on_failure: bool = False
    list_limit: int = 10
    last_state: Optional[InstantiationState] = field(default=None, init=False)

    @classmethod
    def from_config(cls, config: OrchestratorConfig, registry: PluginRegistry) -> 'BundleLifecycleManager':
        return cls(
            registry=registry,
            loader=ManifestLoader(config.csar_dir),
            rollback_on_failure=config.rollback_on_failure,
            list_limit=config.list_limit,
        )

    def instantiate(
        self,
        bundle_id: str,
        cloud_region_id: str,
        namespace: str,
        client: Any,
    ) -> tuple[str, dict[str, list[str]]]:
        """Create every resource listed in a bundle's manifest.

        Args:
            bundle_id: Bundle directory name under the CSAR directory
            cloud_region_id: Cloud region, part of the internal VNF ID
            namespace: Target namespace (created if absent)
            client: Kubernetes client handed to plugins

        Returns:
            (external VNF ID, resource type -> created names)

        Raises:
            OrchestratorError: The first failure, with partial_resources set
            PartialInstantiationError: If rollback was enabled and failed too
        """
        state = InstantiationState(bundle_id, cloud_region_id, namespace)
        self.last_state = state

        try:
            state.advance(Stage.NAMESPACE_ENSURING)
            self._ensure_namespace(namespace, client)

            state.external_id = generate_external_id()
            state.internal_id = internal_vnf_id(cloud_region_id, namespace, state.external_id)

            state.advance(Stage.MANIFEST_LOADING)
            manifest = self.loader.load(bundle_id)

            self._create_resources(manifest, state, namespace, client)
            state.advance(Stage.COMPLETED)
        except Exception as e:
            state.fail(str(e))
            logger.error(f"Instantiation of bundle '{bundle_id}' failed: {e}")
            self._handle_failure(e, state, namespace, client)
            if isinstance(e, OrchestratorError):
                e.with_context(f"instantiate {bundle_id}")
            raise

        logger.info(
            f"Bundle '{bundle_id}' instantiated as {state.internal_id} "
            f"({sum(len(v) for v in state.resources.values())} resources)"
        )
        return state.external_id, _copy_resources(state.resources)

    def _ensure_namespace(self, namespace: str, client: Any) -> None:
        handle = self.registry.require(NAMESPACE_PLUGIN)
        present = self.registry.invoke(handle, Capability.GET, namespace, namespace, client)
        if not present:
            logger.info(f"Creating namespace {namespace}")
            self.registry.invoke(handle, Capability.CREATE, ResourceRequest(namespace=namespace), client)

    def _create_resources(self, manifest: BundleManifest, state: InstantiationState,
                          namespace: str, client: Any) -> None:
        for resource_type in manifest.resource_types:
            # All files of a type are checked before any of them is created
            manifest.check_files(resource_type)
            handle = self.registry.require(resource_type)
            state.resources.setdefault(resource_type, [])

            for index, path in enumerate(manifest.files_for(resource_type)):
                state.advance(Stage.RESOURCE_CREATING, resource_type, index)
                logger.info(f"Processing file: {path}")
                request = ResourceRequest(
                    yaml_file_path=path,
                    namespace=namespace,
                    internal_vnf_id=state.internal_id or '',
                )
                name = self.registry.invoke(handle, Capability.CREATE, request, client)
                state.record(resource_type, name)

    def _handle_failure(self, error: Exception, state: InstantiationState,
                        namespace: str, client: Any) -> None:
        """Attach the partial map to error, or compensate when rollback is on."""
        partial = _copy_resources(state.resources)
        if self.rollback_on_failure and any(partial.values()):
            logger.info(f"Rolling back {sum(len(v) for v in partial.values())} created resources")
            try:
                self.destroy(partial, namespace, client)
            except Exception as cleanup_error:
                remaining = getattr(cleanup_error, 'remaining_resources', None) or partial
                raise PartialInstantiationError(error, remaining) from cleanup_error
            partial = {}
        if isinstance(error, OrchestratorError):
            error.partial_resources = partial

    def destroy(self, resources: dict[str, list[str]], namespace: str, client: Any) -> None:
        """Delete every resource in a map produced by instantiate().

        Raises:
            OrchestratorError: The first failure, with remaining_resources set
                to the names not deleted (the failing one included)
        """
        remaining = _copy_resources(resources)
        for resource_type, names in resources.items():
            try:
                handle = self.registry.require(resource_type)
                for name in names:
                    logger.info(f"Deleting resource: {name}")
                    self.registry.invoke(handle, Capability.DELETE, name, namespace, client)
                    remaining[resource_type].pop(0)
            except OrchestratorError as e:
                e.remaining_resources = {k: v for k, v in remaining.items() if v}
                logger.error(f"Destroy aborted at resource type '{resource_type}': {e}")
                raise e.with_context(f"destroy {resource_type}")
            del remaining[resource_type]

    def list_resources(self, resource_type: str, namespace: str, client: Any,
                       limit: Optional[int] = None) -> list[str]:
        handle = self.registry.require(resource_type)
        if limit is None:
            limit = self.list_limit
        return self.registry.invoke(handle, Capability.LIST, limit, namespace, client)

    def get_resource(self, resource_type: str, name: str, namespace: str, client: Any) -> Optional[str]:
        handle = self.registry.require(resource_type)
        return self.registry.invoke(handle, Capability.GET, name, namespace, client)

    def validate(self, bundle_id: str) -> list[str]:
        """Check a bundle without touching any cluster.

        Returns:
            Error messages (empty if the bundle is valid)
        """
        try:
            manifest = self.loader.load(bundle_id)
        except OrchestratorError as e:
            return [str(e)]

        errors = []
        for resource_type, path in manifest.missing_files():
            errors.append(f"File {path} for resource type '{resource_type}' does not exist")
        for resource_type in manifest.resource_types:
            if resource_type not in self.registry:
                errors.append(f"No plugin for resource {resource_type} found")
        return errors
