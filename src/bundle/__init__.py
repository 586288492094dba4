"""Bundle manifests and their ordered instantiation and destruction."""

from bundle.lifecycle import BundleLifecycleManager
from bundle.manifest import MANIFEST_FILENAME, BundleManifest, ManifestLoader
from bundle.state import InstantiationState, Stage, StateTransitionError

__all__ = [
    "BundleLifecycleManager",
    "BundleManifest",
    "ManifestLoader",
    "MANIFEST_FILENAME",
    "InstantiationState",
    "Stage",
    "StateTransitionError",
]
