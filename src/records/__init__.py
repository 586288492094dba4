"""Metadata records kept in the KeyedStore."""

from records.base import RecordClient
from records.connectivity import Connectivity, ConnectivityClient, ConnectivityKey
from records.definition import (
    BundleDefinition,
    BundleDefinitionClient,
    BundleDefinitionKey,
    validate_archive,
)
from records.instance import Instance, InstanceClient, InstanceKey
from records.project import Project, ProjectClient, ProjectKey
from records.vnfd import VNFDefinition, VNFDefinitionClient, VNFDefinitionKey

__all__ = [
    "RecordClient",
    "Connectivity",
    "ConnectivityClient",
    "ConnectivityKey",
    "BundleDefinition",
    "BundleDefinitionClient",
    "BundleDefinitionKey",
    "validate_archive",
    "Instance",
    "InstanceClient",
    "InstanceKey",
    "Project",
    "ProjectClient",
    "ProjectKey",
    "VNFDefinition",
    "VNFDefinitionClient",
    "VNFDefinitionKey",
]
