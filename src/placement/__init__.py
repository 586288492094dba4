"""Placement intents and their resolution into cluster sets."""

from placement.intent import AllOf, AnyOf, IntentSpec
from placement.resolver import (
    ClusterGroup,
    ClusterList,
    ClusterWithLabel,
    ClusterWithName,
    PlacementIntentResolver,
    ResolvedClusters,
)

__all__ = [
    "AllOf",
    "AnyOf",
    "IntentSpec",
    "ClusterGroup",
    "ClusterList",
    "ClusterWithLabel",
    "ClusterWithName",
    "PlacementIntentResolver",
    "ResolvedClusters",
]
