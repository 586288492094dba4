"""Placement intent resolution.

resolve() flattens an intent into the clusters addressed by name and the
clusters addressed by label. Nothing is de-duplicated and nothing is looked
up: a label stays a label until expand_labels() is given an inventory.

resolve_groups() keeps the mandatory/optional distinction instead, numbering
each optional member as its own group.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from errors import BackendError, OrchestratorError
from placement.intent import AllOf, AnyOf, IntentSpec

logger = logging.getLogger(__name__)

# (provider, label) -> cluster names carrying that label
LabelLookup = Callable[[str, str], list[str]]


@dataclass
class ClusterWithName:
    provider_name: str
    cluster_name: str

    def to_dict(self) -> dict:
        return {'provider-name': self.provider_name, 'cluster-name': self.cluster_name}


@dataclass
class ClusterWithLabel:
    provider_name: str
    cluster_label: str

    def to_dict(self) -> dict:
        return {'provider-name': self.provider_name, 'cluster-label-name': self.cluster_label}


@dataclass
class ClusterGroup:
    """Optional clusters that belong to one numbered group."""
    optional_clusters: list[ClusterWithName] = field(default_factory=list)
    group_number: str = ''

    def to_dict(self) -> dict:
        return {
            'group-number': self.group_number,
            'optional-clusters': [c.to_dict() for c in self.optional_clusters],
        }


@dataclass
class ClusterList:
    mandatory_clusters: list[ClusterWithName] = field(default_factory=list)
    cluster_groups: list[ClusterGroup] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'mandatory-clusters': [c.to_dict() for c in self.mandatory_clusters],
            'cluster-groups': [g.to_dict() for g in self.cluster_groups],
        }


def _lookup_label(label_lookup: LabelLookup, provider: str, label: str) -> list[str]:
    try:
        return list(label_lookup(provider, label))
    except OrchestratorError as e:
        raise e.with_context(f"Error getting clusters with label {label}")
    except Exception as e:
        raise BackendError(f"Error getting clusters with label {label}: {e}") from e


@dataclass
class ResolvedClusters:
    clusters_by_name: list[ClusterWithName] = field(default_factory=list)
    clusters_by_label: list[ClusterWithLabel] = field(default_factory=list)

    def expand_labels(self, label_lookup: LabelLookup) -> list[ClusterWithName]:
        """Dereference the by-label set against an inventory.

        Returns:
            One (provider, cluster) pair per cluster carrying each label,
            in by-label order
        """
        expanded = []
        for entry in self.clusters_by_label:
            for name in _lookup_label(label_lookup, entry.provider_name, entry.cluster_label):
                expanded.append(ClusterWithName(entry.provider_name, name))
        return expanded

    def to_dict(self) -> dict:
        return {
            'clusters-by-name': [c.to_dict() for c in self.clusters_by_name],
            'clusters-by-label': [c.to_dict() for c in self.clusters_by_label],
        }


class PlacementIntentResolver:
    """Resolves placement intents into cluster sets.

    Args:
        label_lookup: Inventory callable used by resolve_groups() to turn a
            label into cluster names. Without one, label members are left
            out of the groups.
    """

    def __init__(self, label_lookup: Optional[LabelLookup] = None):
        self.label_lookup = label_lookup

    def _fold(self, node: Union[AllOf, AnyOf], result: ResolvedClusters) -> None:
        provider = node.provider_name
        if node.cluster_label_name and not node.cluster_name:
            result.clusters_by_label.append(ClusterWithLabel(provider, node.cluster_label_name))
            logger.debug(f"Added cluster label {provider}/{node.cluster_label_name}")
        elif node.cluster_name and not node.cluster_label_name:
            result.clusters_by_name.append(ClusterWithName(provider, node.cluster_name))
            logger.debug(f"Added cluster {provider}/{node.cluster_name}")
        else:
            logger.debug(
                f"Skipping intent member for provider '{provider}': "
                "needs exactly one of cluster-name and cluster-label-name"
            )

    def resolve(self, all_of: list[AllOf], any_of: list[AnyOf]) -> ResolvedClusters:
        """Flatten an intent into by-name and by-label cluster lists.

        allOf members are folded in order, each followed by its nested anyOf
        members; the top-level anyOf members come last.
        """
        result = ResolvedClusters()
        for member in all_of:
            self._fold(member, result)
            for nested in member.any_of:
                self._fold(nested, result)
        for member in any_of:
            self._fold(member, result)
        return result

    def resolve_intent(self, intent: IntentSpec) -> ResolvedClusters:
        return self.resolve(intent.all_of, intent.any_of)

    def _clusters_for(self, node: Union[AllOf, AnyOf]) -> list[ClusterWithName]:
        resolved = ResolvedClusters()
        self._fold(node, resolved)
        clusters = list(resolved.clusters_by_name)
        if resolved.clusters_by_label:
            if self.label_lookup is None:
                logger.warning(
                    f"No inventory to expand label '{node.cluster_label_name}', leaving it out"
                )
            else:
                clusters.extend(resolved.expand_labels(self.label_lookup))
        return clusters

    def resolve_groups(self, intent: IntentSpec) -> ClusterList:
        """Resolve an intent into mandatory clusters and numbered optional groups.

        Group numbers start at 1 and run across the nested anyOf groups of
        every allOf member and then the top-level anyOf group.

        Raises:
            BackendError: If the label inventory fails
        """
        result = ClusterList()
        index = 0
        for member in intent.all_of:
            result.mandatory_clusters.extend(self._clusters_for(member))
            for nested in member.any_of:
                index += 1
                result.cluster_groups.append(
                    ClusterGroup(self._clusters_for(nested), str(index))
                )
        for member in intent.any_of:
            index += 1
            result.cluster_groups.append(ClusterGroup(self._clusters_for(member), str(index)))
        return result
