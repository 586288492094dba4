"""Placement intent types.

Wire form (JSON or YAML):

    allOf:
      - provider-name: p1
        cluster-name: c1
      - provider-name: p1
        cluster-label-name: edge
        anyOf:
          - provider-name: p2
            cluster-name: c9
    anyOf:
      - provider-name: p3
        cluster-label-name: east

Every member carries a provider and either a cluster name or a cluster
label. A member with both or neither is kept here and skipped by the
resolver.
"""

from dataclasses import dataclass, field
from typing import Any

from errors import InvalidIntentError


def _member_fields(data: Any, where: str) -> dict[str, str]:
    if not isinstance(data, dict):
        raise InvalidIntentError(f"{where} must be a mapping")
    values = {}
    for wire, attr in (('provider-name', 'provider_name'),
                       ('cluster-name', 'cluster_name'),
                       ('cluster-label-name', 'cluster_label_name')):
        value = data.get(wire) or ''
        if not isinstance(value, str):
            raise InvalidIntentError(f"{where}.{wire} must be a string")
        values[attr] = value
    return values


def _group(data: Any, key: str, where: str) -> list:
    raw = data.get(key)
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise InvalidIntentError(f"{where}{key} must be a list")
    return raw


@dataclass
class AnyOf:
    provider_name: str = ''
    cluster_name: str = ''
    cluster_label_name: str = ''

    def to_dict(self) -> dict:
        d = {}
        if self.provider_name:
            d['provider-name'] = self.provider_name
        if self.cluster_name:
            d['cluster-name'] = self.cluster_name
        if self.cluster_label_name:
            d['cluster-label-name'] = self.cluster_label_name
        return d

    @classmethod
    def from_dict(cls, data: Any, where: str = 'anyOf') -> 'AnyOf':
        return cls(**_member_fields(data, where))


@dataclass
class AllOf:
    provider_name: str = ''
    cluster_name: str = ''
    cluster_label_name: str = ''
    any_of: list[AnyOf] = field(default_factory=list)

    def to_dict(self) -> dict:
        d = AnyOf(self.provider_name, self.cluster_name, self.cluster_label_name).to_dict()
        if self.any_of:
            d['anyOf'] = [a.to_dict() for a in self.any_of]
        return d

    @classmethod
    def from_dict(cls, data: Any, where: str = 'allOf') -> 'AllOf':
        values = _member_fields(data, where)
        any_of = [
            AnyOf.from_dict(item, f"{where}.anyOf[{i}]")
            for i, item in enumerate(_group(data, 'anyOf', f"{where}."))
        ]
        return cls(any_of=any_of, **values)


@dataclass
class IntentSpec:
    """A placement intent: mandatory (allOf) and optional (anyOf) members."""
    all_of: list[AllOf] = field(default_factory=list)
    any_of: list[AnyOf] = field(default_factory=list)

    def to_dict(self) -> dict:
        d: dict[str, Any] = {}
        if self.all_of:
            d['allOf'] = [a.to_dict() for a in self.all_of]
        if self.any_of:
            d['anyOf'] = [a.to_dict() for a in self.any_of]
        return d

    @classmethod
    def from_dict(cls, data: Any) -> 'IntentSpec':
        """Parse the wire form.

        Raises:
            InvalidIntentError: If a group is not a list or a member is not a mapping
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise InvalidIntentError("Intent must be a mapping")
        return cls(
            all_of=[AllOf.from_dict(item, f"allOf[{i}]")
                    for i, item in enumerate(_group(data, 'allOf', ''))],
            any_of=[AnyOf.from_dict(item, f"anyOf[{i}]")
                    for i, item in enumerate(_group(data, 'anyOf', ''))],
        )
