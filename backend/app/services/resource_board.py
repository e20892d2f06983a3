"""Timeline resource rows: team-member groups with duplicate instance rows.

Instances are kept in one flat list, each pointing back to its group; the
grouped view is derived on demand.
"""
from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional


@dataclass(frozen=True)
class ResourceInstance:
    group_id: str
    name: str
    instance_id: str

    @property
    def id(self) -> str:
        return f"{self.group_id}-{self.instance_id}"

    @property
    def instance_name(self) -> str:
        return f"{self.name} #{self.instance_id}"


@dataclass(frozen=True)
class ResourceGroup:
    id: str
    name: str
    is_expanded: bool = True


@dataclass(frozen=True)
class GroupView:
    group: ResourceGroup
    instances: List[ResourceInstance]


class ResourceBoard:
    def __init__(self, groups: Optional[List[ResourceGroup]] = None,
                 instances: Optional[List[ResourceInstance]] = None):
        self.groups: List[ResourceGroup] = list(groups or [])
        self.instances: List[ResourceInstance] = list(instances or [])

    @classmethod
    def from_team_members(cls, members: Iterable) -> "ResourceBoard":
        groups, instances = [], []
        for m in members:
            groups.append(ResourceGroup(id=m.id, name=m.name))
            instances.append(ResourceInstance(group_id=m.id, name=m.name, instance_id="1"))
        return cls(groups, instances)

    def _group_index(self, group_id: str) -> int:
        for i, g in enumerate(self.groups):
            if g.id == group_id:
                return i
        raise KeyError(group_id)

    def instances_for(self, group_id: str) -> List[ResourceInstance]:
        return [i for i in self.instances if i.group_id == group_id]

    def add_instance(self, group_id: str) -> ResourceInstance:
        group = self.groups[self._group_index(group_id)]
        existing = [int(i.instance_id) for i in self.instances_for(group_id)]
        new_id = str(max(existing, default=0) + 1)
        instance = ResourceInstance(group_id=group.id, name=group.name, instance_id=new_id)
        self.instances.append(instance)
        return instance

    def remove_instance(self, group_id: str, instance_id: str) -> bool:
        """Drop an instance row; the last row of a group always stays."""
        if len(self.instances_for(group_id)) <= 1:
            return False
        before = len(self.instances)
        self.instances = [
            i for i in self.instances if not (i.group_id == group_id and i.instance_id == instance_id)
        ]
        return len(self.instances) < before

    def toggle_group(self, group_id: str) -> ResourceGroup:
        idx = self._group_index(group_id)
        self.groups[idx] = replace(self.groups[idx], is_expanded=not self.groups[idx].is_expanded)
        return self.groups[idx]

    def reorder_groups(self, from_index: int, to_index: int) -> None:
        if from_index == to_index:
            return
        if not (0 <= from_index < len(self.groups) and 0 <= to_index < len(self.groups)):
            raise IndexError("group index out of range")
        moved = self.groups.pop(from_index)
        self.groups.insert(to_index, moved)

    def grouped(self) -> List[GroupView]:
        by_group: Dict[str, List[ResourceInstance]] = {}
        for inst in self.instances:
            by_group.setdefault(inst.group_id, []).append(inst)
        return [GroupView(group=g, instances=by_group.get(g.id, [])) for g in self.groups]

    def visible_rows(self) -> List[ResourceInstance]:
        return [i for view in self.grouped() if view.group.is_expanded for i in view.instances]
