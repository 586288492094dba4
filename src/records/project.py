"""Project records."""

from dataclasses import dataclass, field

from records.base import RecordClient


@dataclass
class ProjectKey:
    project: str = field(metadata={'json': 'project'})


@dataclass
class Project:
    name: str
    description: str = ''
    user_data1: str = ''
    user_data2: str = ''

    def to_dict(self) -> dict:
        return {
            'metadata': {
                'name': self.name,
                'description': self.description,
                'userData1': self.user_data1,
                'userData2': self.user_data2,
            }
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Project':
        meta = data.get('metadata', data)
        return cls(
            name=meta['name'],
            description=meta.get('description', ''),
            user_data1=meta.get('userData1', ''),
            user_data2=meta.get('userData2', ''),
        )


class ProjectClient(RecordClient):
    collection = 'orchestrator'
    tag = 'projectmetadata'
    record_name = 'project'
    record_class = Project

    def create(self, project: Project) -> Project:
        return self._create(ProjectKey(project.name), project, project.name)

    def get(self, name: str) -> Project:
        return self._get(ProjectKey(name), name)

    def delete(self, name: str) -> None:
        self._delete(ProjectKey(name), name)

    def list(self) -> list[Project]:
        return sorted(self._list(), key=lambda p: p.name)
