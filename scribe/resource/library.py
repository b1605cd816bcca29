"""Resource library - references, images, PDFs, data files, snippets, notes"""

import uuid
from typing import Any

from scribe.storage.storage import Storage

RESOURCE_TYPES = ["references", "images", "pdfs", "datafiles", "codesnippets", "notes"]


class ResourceLibrary:
    @staticmethod
    def _key(resource_type: str) -> list[str]:
        return ["resources", resource_type]

    def list_type(self, resource_type: str) -> list[dict[str, Any]]:
        if resource_type not in RESOURCE_TYPES:
            raise ValueError(f"Invalid resource type: {resource_type}")
        return Storage.read(self._key(resource_type)) or []

    def list_all(self) -> dict[str, list[dict[str, Any]]]:
        return {t: self.list_type(t) for t in RESOURCE_TYPES}

    def get(self, resource_type: str, resource_id: str) -> dict[str, Any] | None:
        for resource in self.list_type(resource_type):
            if resource.get("id") == resource_id:
                return resource
        return None

    def upsert(self, resource_type: str, resource: dict[str, Any]) -> tuple[str, bool]:
        """Insert or replace a resource; returns (id, updated).

        Resources are matched by id, and PDFs additionally by file name.
        """
        resources = self.list_type(resource_type)
        resource = dict(resource)

        if not resource.get("id"):
            resource["id"] = str(uuid.uuid4())

        index = next((i for i, r in enumerate(resources) if r.get("id") == resource["id"]), None)
        if index is None and resource_type == "pdfs" and resource.get("name"):
            index = next((i for i, r in enumerate(resources) if r.get("name") == resource["name"]), None)

        if index is not None:
            resources[index] = resource
        else:
            resources.append(resource)

        Storage.write(self._key(resource_type), resources)
        return resource["id"], index is not None
