"""
Core data structures for the download subsystem.

TreeNode mirrors one entry of the deployment file listing returned by the
Vercel API. FlatEntry is a node after flattening, addressed by its full path.
DownloadResult and MaterializeSummary describe what happened on disk.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Tuple, Union

from vercel_source.constants import NODE_TYPE_DIRECTORY, NODE_TYPE_FILE
from vercel_source.exceptions import APIError

Pathish = Union[str, Path]


@dataclass
class TreeNode:
    """Represents one file or directory in a deployment's file listing."""

    name: str
    """Path segment of this entry (not a full path)"""

    type: str
    """Entry type; 'file' or 'directory' for anything that is materialized"""

    uid: Optional[str] = None
    """Opaque content identifier, present on file entries"""

    children: List["TreeNode"] = field(default_factory=list)
    """Ordered child entries of a directory"""

    @classmethod
    def from_dict(cls, payload: Any) -> "TreeNode":
        """
        Build a TreeNode (and its descendants) from an API payload.

        Children of file entries are dropped.

        Raises:
            APIError: If the payload is not a mapping with string `name` and `type`,
                or carries a non-list `children` value.
        """
        if not isinstance(payload, dict):
            raise APIError(
                f"Malformed file tree entry: expected object, got {type(payload).__name__}"
            )

        name = payload.get("name")
        node_type = payload.get("type")
        if not isinstance(name, str) or not isinstance(node_type, str):
            raise APIError(
                "Malformed file tree entry: 'name' and 'type' must be strings",
                details=repr(payload)[:200],
            )

        uid = payload.get("uid")
        if uid is not None and not isinstance(uid, str):
            uid = str(uid)

        raw_children = payload.get("children") or []
        if not isinstance(raw_children, list):
            raise APIError(
                f"Malformed file tree entry {name!r}: 'children' must be a list"
            )

        children: List[TreeNode] = []
        if node_type != NODE_TYPE_FILE:
            children = [cls.from_dict(child) for child in raw_children]

        return cls(name=name, type=node_type, uid=uid, children=children)

    @property
    def is_directory(self) -> bool:
        return self.type == NODE_TYPE_DIRECTORY


@dataclass(frozen=True)
class FlatEntry:
    """A TreeNode after flattening, named by its slash-separated path from the flattening root."""

    name: str
    type: str
    uid: Optional[str] = None

    @property
    def segments(self) -> Tuple[str, ...]:
        return tuple(self.name.split("/"))

    @property
    def is_file(self) -> bool:
        return self.type == NODE_TYPE_FILE

    @property
    def is_directory(self) -> bool:
        return self.type == NODE_TYPE_DIRECTORY


@dataclass
class DownloadResult:
    """Outcome of materializing one flattened entry."""

    success: bool
    """Whether the entry is present on disk after this run"""

    entry_name: str
    """Full remote path of the entry (e.g. 'src/pkg/b.txt')"""

    file_path: Optional[Pathish] = None
    """Local destination path, when one could be computed"""

    entry_type: Optional[str] = None
    """'file' or 'directory'"""

    was_skipped: bool = False
    """The destination already existed, so nothing was done"""

    bytes_written: int = 0
    """Size of the written file, for downloaded files"""

    error_message: Optional[str] = None
    """Error message (if failed)"""

    error_type: Optional[str] = None
    """Category of error (network, http, filesystem, validation, payload)"""

    http_status_code: Optional[int] = None
    """HTTP status code if the failure came from the API"""


@dataclass
class MaterializeSummary:
    """Aggregate result of one materialization run."""

    file_count: int = 0
    """File entries in the flattened tree, whether or not they were downloaded"""

    directory_count: int = 0
    """Directory entries in the flattened tree"""

    results: List[DownloadResult] = field(default_factory=list)
    """Per-entry outcomes for files and directories, in tree order"""

    @property
    def downloaded(self) -> int:
        return sum(
            1
            for r in self.results
            if r.success and not r.was_skipped and r.entry_type == NODE_TYPE_FILE
        )

    @property
    def created_directories(self) -> int:
        return sum(
            1
            for r in self.results
            if r.success and not r.was_skipped and r.entry_type == NODE_TYPE_DIRECTORY
        )

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if r.was_skipped)

    @property
    def failed(self) -> List[DownloadResult]:
        return [r for r in self.results if not r.success]

    @property
    def failed_paths(self) -> List[str]:
        return [r.entry_name for r in self.failed]

    @property
    def ok(self) -> bool:
        return not self.failed
