"""Artifact publishing to a version-controlled content store."""

from .publisher import Publisher, build_artifact, serialize_artifact
from .store import ContentStore, GitHubContentStore, LocalContentStore, WriteResult, blob_sha

__all__ = [
    "Publisher",
    "build_artifact",
    "serialize_artifact",
    "ContentStore",
    "GitHubContentStore",
    "LocalContentStore",
    "WriteResult",
    "blob_sha",
]
