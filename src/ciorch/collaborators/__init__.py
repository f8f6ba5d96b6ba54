"""Artifact storage and coverage backend collaborators."""

from .artifacts import ArtifactStore, LocalArtifactStore
from .coverage import CodecovUploader, CoverageUploader

__all__ = [
    "ArtifactStore",
    "CodecovUploader",
    "CoverageUploader",
    "LocalArtifactStore",
]
