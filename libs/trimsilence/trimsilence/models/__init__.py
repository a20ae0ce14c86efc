"""Domain models."""

from trimsilence.models.artifact import ProcessingResult, StoredArtifact
from trimsilence.models.audio import AudioMetadata, EncodingPlan, SilencePeriod

__all__ = [
    "AudioMetadata",
    "EncodingPlan",
    "ProcessingResult",
    "SilencePeriod",
    "StoredArtifact",
]
