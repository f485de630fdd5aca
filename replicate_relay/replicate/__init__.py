"""Replicate prediction bridge.

Public surface: :class:`ReplicateProvider` plus the building blocks it
composes (translation, job submission/polling, stream normalization, usage
and response assembly).
"""

from .assembler import ChunkFactory, assemble_completion
from .client import ReplicateProvider
from .jobs import JobSubmitter, ResultPoller
from .stream_normalizer import StreamNormalizer, iter_stream_chunks
from .translator import translate
from .usage import usage_from_job

__all__ = [
    "ReplicateProvider",
    "JobSubmitter",
    "ResultPoller",
    "StreamNormalizer",
    "iter_stream_chunks",
    "ChunkFactory",
    "assemble_completion",
    "translate",
    "usage_from_job",
]
