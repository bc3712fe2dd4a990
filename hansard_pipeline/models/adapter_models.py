"""
Run response models.

Unified response structures returned by the ingestion pipeline so callers
(CLI, Prefect flows) can inspect status, per-record errors and metrics the
same way regardless of how the run was started.

Responsibility: Data transfer objects for pipeline operations
"""

from datetime import datetime
from enum import Enum
from typing import Generic, TypeVar, Optional, List, Dict, Any

from pydantic import BaseModel, Field


class AdapterStatus(str, Enum):
    """
    Status of a fetch or ingestion operation.

    Used to quickly determine if the caller should alert or retry.
    """
    SUCCESS = "success"
    PARTIAL_SUCCESS = "partial_success"  # Some records failed, some succeeded
    FAILURE = "failure"


class AdapterError(BaseModel):
    """
    Structured error information for a single failed item.

    Captures the context needed to re-run one leaf record by hand.
    """
    timestamp: datetime = Field(description="When the error occurred (UTC)")
    error_type: str = Field(description="Exception class name or error category")
    message: str = Field(description="Human-readable error message")
    context: Dict[str, Any] = Field(
        default_factory=dict,
        description="Additional context (external id, section, chamber, ...)"
    )
    retryable: bool = Field(
        default=False,
        description="Whether this error can be retried"
    )


class AdapterMetrics(BaseModel):
    """
    Operational metrics for a pipeline run.
    """
    records_attempted: int = Field(
        ge=0,
        description="Leaf records the run tried to enrich"
    )
    records_succeeded: int = Field(
        ge=0,
        description="Records assembled and kept after filtering"
    )
    records_failed: int = Field(
        ge=0,
        description="Records that failed during fetch or assembly"
    )
    duration_seconds: float = Field(
        ge=0.0,
        description="Total execution time in seconds"
    )
    records_skipped: int = Field(
        ge=0,
        default=0,
        description="Records skipped as already stored or procedural"
    )


T = TypeVar('T')


class AdapterResponse(BaseModel, Generic[T]):
    """
    Unified response wrapper for pipeline operations.

    Generic type T is the normalized record model (ProceedingRecord).

    Responsibility: Standard response container with status, data, errors, metrics
    """
    status: AdapterStatus = Field(description="Operation status")
    data: Optional[List[T]] = Field(
        default=None,
        description="Successfully assembled records"
    )
    errors: List[AdapterError] = Field(
        default_factory=list,
        description="Errors encountered during the run"
    )
    metrics: AdapterMetrics = Field(description="Operation performance metrics")
    source: str = Field(description="Pipeline/source identifier")
    fetch_timestamp: datetime = Field(description="When data was fetched (UTC)")
    sitting_date: Optional[str] = Field(
        default=None,
        description="Sitting date the records were ingested for (ISO format)"
    )
