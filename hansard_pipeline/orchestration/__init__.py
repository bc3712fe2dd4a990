"""Ingestion run orchestration."""

from .ingestion_pipeline import IngestionPipeline

__all__ = ["IngestionPipeline"]
