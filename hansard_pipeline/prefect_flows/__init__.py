"""
Prefect flows for Hansard pipeline orchestration.

This package contains flow definitions for:
- Latest sitting day ingestion
- Speaker name reconciliation
- Member roster sync

Responsibility: Define orchestration workflows using Prefect
"""
