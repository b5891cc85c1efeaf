"""Pipeline module for orchestrating the analyze and generate-store flows."""

from storesynth.pipeline.orchestrator import PipelineOrchestrator, AnalyzeStateDict

__all__ = ["PipelineOrchestrator", "AnalyzeStateDict"]
