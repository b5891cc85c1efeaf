"""
Site-to-Store Synthesis Pipeline.

Turns the URL of an existing e-commerce site into a redesigned storefront
template (markup skeleton, stylesheet and design metadata) using a headless
browser, design-signal analysis and Claude-backed recommendations.
"""

__version__ = "1.0.0"
__author__ = "Storesynth Team"

# Lazy imports to avoid circular dependencies
def get_orchestrator():
    """Get the PipelineOrchestrator class (lazy import)."""
    from storesynth.pipeline.orchestrator import PipelineOrchestrator
    return PipelineOrchestrator

__all__ = ["get_orchestrator", "__version__"]
