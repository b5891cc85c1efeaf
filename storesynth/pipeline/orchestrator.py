"""
Pipeline orchestrator using LangGraph.

Sequences the analyze flow (validate input, acquire, analyze, synthesize) as
a LangGraph state machine and runs store creation directly through the
template synthesizer.

The orchestrator owns the long-lived resources it creates: the browser pool,
the Claude client, the template catalog and the store repository. Use it as
an async context manager so the browser and client are closed on exit.

Example:
    >>> async with PipelineOrchestrator(settings) as pipeline:
    ...     result = await pipeline.analyze("shop.example.com")
    ...     print(result.template.base_template_id)
"""

import time
from functools import wraps
from typing import Any, Callable, Optional, TypedDict
from uuid import uuid4

from langgraph.graph import END, StateGraph

from storesynth.analyzers.design_analyzer import DesignAnalyzer, get_recommendations
from storesynth.config.settings import Settings, get_settings
from storesynth.extractors.acquisition import AcquisitionEngine
from storesynth.generators.catalog import TemplateCatalog, build_default_catalog
from storesynth.generators.store_files import StoreFileGenerator
from storesynth.generators.template_synthesizer import TemplateSynthesizer
from storesynth.models.schemas import (
    AnalyzeResult,
    ComponentType,
    DesignAnalysis,
    DesignSignals,
    GeneratedTemplate,
    GenerateStoreResult,
    ImproveDesignResult,
    Preview,
    ScrapedSite,
    ScrapedSummary,
    StoreInfo,
    TemplateCatalogEntry,
)
from storesynth.services.browser_service import BrowserPool
from storesynth.services.llm_service import ClaudeService, ClaudeServiceError
from storesynth.services.store_repository import InMemoryStoreRepository, StoreRepository
from storesynth.services.validation_service import ValidationService
from storesynth.utils.errors import PersistenceError
from storesynth.utils.logger import LogContext, get_logger

logger = get_logger(__name__)

SUMMARY_COLORS = 5
SUMMARY_FONTS = 3


# =============================================================================
# Graph State
# =============================================================================

class AnalyzeStateDict(TypedDict, total=False):
    """State carried between analyze graph nodes."""
    run_id: str
    url: str
    site: Optional[ScrapedSite]
    analysis: Optional[DesignAnalysis]
    template: Optional[GeneratedTemplate]
    step_timings: dict[str, int]


def track_timing(func: Callable):
    """Decorator to track node execution timing."""
    @wraps(func)
    async def wrapper(self, state: AnalyzeStateDict) -> dict[str, Any]:
        start_time = time.time()
        node_name = func.__name__.strip("_").replace("_node", "")

        logger.info(f"Starting node: {node_name}", run_id=state.get("run_id"))

        try:
            result = await func(self, state)
        except Exception as e:
            logger.error(
                f"Node failed: {node_name}",
                run_id=state.get("run_id"),
                duration_ms=int((time.time() - start_time) * 1000),
                error=str(e),
            )
            raise

        duration_ms = int((time.time() - start_time) * 1000)
        step_timings = dict(state.get("step_timings") or {})
        step_timings[node_name] = duration_ms
        result["step_timings"] = step_timings

        logger.info(f"Completed node: {node_name}", run_id=state.get("run_id"), duration_ms=duration_ms)
        return result

    return wrapper


# =============================================================================
# Orchestrator
# =============================================================================

class PipelineOrchestrator:
    """
    Entry point for the analyze, generate-store and improve-design flows.

    Collaborators may be injected; anything not injected is built from
    settings and owned (and closed) by the orchestrator.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        browser_pool: Optional[BrowserPool] = None,
        llm_service: Optional[ClaudeService] = None,
        catalog: Optional[TemplateCatalog] = None,
        repository: Optional[StoreRepository] = None,
        acquisition: Optional[AcquisitionEngine] = None,
        analyzer: Optional[DesignAnalyzer] = None,
        synthesizer: Optional[TemplateSynthesizer] = None,
        write_store_files: bool = True,
    ):
        self.settings = settings or get_settings()
        self.validator = ValidationService()

        self._owns_browser = browser_pool is None
        self.browser_pool = browser_pool or BrowserPool(self.settings)

        self._owns_llm = llm_service is None
        self.llm_service = llm_service if llm_service is not None else self._create_llm_service()

        self.catalog = catalog if catalog is not None else build_default_catalog()
        self.repository = repository if repository is not None else InMemoryStoreRepository()

        self.acquisition = acquisition or AcquisitionEngine(self.browser_pool, settings=self.settings)
        self.analyzer = analyzer or DesignAnalyzer(self.llm_service, settings=self.settings)
        self.synthesizer = synthesizer or TemplateSynthesizer(
            catalog=self.catalog,
            repository=self.repository,
            file_generator=StoreFileGenerator(self.settings) if write_store_files else None,
            validator=self.validator,
            settings=self.settings,
        )

        self._graph = self._build_graph()

    def _create_llm_service(self) -> Optional[ClaudeService]:
        if not self.settings.ai_enabled:
            logger.info("ANTHROPIC_API_KEY not set, recommendations will use the fallback set")
            return None
        try:
            return ClaudeService(self.settings)
        except ClaudeServiceError as e:
            logger.warning("Claude service unavailable, recommendations will use the fallback set", error=str(e))
            return None

    async def __aenter__(self) -> "PipelineOrchestrator":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _build_graph(self):
        """
        Build the analyze state machine.

        Graph structure:
            validate_input -> acquire -> analyze -> synthesize -> END
        """
        graph = StateGraph(AnalyzeStateDict)

        graph.add_node("validate_input", self._validate_input_node)
        graph.add_node("acquire", self._acquire_node)
        graph.add_node("analyze", self._analyze_node)
        graph.add_node("synthesize", self._synthesize_node)

        graph.set_entry_point("validate_input")
        graph.add_edge("validate_input", "acquire")
        graph.add_edge("acquire", "analyze")
        graph.add_edge("analyze", "synthesize")
        graph.add_edge("synthesize", END)

        return graph.compile()

    # =========================================================================
    # Node Implementations
    # =========================================================================

    @track_timing
    async def _validate_input_node(self, state: AnalyzeStateDict) -> dict[str, Any]:
        return {"url": self.validator.validate_url(state.get("url", ""))}

    @track_timing
    async def _acquire_node(self, state: AnalyzeStateDict) -> dict[str, Any]:
        return {"site": await self.acquisition.acquire(state["url"])}

    @track_timing
    async def _analyze_node(self, state: AnalyzeStateDict) -> dict[str, Any]:
        return {"analysis": await self.analyzer.analyze(state["site"])}

    @track_timing
    async def _synthesize_node(self, state: AnalyzeStateDict) -> dict[str, Any]:
        return {"template": self.synthesizer.synthesize(state["analysis"])}

    # =========================================================================
    # Public API
    # =========================================================================

    async def analyze(self, url: str) -> AnalyzeResult:
        """
        Run acquisition, analysis and synthesis for one URL.

        Raises:
            InputValidationError: If the URL is invalid
            AcquisitionError: If the page could not be loaded
        """
        run_id = uuid4().hex
        with LogContext(run_id=run_id, url=url):
            logger.info("Starting analyze run")
            final_state = await self._graph.ainvoke({"run_id": run_id, "url": url, "step_timings": {}})

            site: ScrapedSite = final_state["site"]
            signals = site.design_signals
            result = AnalyzeResult(
                source_url=site.url,
                scraped_summary=ScrapedSummary(
                    title=signals.page_title,
                    colors=signals.colors[:SUMMARY_COLORS],
                    fonts=signals.fonts[:SUMMARY_FONTS],
                    products_found=len(site.candidate_products),
                ),
                analysis=final_state["analysis"],
                template=final_state["template"],
                preview=Preview(**site.screenshots.to_base64()),
            )

            logger.info(
                "Analyze run completed",
                duration_ms=sum(final_state.get("step_timings", {}).values()),
                step_timings=final_state.get("step_timings", {}),
            )
            return result

    async def generate_store(
        self,
        user_id: str,
        store_info: StoreInfo | dict[str, Any],
        template_id: Optional[str] = None,
        customizations: Optional[dict[str, Any]] = None,
    ) -> GenerateStoreResult:
        """
        Create a draft store from a catalog template or caller customizations.

        Raises:
            InputValidationError: Missing user id or store name
            SynthesisError: Neither template id nor customizations resolvable
            PersistenceError: The repository rejected the record
        """
        record = await self.synthesizer.create_store(
            user_id=user_id,
            store_info=store_info,
            template_id=template_id,
            customizations=customizations,
        )
        return GenerateStoreResult(
            store_id=record.id,
            url=record.public_url(self.settings.store_host_suffix),
            status=record.status,
        )

    def get_templates(self) -> list[TemplateCatalogEntry]:
        return self.synthesizer.get_templates()

    async def improve_design(self, store_id: str) -> ImproveDesignResult:
        """
        Recommend design improvements for an existing store.

        Uses the store's saved colors and fonts; AI failures yield the
        fallback set as in analyze.

        Raises:
            PersistenceError: If no store has this id
        """
        record = await self.repository.get(store_id)
        if record is None:
            raise PersistenceError(f"Store '{store_id}' not found", details={"store_id": store_id})

        colors = record.template.customizations.colors
        fonts = record.template.customizations.fonts
        result = await get_recommendations(
            self.llm_service,
            url=record.template.source_url or record.public_url(self.settings.store_host_suffix),
            signals=DesignSignals(
                colors=[colors.primary, colors.secondary, colors.accent],
                fonts=[fonts.heading, fonts.body],
            ),
            has_products=any(c.type == ComponentType.PRODUCT_GRID for c in record.design.components),
            timeout_seconds=self.settings.ai_timeout_seconds,
        )

        logger.info("Design improvements generated", store_id=store_id, recommendation_source=result.source)
        return ImproveDesignResult(
            store_id=store_id,
            recommendations=result.recommendations,
            source=result.source,
        )

    # =========================================================================
    # Cleanup
    # =========================================================================

    async def close(self) -> None:
        """Close owned resources."""
        if self._owns_browser:
            await self.browser_pool.close()
        if self._owns_llm and self.llm_service is not None:
            await self.llm_service.close()


__all__ = ["PipelineOrchestrator", "AnalyzeStateDict", "track_timing"]
