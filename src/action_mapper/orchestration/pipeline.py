"""
Mapping pipeline - drives the resolution engine over a whole scenario.

Steps run sequentially: the screen a step resolves to becomes the preferred
screen for the next one. Screen context is rebuilt as a new immutable
ResolutionContext per step; nothing per-request lives on the pipeline.
"""
import logging
from dataclasses import dataclass, replace
from time import time
from typing import Iterable, List, Optional, Sequence

from ..exceptions import EmptyScenarioError
from ..knowledge.writer import LearningWriter, PatternLearnedEvent
from ..models import Step
from ..navigation import NavigationOptions, NavigationPlanner
from ..resolution.engine import ResolutionEngine
from ..resolution.strategy import ResolutionContext
from ..schemas import MappingReport, MappingStatistics, ResolutionResult, ResolutionSource
from ..utils.naming import screen_from_class

logger = logging.getLogger(__name__)

# Classes that do not represent a screen the user is on
_NON_SCREEN_CLASSES = frozenset({"BaseTest", "CompositeAction"})


@dataclass(frozen=True)
class PipelineOptions:
    platform: Optional[str] = None
    brand: Optional[str] = None
    include_login: bool = True
    target_screen: Optional[str] = None
    full_scenario: Optional[str] = None
    build_prerequisites: bool = True
    playback_seconds: Optional[float] = None
    seek_ratio: Optional[float] = None
    fast_seek_seconds: Optional[int] = None

    def navigation_options(self) -> NavigationOptions:
        return NavigationOptions(
            platform=self.platform,
            brand=self.brand,
            include_login=self.include_login,
            target_screen=self.target_screen,
            playback_seconds=self.playback_seconds,
            seek_ratio=self.seek_ratio,
            fast_seek_seconds=self.fast_seek_seconds,
        )


def advance_context(context: ResolutionContext, result: ResolutionResult) -> ResolutionContext:
    """
    Context for the step after ``result``.

    Unmapped results and non-screen classes leave the context unchanged.
    """
    class_name = result.class_name
    if not result.is_found or not class_name or class_name in _NON_SCREEN_CLASSES:
        return context

    screen = screen_from_class(class_name)
    path = context.screen_path
    if screen and (not path or path[-1] != screen):
        path = path + (screen,)
    return replace(context, preferred_screen_class=class_name, current_screen=screen, screen_path=path)


def compute_statistics(results: Sequence[ResolutionResult]) -> MappingStatistics:
    total = len(results)
    mapped = [r for r in results if r.is_found]
    average = sum(r.confidence for r in mapped) / len(mapped) if mapped else 0.0
    return MappingStatistics(
        total=total,
        mapped=len(mapped),
        unmapped=total - len(mapped),
        mapping_rate=(len(mapped) / total * 100) if total else 0.0,
        average_confidence=average,
    )


def collect_mapping_imports(results: Iterable[ResolutionResult]) -> List[str]:
    """Distinct classes referenced by resolved steps, composite chains expanded."""
    classes = set()
    for result in results:
        candidate = result.chosen_candidate
        if not result.is_found or candidate is None:
            continue
        if candidate.composite_steps:
            classes.update(s.class_name for s in candidate.composite_steps if s.class_name)
        elif candidate.class_name:
            classes.add(candidate.class_name)
    classes.discard("CompositeAction")
    return sorted(classes)


class MappingPipeline:
    """
    Maps an ordered scenario of steps to page-object methods.

    Owns no per-request state; the engine, planner and writer are shared,
    thread-safe collaborators.
    """

    def __init__(
        self,
        engine: ResolutionEngine,
        planner: Optional[NavigationPlanner] = None,
        writer: Optional[LearningWriter] = None,
        record_patterns: bool = False,
    ):
        """
        :param engine: ResolutionEngine resolving one step at a time
        :param planner: NavigationPlanner for prerequisites (optional)
        :param writer: Background writer for learned phrase patterns
        :param record_patterns: Record resolved main steps as learned patterns
        """
        self._engine = engine
        self._planner = planner
        self._writer = writer
        self._record_patterns = record_patterns

    def run(self, steps: Sequence[Step], options: Optional[PipelineOptions] = None) -> MappingReport:
        """
        Resolve every step and assemble the mapping report.

        :param steps: Ordered scenario steps
        :param options: Per-request options
        :return: MappingReport
        :raises EmptyScenarioError: If no steps are given
        """
        if not steps:
            raise EmptyScenarioError("Scenario contains no steps to map")

        options = options or PipelineOptions()
        start_time = time()
        logger.info(f"Mapping {len(steps)} steps (platform={options.platform}, brand={options.brand})")

        context = ResolutionContext(
            platform=options.platform,
            brand=options.brand,
            full_scenario=options.full_scenario,
        )
        results: List[ResolutionResult] = []
        for step in steps:
            result = self._engine.resolve(step, context)
            results.append(result)
            if result.is_found:
                self._maybe_record_pattern(result, context)
            context = advance_context(context, result)

        mapped = [r for r in results if r.is_found]
        unmapped = [r for r in results if not r.is_found]
        statistics = compute_statistics(results)

        prerequisites = None
        if self._planner is not None and options.build_prerequisites:
            prerequisites = self._planner.build_prerequisites(mapped, options.navigation_options())

        latency_ms = int((time() - start_time) * 1000)
        logger.info(
            f"Mapped {statistics.mapped}/{statistics.total} steps "
            f"({statistics.mapping_rate:.1f}%) in {latency_ms}ms"
        )
        return MappingReport(
            mappings=mapped,
            unmapped=unmapped,
            statistics=statistics,
            imports=collect_mapping_imports(mapped),
            platform=options.platform,
            brand=options.brand,
            prerequisites=prerequisites,
            latency_ms=latency_ms,
        )

    def _maybe_record_pattern(self, result: ResolutionResult, context: ResolutionContext) -> None:
        if not self._record_patterns or self._writer is None:
            return
        if result.source == ResolutionSource.LEARNED_PATTERN:
            return
        event = PatternLearnedEvent(
            step=result.step,
            candidate=result.chosen_candidate,
            context={
                "platform": context.platform,
                "brand": context.brand,
                "screen": screen_from_class(result.class_name),
            },
        )
        self._writer.submit(event)
