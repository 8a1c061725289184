"""
Generation run orchestration.

A run goes through Discover -> ResolveAll -> BuildSpecsInOrder -> EmitAll ->
Report. Predicate factories of every entity model are generated first, then
each SCRUD model's artifacts in order: mappers, DTOs, identifier adapters,
repository, service interface and implementation, controller.

Failures are isolated per model: every model gets a report entry, and only
configuration errors abort the run. An orchestrator runs once; calling
``run`` again returns the first report without doing anything.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Set, Tuple

from scrud_generator.builders import BuildContext, SpecPipeline
from scrud_generator.colored_logging import log_highlight, log_progress, log_section, log_success
from scrud_generator.config_validation import ToolConfigSchema
from scrud_generator.domain.models import ModelDescriptor, ModelReport, ModelStatus, RunReport
from scrud_generator.domain.naming import NamingConventions
from scrud_generator.domain.resolver import ModelDescriptorResolver
from scrud_generator.domain.specs import ArtifactSpec
from scrud_generator.emitter import ArtifactStore, Emitter, FileSystemArtifactStore, Renderer
from scrud_generator.exceptions import DuplicateArtifactName, ScrudGeneratorError
from scrud_generator.model_loader import discover_models


logger = logging.getLogger(__name__)

SpecSource = Callable[[ModelDescriptor], List[ArtifactSpec]]


def _timestamp() -> str:
    return datetime.now().isoformat(timespec="seconds")


def bag_label(bag: Any, index: int) -> str:
    """Report label of a metadata bag, usable even when the bag is malformed."""
    if isinstance(bag, Mapping) and bag.get("name"):
        if bag.get("package"):
            return f"{bag['package']}.{bag['name']}"
        return str(bag["name"])
    return f"<model #{index}>"


class Orchestrator:
    """
    Drives one generation run.

    Args:
        config: Validated run configuration
        store: Artifact store, defaults to the file system under ``output_dir``
        renderer: Spec renderer handed to the emitter
    """

    def __init__(
        self,
        config: Optional[ToolConfigSchema] = None,
        store: Optional[ArtifactStore] = None,
        renderer: Optional[Renderer] = None,
    ):
        self.config = config or ToolConfigSchema()
        self.store = store or FileSystemArtifactStore(self.config.output_dir)
        self.known_types: Set[str] = set(self.config.known_types)
        self.naming = NamingConventions(self.config.properties)
        self.emitter = Emitter(self.store, renderer, exists=self.artifact_exists)

        # Append-only set of qualified names produced in this run
        self._names: Set[str] = set()
        self._names_lock = threading.Lock()

        self.complete = False
        self._report: Optional[RunReport] = None

    def artifact_exists(self, qualified_name: str) -> bool:
        return qualified_name in self.known_types or self.store.exists(qualified_name)

    def run(self, bags: Optional[List[Mapping[str, Any]]] = None) -> RunReport:
        """
        Run the generation pipeline once.

        Args:
            bags: Metadata bags to process; discovered from the configured
                ``models`` paths when omitted

        Raises:
            ConfigurationError: If model discovery fails
        """
        if self.complete:
            logger.warning("Generation already ran for this orchestrator, ignoring re-entry")
            return self._report or RunReport()
        self.complete = True

        report = RunReport(started_at=_timestamp())

        if bags is None:
            log_progress(logger, "Discovering model metadata...")
            bags = discover_models(
                self.config.models,
                include=self.config.include_models,
                exclude=self.config.exclude_models,
            )

        log_section(logger, "Model Resolution")
        resolved = self._resolve_all(bags, report)

        context = BuildContext.for_descriptors(
            [descriptor for _, descriptor in resolved],
            naming=self.naming,
            runtime_package=self.config.runtime_package,
            type_exists=self.artifact_exists,
        )
        for owner, target in context.graph.cyclic_edges():
            logger.debug(f"Relation {owner} -> {target} is part of a cycle, DTOs reference it by identifier")
        pipeline = SpecPipeline(context)

        log_section(logger, "Predicate Factories")
        for entry, descriptor in resolved:
            self._process(entry, descriptor, pipeline.build_predicate_specs)

        log_section(logger, "SCRUD Artifacts")
        scrud_models = [
            (entry, descriptor) for entry, descriptor in resolved
            if descriptor.flags.scrud and entry.status != ModelStatus.FAILED
        ]
        self._run_models(scrud_models, pipeline.build_model_specs)

        for entry in report.models:
            entry.finalize()
        report.finished_at = _timestamp()
        self._report = report

        self._log_summary(report)
        return report

    def _resolve_all(
        self, bags: List[Mapping[str, Any]], report: RunReport
    ) -> List[Tuple[ModelReport, ModelDescriptor]]:
        run_models = {
            bag_label(bag, index) for index, bag in enumerate(bags) if isinstance(bag, Mapping)
        }

        def type_exists(qualified_name: str) -> bool:
            return qualified_name in run_models or self.artifact_exists(qualified_name)

        resolver = ModelDescriptorResolver(type_exists=type_exists, naming=self.naming)

        resolved = []
        for index, bag in enumerate(bags):
            entry = ModelReport(model=bag_label(bag, index))
            report.models.append(entry)
            try:
                if not isinstance(bag, Mapping):
                    raise ScrudGeneratorError(
                        f"Model metadata must be a mapping, got {type(bag).__name__}",
                        error_code="UNRESOLVABLE_MODEL",
                    )
                log_progress(logger, f"Resolving {entry.model}")
                resolved.append((entry, resolver.resolve(bag)))
            except ScrudGeneratorError as e:
                logger.error(f"Could not resolve {entry.model}: {e.message}")
                entry.fail(e.message, e.error_code)
        return resolved

    def _run_models(self, models: List[Tuple[ModelReport, ModelDescriptor]], source: SpecSource) -> None:
        if self.config.max_workers > 1 and len(models) > 1:
            logger.debug(f"Processing {len(models)} models with {self.config.max_workers} workers")
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                futures = [executor.submit(self._process, entry, descriptor, source) for entry, descriptor in models]
                for future in futures:
                    future.result()
        else:
            for entry, descriptor in models:
                self._process(entry, descriptor, source)

    def _process(self, entry: ModelReport, descriptor: ModelDescriptor, source: SpecSource) -> None:
        """Build, check and emit the specs of one model, recording every outcome on its entry."""
        if entry.status == ModelStatus.FAILED:
            return
        try:
            specs = source(descriptor)
            self._reserve_names(specs, descriptor)
            for spec in specs:
                entry.add_result(self.emitter.emit(spec))
        except ScrudGeneratorError as e:
            logger.error(f"Generation failed for {entry.model}: {e.message}")
            entry.fail(e.message, e.error_code)
        except Exception as e:
            logger.error(f"Unexpected error while generating {entry.model}: {e}", exc_info=True)
            entry.fail(str(e), "UNEXPECTED_ERROR")

    def _reserve_names(self, specs: List[ArtifactSpec], descriptor: ModelDescriptor) -> None:
        """Add the specs' qualified names to the run's name set, all or nothing."""
        names = [spec.qualified_name for spec in specs]
        with self._names_lock:
            seen: Set[str] = set()
            for name in names:
                if name in self._names or name in seen:
                    raise DuplicateArtifactName(
                        f"Artifact {name} is already produced by another model in this run",
                        qualified_name=name,
                        model=descriptor.qualified_name,
                    )
                seen.add(name)
            self._names.update(names)

    def _log_summary(self, report: RunReport) -> None:
        summary: Dict[str, int] = report.summary()
        log_section(logger, "Summary")
        log_highlight(
            logger,
            f"{summary['models']} model(s): {summary['written']} written, "
            f"{summary['skipped_existing']} skipped existing, {summary['failed_artifacts']} failed",
        )
        for entry in report.failed_models:
            logger.error(f"{entry.model}: {entry.reason}")
        if not report.has_failures:
            log_success(logger, "Generation completed successfully")
