"""
Artifact emission.

The emitter materializes one ArtifactSpec into an artifact store, keyed by
the spec's qualified name. An artifact that already exists is never
rewritten: that is how hand-modified generated files survive later runs.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from scrud_generator.ast_codegen import PythonRenderer
from scrud_generator.constants import GenerationOptions
from scrud_generator.domain.models import EmissionOutcome, EmissionResult
from scrud_generator.domain.naming import module_for
from scrud_generator.domain.specs import ArtifactSpec
from scrud_generator.exceptions import EmissionIOFailure


logger = logging.getLogger(__name__)

Renderer = Callable[[ArtifactSpec], str]
ExistsCheck = Callable[[str], bool]


class ArtifactStore(ABC):
    """Where rendered artifacts are persisted."""

    @abstractmethod
    def exists(self, qualified_name: str) -> bool:
        pass

    @abstractmethod
    def write(self, qualified_name: str, content: str) -> str:
        """Persist an artifact and return its location."""
        pass


class FileSystemArtifactStore(ArtifactStore):
    """
    Stores each artifact as a Python module under ``output_dir``.

    ``shop.repository.CustomerRepository`` is written to
    ``<output_dir>/shop/repository/customer_repository.py``; missing
    ``__init__.py`` files of the package directories are created empty.
    """

    def __init__(self, output_dir):
        self.output_dir = Path(output_dir)

    def path_for(self, qualified_name: str) -> Path:
        parts = module_for(qualified_name).split(".")
        return self.output_dir.joinpath(*parts[:-1], parts[-1] + GenerationOptions.PYTHON_SUFFIX)

    def exists(self, qualified_name: str) -> bool:
        return self.path_for(qualified_name).is_file()

    def write(self, qualified_name: str, content: str) -> str:
        path = self.path_for(qualified_name)
        path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_packages(path.parent)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        logger.debug(f"Generated file: {path}")
        return str(path)

    def _ensure_packages(self, directory: Path) -> None:
        while directory != self.output_dir and self.output_dir in directory.parents:
            init_file = directory / "__init__.py"
            if not init_file.exists():
                init_file.touch()
            directory = directory.parent


class InMemoryArtifactStore(ArtifactStore):
    """Dictionary backed store, mainly for tests and dry runs."""

    def __init__(self, existing: Optional[Iterable[str]] = None):
        self.files: Dict[str, str] = {name: "" for name in existing or ()}
        self.writes: List[str] = []

    def exists(self, qualified_name: str) -> bool:
        return qualified_name in self.files

    def write(self, qualified_name: str, content: str) -> str:
        self.files[qualified_name] = content
        self.writes.append(qualified_name)
        return qualified_name


class Emitter:
    """
    Renders and persists artifact specs with skip-if-exists semantics.

    Args:
        store: Target artifact store
        renderer: Callable turning a spec into source text
        exists: Existence oracle, defaults to the store's own check
    """

    def __init__(self, store: ArtifactStore, renderer: Optional[Renderer] = None, exists: Optional[ExistsCheck] = None):
        self.store = store
        self.renderer = renderer or PythonRenderer()
        self.exists = exists or store.exists

    def emit(self, spec: ArtifactSpec) -> EmissionResult:
        if self.exists(spec.qualified_name):
            logger.debug(f"Skipping {spec.qualified_name}: already exists")
            return EmissionResult(spec.qualified_name, spec.kind, EmissionOutcome.SKIPPED_EXISTING)

        content = self.renderer(spec)
        try:
            location = self.store.write(spec.qualified_name, content)
        except OSError as e:
            error = EmissionIOFailure(
                f"Could not write {spec.qualified_name}: {e}",
                qualified_name=spec.qualified_name,
                path=getattr(e, "filename", None),
            )
            logger.error(error.message)
            return EmissionResult(
                spec.qualified_name, spec.kind, EmissionOutcome.FAILED, reason=error.message
            )

        logger.info(f"Generated {spec.kind.value}: {spec.qualified_name}")
        return EmissionResult(spec.qualified_name, spec.kind, EmissionOutcome.WRITTEN, path=location)
