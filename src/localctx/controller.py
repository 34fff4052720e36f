"""
IndexController: lifecycle of the local vector engine.

Owns the vector engine of one workspace, feeds it the files selected by
FileDiscoveryEngine and shapes its query answers with ChunkAggregator.

The controller is an explicit handle: callers keep a reference to it
instead of looking up a process-wide instance, so several workspaces (or
tests) can each hold their own.

Precondition: index builds, updates and queries of one controller are
serialized by the caller (one build in flight per workspace). The
controller does not lock around the engine itself.

When the engine failed to start, or was disposed, every operation
degrades to an empty result so the editor keeps working with project
context disabled.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable

import structlog

from .config.schema import ContextConfig
from .indexer.discovery import FileDiscoveryEngine
from .indexer.roots import WorkspaceFolder, find_common_root
from .retrieval.aggregator import ChunkAggregator
from .retrieval.models import Chunk, RelevantDocument

logger = structlog.get_logger()

__all__ = [
    "EngineUnavailableError",
    "IndexController",
    "QueryInlineProjectContextResult",
    "QueryVectorIndexResult",
    "UpdateMode",
    "VectorEngine",
]

# Scope tag passed to the engine on a full build
INDEX_SCOPE_ALL = "all"


class EngineUnavailableError(RuntimeError):
    """The vector engine has not been started (or was disposed)."""


class UpdateMode(str, Enum):
    """Incremental index operations understood by the engine."""

    ADD = "add"
    REMOVE = "remove"
    UPDATE = "update"
    CONTEXT_COMMAND_SYMBOL_UPDATE = "context_command_symbol_update"


@runtime_checkable
class VectorEngine(Protocol):
    """Boundary of the external vector engine.

    Stores embeddings of the workspace files and answers similarity
    queries. ``clear()`` is optional and called on dispose when present.
    """

    def build_index(self, file_paths: list[str], root_dir: str, scope: str) -> None:
        ...

    def update_index(self, file_paths: list[str], mode: str) -> None:
        ...

    def query_vector_index(self, query: str) -> list[Chunk | Mapping[str, Any]]:
        ...

    def query_inline_project_context(self, query: str, file_path: str, target: str) -> list[Any]:
        ...


# Starts an engine for (client_name, workspace_root)
EngineFactory = Callable[[str, str], VectorEngine]


@dataclass
class QueryVectorIndexResult:
    chunks: list[Chunk] = field(default_factory=list)


@dataclass
class QueryInlineProjectContextResult:
    inline_project_context: list[Any] = field(default_factory=list)


class IndexController:
    """Builds and queries the local context index of a workspace."""

    def __init__(
        self,
        client_name: str,
        workspace_folders: list[WorkspaceFolder],
        config: ContextConfig | None = None,
        discovery: FileDiscoveryEngine | None = None,
        aggregator: ChunkAggregator | None = None,
    ) -> None:
        """Initialize the controller. The engine is started by ``init``.

        Args:
            client_name: Name of the editor client, forwarded to the engine
            workspace_folders: Folders of the workspace
            config: Context configuration; defaults apply when None
            discovery: File discovery engine (default: sequential walk)
            aggregator: Chunk aggregator (default language whitelist)
        """
        self.client_name = client_name
        self.workspace_folders = list(workspace_folders)
        self.config = config or ContextConfig()
        self.discovery = discovery or FileDiscoveryEngine()
        self.aggregator = aggregator or ChunkAggregator()
        self._engine: VectorEngine | None = None
        self.log = logger.bind(component="index_controller", client=client_name)

    # -- Lifecycle ---------------------------------------------------------

    @property
    def engine(self) -> VectorEngine:
        """The running vector engine.

        Raises:
            EngineUnavailableError: If the engine is not running.
        """
        if self._engine is None:
            raise EngineUnavailableError("Vector engine is not initialized")
        return self._engine

    @property
    def is_enabled(self) -> bool:
        return self._engine is not None

    def init(self, engine_factory: EngineFactory) -> list[str]:
        """Start the vector engine and build the initial index.

        A failure to start is logged; the controller then stays disabled.

        Args:
            engine_factory: Callable starting an engine for (client, root)

        Returns:
            Files handed to the engine (empty when disabled).
        """
        try:
            root = find_common_root(self.workspace_folders)
            self._engine = engine_factory(self.client_name, root)
            self.log.info("controller.engine_started", root=root)
        except Exception as e:
            self.log.error("controller.engine_failed", error=str(e))
        return self.update_configuration()

    def dispose(self) -> None:
        """Clear and release the vector engine."""
        if self._engine is None:
            return
        clear = getattr(self._engine, "clear", None)
        try:
            if callable(clear):
                clear()
        except Exception as e:
            self.log.error("controller.dispose_failed", error=str(e))
        finally:
            self._engine = None
            self.log.info("controller.disposed")

    # -- Index -------------------------------------------------------------

    def update_configuration(self, config: ContextConfig | None = None) -> list[str]:
        """Rediscover the workspace files and rebuild the whole index.

        Args:
            config: New context configuration; keeps the current one if None

        Returns:
            Files handed to the engine (empty when disabled or on error).
        """
        if config is not None:
            self.config = config

        try:
            engine = self.engine
        except EngineUnavailableError:
            self.log.debug("controller.build_skipped", reason="engine unavailable")
            return []

        try:
            cfg = self.config
            source_files = self.discovery.discover(
                self.workspace_folders,
                ignore_rules=cfg.ignore_file_patterns,
                include_symlinks=cfg.include_symlinks,
                file_extensions=cfg.file_extensions,
                max_file_size_mb=cfg.max_file_size_mb,
                max_index_size_mb=cfg.max_index_size_mb,
            )
            root = find_common_root(self.workspace_folders)
            engine.build_index(source_files, root, INDEX_SCOPE_ALL)
        except Exception as e:
            self.log.error("controller.build_failed", error=str(e))
            return []

        self.log.info("controller.index_built", files=len(source_files), root=root)
        return source_files

    def update_index(self, file_paths: list[str], mode: UpdateMode | str) -> None:
        """Apply an incremental change to the index.

        Raises:
            ValueError: If ``mode`` is not an UpdateMode value.
        """
        mode_value = UpdateMode(mode).value
        try:
            engine = self.engine
        except EngineUnavailableError:
            return

        try:
            engine.update_index(file_paths, mode_value)
            self.log.debug("controller.index_updated", files=len(file_paths), mode=mode_value)
        except Exception as e:
            self.log.error("controller.update_failed", mode=mode_value, error=str(e))

    # -- Queries -----------------------------------------------------------

    def query_vector_index(self, query: str) -> QueryVectorIndexResult:
        """Return the raw chunks most similar to ``query``."""
        try:
            response = self.engine.query_vector_index(query)
        except EngineUnavailableError:
            return QueryVectorIndexResult()
        except Exception as e:
            self.log.error("controller.query_vector_index_failed", error=str(e))
            return QueryVectorIndexResult()

        chunks = [
            item if isinstance(item, Chunk) else Chunk.from_dict(item)
            for item in response or []
        ]
        return QueryVectorIndexResult(chunks=chunks)

    def query_inline_project_context(
        self,
        query: str,
        file_path: str,
        target: str,
    ) -> QueryInlineProjectContextResult:
        """Return inline-completion context for ``file_path`` from the engine."""
        try:
            response = self.engine.query_inline_project_context(query, file_path, target)
        except EngineUnavailableError:
            return QueryInlineProjectContextResult()
        except Exception as e:
            self.log.error("controller.query_inline_context_failed", error=str(e))
            return QueryInlineProjectContextResult()

        return QueryInlineProjectContextResult(inline_project_context=list(response or []))

    def query_relevant_documents(self, query: str) -> list[RelevantDocument]:
        """Query the index and merge the chunks into per-file documents."""
        chunks = self.query_vector_index(query).chunks
        return self.aggregator.aggregate(chunks)
