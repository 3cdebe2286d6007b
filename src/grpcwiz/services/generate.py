"""GenerateService: one generation run from type universe to files on disk.

Phases, strictly in order:

1. discovery and validation (:func:`~grpcwiz.services.discovery.discover`);
2. emission into an in-memory :class:`~grpcwiz.infrastructure.writer.ArtifactSet`,
   one service at a time in discovery order;
3. version lookup for the README;
4. a single commit to disk.

INVARIANT: a run either writes every artifact or none.  Any failure in
phases 1-3, or a set cancellation token, returns a failed ServiceResult
before the output tree is touched.
"""

from __future__ import annotations

import keyword
import logging
import re
import threading
import time
from pathlib import Path, PurePosixPath

import httpx

from grpcwiz.config.logging import run_context
from grpcwiz.config.settings import WizSettings
from grpcwiz.domain import naming
from grpcwiz.domain.descriptors import TypeUniverse
from grpcwiz.domain.errors import ErrorCode, GenerationCancelled, GenerationError
from grpcwiz.emitters.context import EmitContext
from grpcwiz.emitters.converters import WIRE_TIME_MODULE, ConverterEmitter, needs_wire_time
from grpcwiz.emitters.instructions import render_instructions
from grpcwiz.emitters.schema import SchemaEmitter, render_schema
from grpcwiz.emitters.services import AdapterEmitter, ProxyEmitter
from grpcwiz.infrastructure.sources import CopiedSource, collect_sources
from grpcwiz.infrastructure.writer import ArtifactSet, commit
from grpcwiz.infrastructure.versions import resolve_requirements
from grpcwiz.services.discovery import DiscoveryPlan, discover
from grpcwiz.services.result import ServiceResult, failure

logger = logging.getLogger(__name__)

SHARED_DIR = "shared"
CONVERTERS_DIR = "shared/converters"
MODELS_DIR = "shared/models"
SERVER_SERVICES_DIR = "server/services"
CLIENT_SERVICES_DIR = "client/services"
README = "README.txt"

_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Package directories and their __init__ docstrings.
_PACKAGES: dict[str, str] = {
    "": "Generated gRPC layer.",
    SHARED_DIR: "Schema and wire modules shared by server and client.",
    CONVERTERS_DIR: "Converters between domain models and wire messages.",
    "server": "Server side of the generated gRPC layer.",
    SERVER_SERVICES_DIR: "gRPC servicers adapting the domain services.",
    "client": "Client side of the generated gRPC layer.",
    CLIENT_SERVICES_DIR: "Clients exposing the domain interfaces over gRPC.",
    MODELS_DIR: "Domain models copied from the source tree.",
}


def validate_namespace(namespace: str) -> str:
    """Return *namespace* when it is a dotted Python identifier."""
    parts = namespace.split(".")
    for part in parts:
        if not _IDENT_RE.match(part) or keyword.iskeyword(part):
            raise GenerationError(
                ErrorCode.INVALID_NAMESPACE,
                f"Namespace must be a dotted Python identifier, got {namespace!r}",
                namespace=namespace,
            )
    return namespace


def default_output_root(namespace: str, base: Path | None = None) -> Path:
    """``acme.rpc`` -> ``<base>/acme/rpc``."""
    return (base or Path.cwd()).joinpath(*namespace.split("."))


def _check_cancel(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise GenerationCancelled()


class GenerateService:
    """Generation, validation, and schema preview over one settings object."""

    def __init__(
        self,
        settings: WizSettings | None = None,
        *,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._settings = settings or WizSettings()
        self._http_client = http_client

    # ── Public operations ─────────────────────────────────────────────

    def generate(
        self,
        universe: TypeUniverse,
        namespace: str,
        output_root: Path,
        *,
        cancel: threading.Event | None = None,
    ) -> ServiceResult:
        """Validate, emit, and write the full generated tree."""
        op = "generate"
        started = time.perf_counter()
        with run_context(op=op, namespace=namespace):
            try:
                artifacts, plan = self.build_artifacts(universe, namespace, cancel=cancel)
                _check_cancel(cancel)
                commit(artifacts, output_root)
            except GenerationError as exc:
                logger.warning("Generation failed: %s", exc.message)
                return failure(op, exc)

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "namespace": namespace,
                "output_root": str(output_root),
                "files": sorted(artifacts.paths()),
                "services": [record.name for record in plan.records],
                "messages": list(plan.messages),
                "schema": f"{SHARED_DIR}/{self._settings.generate.proto_file}",
            },
            warnings=_unused_warnings(plan),
            meta={"duration_ms": round((time.perf_counter() - started) * 1000, 2)},
        )

    def check(self, universe: TypeUniverse) -> ServiceResult:
        """Run discovery and validation only, and summarize the records."""
        op = "check"
        try:
            plan = discover(universe)
        except GenerationError as exc:
            return failure(op, exc)

        services = [
            {
                "name": record.name,
                "short_name": record.short_name,
                "interface": record.interface.name,
                "methods": [
                    {
                        "name": method.name,
                        "rpc": naming.rpc_name(method.name),
                        "request": method.params[0].type,
                        "response": method.returns.types[0],
                    }
                    for method in record.methods
                ],
                "models": list(record.referenced_models),
            }
            for record in plan.records
        ]
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "services": services,
                "messages": plan.message_order(),
                "unused_models": list(plan.unused_models),
            },
            warnings=_unused_warnings(plan),
        )

    def render_schema(self, universe: TypeUniverse, namespace: str) -> ServiceResult:
        """Return the schema text without writing anything."""
        op = "schema"
        try:
            validate_namespace(namespace)
            plan = discover(universe)
            text = render_schema(plan.records, plan.messages, self._context(namespace))
        except GenerationError as exc:
            return failure(op, exc)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "namespace": namespace,
                "proto_file": self._settings.generate.proto_file,
                "schema": text,
                "messages": list(plan.messages),
            },
        )

    def versions(self) -> ServiceResult:
        """Requirement lines for the generated code's runtime packages."""
        op = "versions"
        config = self._settings.versions
        try:
            lines = resolve_requirements(config, client=self._http_client)
        except GenerationError as exc:
            return failure(op, exc)
        return ServiceResult(
            ok=True,
            op=op,
            data={"requirements": lines, "resolved": config.resolve},
        )

    # ── Emission ──────────────────────────────────────────────────────

    def build_artifacts(
        self,
        universe: TypeUniverse,
        namespace: str,
        *,
        cancel: threading.Event | None = None,
    ) -> tuple[ArtifactSet, DiscoveryPlan]:
        """Compute every artifact in memory.

        Raises:
            GenerationError: On any validation, emission, or lookup failure.
        """
        validate_namespace(namespace)
        plan = discover(universe)

        models = self._copied(self._settings.sources.models_dir, MODELS_DIR, namespace)
        services = self._copied(self._settings.sources.services_dir, SERVER_SERVICES_DIR, namespace)
        ctx = self._context(namespace, models_copied=bool(models), services_copied=bool(services))

        artifacts = ArtifactSet()
        schema = SchemaEmitter(ctx)
        converters = ConverterEmitter(ctx)
        adapters = AdapterEmitter(ctx)
        proxies = ProxyEmitter(ctx)

        for record in plan.records:
            _check_cancel(cancel)
            block = schema.emit_service(record, plan.messages)
            for message in block.messages:
                module = converters.emit(message)
                artifacts.add(f"{CONVERTERS_DIR}/{module.module}.py", module.text)
            artifacts.add(
                f"{SERVER_SERVICES_DIR}/{naming.adapter_module(record.short_name)}.py",
                adapters.emit(record, plan.messages),
            )
            artifacts.add(
                f"{CLIENT_SERVICES_DIR}/{naming.proxy_module(record.short_name)}.py",
                proxies.emit(record, plan.messages),
            )
            logger.info("Emitted %s", record.name)

        _check_cancel(cancel)
        artifacts.add(f"{SHARED_DIR}/{ctx.proto_file}", schema.render())
        if needs_wire_time(plan.messages.values()):
            artifacts.add(f"{CONVERTERS_DIR}/{WIRE_TIME_MODULE}.py", converters.emit_wire_time())

        for source in (*models, *services):
            artifacts.add(source.relpath, source.text)

        requirements = resolve_requirements(self._settings.versions, client=self._http_client)
        artifacts.add(README, render_instructions(plan.records, plan.messages, ctx, requirements))

        self._add_packages(artifacts, ctx, models=models, services=services)
        return artifacts, plan

    def _context(
        self,
        namespace: str,
        *,
        models_copied: bool = False,
        services_copied: bool = False,
    ) -> EmitContext:
        return EmitContext(
            namespace=namespace,
            proto_file=self._settings.generate.proto_file,
            project_root=self._settings.project_root,
            models_copied=models_copied,
            services_copied=services_copied,
        )

    def _copied(self, source_dir: str | None, target: str, namespace: str) -> list[CopiedSource]:
        if source_dir is None:
            return []
        package = ".".join((namespace, *PurePosixPath(target).parts))
        return collect_sources(
            self._settings.resolve_path(source_dir),
            target,
            package=package,
            patterns=self._settings.sources.marker_patterns,
        )

    def _add_packages(
        self,
        artifacts: ArtifactSet,
        ctx: EmitContext,
        *,
        models: list[CopiedSource],
        services: list[CopiedSource],
    ) -> None:
        """Emit ``__init__.py`` for every package directory that has files."""
        template = ctx.environment("packages").get_template("__init__.py.j2")
        exports: dict[str, list[str]] = {
            MODELS_DIR: [s.module for s in models if s.relpath.parent == PurePosixPath(MODELS_DIR)],
            SERVER_SERVICES_DIR: [
                s.module for s in services if s.relpath.parent == PurePosixPath(SERVER_SERVICES_DIR)
            ],
        }
        occupied = {str(PurePosixPath(p).parent) for p in artifacts.paths()}
        for directory, description in _PACKAGES.items():
            relpath = f"{directory}/__init__.py" if directory else "__init__.py"
            if directory and not any(
                d == directory or d.startswith(f"{directory}/") for d in occupied
            ):
                continue
            if relpath in artifacts:
                continue
            artifacts.add(
                relpath,
                template.render(description=description, exports=exports.get(directory, [])),
            )
        # Nested source subpackages need their own markers.
        for source in (*models, *services):
            parent = source.relpath.parent
            while str(parent) not in _PACKAGES and str(parent) != ".":
                relpath = f"{parent}/__init__.py"
                if relpath not in artifacts:
                    text = template.render(description="Copied sources.", exports=[])
                    artifacts.add(relpath, text)
                parent = parent.parent


def _unused_warnings(plan: DiscoveryPlan) -> list[str]:
    return [f"Model {name} is not referenced by any service" for name in plan.unused_models]


def generate(
    universe: TypeUniverse,
    namespace: str,
    output_root: Path,
    *,
    settings: WizSettings | None = None,
    cancel: threading.Event | None = None,
) -> ServiceResult:
    """Run one generation with a fresh :class:`GenerateService`."""
    return GenerateService(settings).generate(universe, namespace, output_root, cancel=cancel)
