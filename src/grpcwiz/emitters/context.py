"""Import paths and template access shared by every emitter."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from jinja2 import Environment

from grpcwiz.domain import naming
from grpcwiz.infrastructure.templates import build_template_environment, default_environment


@dataclass(frozen=True)
class EmitContext:
    """Where generated code lives, as seen from generated imports.

    Attributes:
        namespace: Dotted package the output root is importable as.
        proto_file: Schema file name under ``shared/``.
        project_root: Enables ``.grpcwiz/templates`` overrides when set.
        models_copied: Models were copied under ``shared/models`` and are
            imported from there.
        services_copied: Same for services under ``server/services``.
    """

    namespace: str
    proto_file: str = "wire.proto"
    project_root: Path | None = None
    models_copied: bool = False
    services_copied: bool = False

    @property
    def shared_package(self) -> str:
        return f"{self.namespace}.shared"

    @property
    def proto_package(self) -> str:
        return self.shared_package

    @property
    def converters_package(self) -> str:
        return f"{self.namespace}.shared.converters"

    @property
    def models_package(self) -> str:
        return f"{self.namespace}.shared.models"

    @property
    def services_package(self) -> str:
        return f"{self.namespace}.server.services"

    @property
    def pb2(self) -> str:
        return naming.proto_module(self.proto_file)

    @property
    def pb2_grpc(self) -> str:
        return naming.proto_grpc_module(self.proto_file)

    def model_module(self, module: str | None) -> str:
        """Import path of a domain model; copied models are the fallback."""
        if self.models_copied or module is None:
            return self.models_package
        return module

    def service_module(self, module: str | None) -> str:
        if self.services_copied or module is None:
            return self.services_package
        return module

    def environment(self, group: str) -> Environment:
        if self.project_root is None:
            return default_environment(group)
        return build_template_environment(group, project_root=self.project_root)
