"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, grpcwiz.toml only contains
overrides.  A project that passes everything on the command line needs no
config file at all.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

DEFAULT_NAMESPACE = "grpc_generated"

# Lines stripped from copied model and service sources.
DEFAULT_MARKER_PATTERNS: tuple[str, ...] = (
    r"^\s*from\s+grpcwiz(\.\w+)*\s+import\b",
    r"^\s*import\s+grpcwiz\b",
    r"^\s*@\w+\.(model|interface|service)\b",
    r"^\s*\w+\s*=\s*(grpcwiz\.)?Registry\(\)\s*$",
)


# --- grpcwiz.toml sections ---


class GenerateConfig(BaseModel):
    """[generate] section."""

    model_config = {"frozen": True}

    namespace: str | None = None
    output: str | None = None
    proto_file: str = "wire.proto"
    descriptor: str | None = None


class SourcesConfig(BaseModel):
    """[sources] section.

    When set, model and service source files are copied into the output
    tree and the generated code imports them from there.
    """

    model_config = {"frozen": True}

    models_dir: str | None = None
    services_dir: str | None = None
    marker_patterns: tuple[str, ...] = DEFAULT_MARKER_PATTERNS


class VersionsConfig(BaseModel):
    """[versions] section."""

    model_config = {"frozen": True}

    resolve: bool = False
    index_url: str = "https://pypi.org/pypi"
    timeout: float = 5.0
    packages: tuple[str, ...] = ("grpcio", "grpcio-tools", "protobuf")
    fallback: dict[str, str] = Field(
        default_factory=lambda: {
            "grpcio": ">=1.60",
            "grpcio-tools": ">=1.60",
            "protobuf": ">=4.25",
        }
    )

