"""Shared pytest fixtures and test helpers for grpcwiz tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from grpcwiz.config.settings import WizSettings
from grpcwiz.domain.descriptors import (
    FieldSpec,
    InterfaceDescriptor,
    MethodDescriptor,
    ModelDescriptor,
    ParamDescriptor,
    ReturnKind,
    ReturnSpec,
    ServiceDescriptor,
    TypeUniverse,
)
from grpcwiz.domain.types import parse_field_type

PEOPLE_YAML = """\
models:
  Person:
    fields:
      id: int32
      first_name: string
  EmptyRequest: {}
  IdRequest:
    fields:
      id: int32
  PeopleResponse:
    fields:
      people: list[Person]
  PersonResponse:
    fields:
      person: Person
services:
  PeopleService:
    interfaces:
      IPeopleService:
        get_all:
          params: {request: EmptyRequest}
          returns: awaitable[PeopleResponse]
        get_by_id:
          params: {request: IdRequest}
          returns: awaitable[PersonResponse]
"""


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def model(name: str, module: str | None = None, /, **fields: str) -> ModelDescriptor:
    """``model("Person", id="int32", nick="string?")`` with fields in keyword order."""
    specs = []
    for n, t in fields.items():
        ref, nullable = parse_field_type(t)
        specs.append(FieldSpec(name=n, type=ref, nullable=nullable))
    return ModelDescriptor(name=name, fields=tuple(specs), module=module)


def method(
    name: str,
    *params: str,
    returns: tuple[str, ...] = (),
    kind: ReturnKind = ReturnKind.AWAITABLE,
) -> MethodDescriptor:
    return MethodDescriptor(
        name=name,
        params=tuple(ParamDescriptor(name=f"arg{i}", type=t) for i, t in enumerate(params)),
        returns=ReturnSpec(kind=kind, types=returns),
    )


def service(
    name: str,
    *methods: MethodDescriptor,
    models: tuple[str, ...] = (),
    interface: str | None = None,
    module: str | None = None,
) -> ServiceDescriptor:
    iface = InterfaceDescriptor(name=interface or f"I{name}", methods=methods)
    return ServiceDescriptor(name=name, interfaces=(iface,), models=models, module=module)


def people_models(module: str | None = None) -> tuple[ModelDescriptor, ...]:
    return (
        model("Person", module, id="int32", first_name="string"),
        model("EmptyRequest", module),
        model("IdRequest", module, id="int32"),
        model("PeopleResponse", module, people="list[Person]"),
        model("PersonResponse", module, person="Person"),
    )


def people_service(module: str | None = None) -> ServiceDescriptor:
    return service(
        "PeopleService",
        method("get_all", "EmptyRequest", returns=("PeopleResponse",)),
        method("get_by_id", "IdRequest", returns=("PersonResponse",)),
        interface="IPeopleService",
        module=module,
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's GRPCWIZ_* environment out of the tests."""
    import os

    for key in list(os.environ):
        if key.startswith("GRPCWIZ_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def people_universe() -> TypeUniverse:
    """One PeopleService with two methods over five models."""
    return TypeUniverse(services=(people_service(),), models=people_models())


@pytest.fixture
def people_yaml(tmp_path: Path) -> Path:
    path = tmp_path / "people.yaml"
    path.write_text(PEOPLE_YAML, encoding="utf-8")
    return path


@pytest.fixture
def settings(tmp_path: Path) -> WizSettings:
    """Settings rooted at a temp project with no config file."""
    return WizSettings.from_cli(project_root=tmp_path)


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Change CWD to a temp project root so the CLI runs isolated."""
    monkeypatch.chdir(tmp_path)
    return tmp_path
