"""Tests for turning a descriptor file or registry reference into a TypeUniverse."""

import sys
from pathlib import Path

import pytest

from grpcwiz.domain.errors import DescriptorError, ErrorCode
from grpcwiz.services.loading import load_registry, load_universe

REGISTRY_MODULE = """\
from dataclasses import dataclass

from grpcwiz.domain.descriptors import TypeUniverse
from grpcwiz.registry import Registry

wiz = Registry()


@wiz.model
@dataclass
class Ping:
    id: int = 0


def build():
    return wiz


def broken():
    return 42


universe = TypeUniverse()
holder = type("Holder", (), {"wiz": wiz})
not_a_registry = 42
"""


@pytest.fixture
def registry_module(tmp_path: Path, request: pytest.FixtureRequest) -> str:
    """Write a registry module with a per-test name and return that name."""
    name = f"wizreg_{request.node.name.replace('[', '_').replace(']', '_')}"
    (tmp_path / f"{name}.py").write_text(REGISTRY_MODULE, encoding="utf-8")
    return name


class TestLoadRegistry:
    def test_registry_attribute(self, registry_module: str, tmp_path: Path) -> None:
        universe = load_registry(f"{registry_module}:wiz", search_path=tmp_path)
        assert [m.name for m in universe.models] == ["Ping"]

    def test_callable(self, registry_module: str, tmp_path: Path) -> None:
        universe = load_registry(f"{registry_module}:build", search_path=tmp_path)
        assert universe.model_named("Ping") is not None

    def test_universe_attribute(self, registry_module: str, tmp_path: Path) -> None:
        assert load_registry(f"{registry_module}:universe", search_path=tmp_path).is_empty

    def test_dotted_attribute(self, registry_module: str, tmp_path: Path) -> None:
        universe = load_registry(f"{registry_module}:holder.wiz", search_path=tmp_path)
        assert universe.models[0].name == "Ping"

    def test_search_path_removed_afterwards(self, registry_module: str, tmp_path: Path) -> None:
        load_registry(f"{registry_module}:wiz", search_path=tmp_path)
        assert str(tmp_path) not in sys.path

    @pytest.mark.parametrize("attr", ["not_a_registry", "broken"])
    def test_wrong_target(self, registry_module: str, tmp_path: Path, attr: str) -> None:
        with pytest.raises(DescriptorError, match="is not a Registry"):
            load_registry(f"{registry_module}:{attr}", search_path=tmp_path)

    def test_missing_attribute(self, registry_module: str, tmp_path: Path) -> None:
        with pytest.raises(DescriptorError, match="has no attribute"):
            load_registry(f"{registry_module}:nothing", search_path=tmp_path)

    def test_missing_module(self, tmp_path: Path) -> None:
        with pytest.raises(DescriptorError) as excinfo:
            load_registry("no_such_module_anywhere:wiz", search_path=tmp_path)
        assert excinfo.value.code is ErrorCode.INVALID_DESCRIPTOR

    @pytest.mark.parametrize("ref", ["module", "module:", ":attr"])
    def test_malformed_reference(self, ref: str) -> None:
        with pytest.raises(DescriptorError, match="module:attr"):
            load_registry(ref)


class TestLoadUniverse:
    def test_descriptor(self, people_yaml: Path) -> None:
        universe = load_universe(descriptor=people_yaml)
        assert universe.services[0].name == "PeopleService"

    def test_both_inputs(self, people_yaml: Path) -> None:
        with pytest.raises(DescriptorError, match="not both"):
            load_universe(descriptor=people_yaml, registry="mod:wiz")

    def test_no_input(self) -> None:
        with pytest.raises(DescriptorError, match="No input"):
            load_universe()
