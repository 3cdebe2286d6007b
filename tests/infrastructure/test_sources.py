"""Tests for copying user sources into the generated tree."""

from pathlib import Path, PurePosixPath

import pytest

from grpcwiz.config.models import DEFAULT_MARKER_PATTERNS
from grpcwiz.domain.errors import ErrorCode, GenerationError
from grpcwiz.infrastructure.sources import collect_sources, strip_markers

MODELS_SOURCE = """\
from dataclasses import dataclass

from grpcwiz.registry import Int32, Registry
import grpcwiz

wiz = Registry()


@wiz.model
@dataclass
class Person:
    id: Int32 = 0
    ratio: Float32 = 0.0
    first_name: str = ""
"""


class TestStripMarkers:
    def test_drops_marker_lines(self) -> None:
        text = strip_markers(MODELS_SOURCE, DEFAULT_MARKER_PATTERNS)
        assert "grpcwiz" not in text
        assert "Registry" not in text
        assert "@wiz.model" not in text
        assert "@dataclass\nclass Person:" in text

    def test_rewrites_width_aliases(self) -> None:
        text = strip_markers(MODELS_SOURCE, DEFAULT_MARKER_PATTERNS)
        assert "    id: int = 0\n" in text
        assert "    ratio: float = 0.0\n" in text

    def test_alias_rewrite_respects_word_boundaries(self) -> None:
        assert strip_markers("MyInt32Thing = 1\n", ()) == "MyInt32Thing = 1\n"

    def test_custom_patterns(self) -> None:
        assert strip_markers("keep\n# drop me\n", [r"^# drop"]) == "keep\n"


class TestCollectSources:
    def test_collects_tree(self, tmp_path: Path) -> None:
        src = tmp_path / "models"
        (src / "billing").mkdir(parents=True)
        (src / "__init__.py").write_text("", encoding="utf-8")
        (src / "people.py").write_text(MODELS_SOURCE, encoding="utf-8")
        (src / "billing" / "invoice.py").write_text("class Invoice: ...\n", encoding="utf-8")
        (src / "__pycache__").mkdir()
        (src / "__pycache__" / "junk.py").write_text("", encoding="utf-8")

        copied = collect_sources(
            src, "shared/models", package="acme.shared.models", patterns=DEFAULT_MARKER_PATTERNS
        )
        assert [c.relpath for c in copied] == [
            PurePosixPath("shared/models/billing/invoice.py"),
            PurePosixPath("shared/models/people.py"),
        ]
        assert [c.module for c in copied] == [
            "acme.shared.models.billing.invoice",
            "acme.shared.models.people",
        ]
        assert "Registry" not in copied[1].text

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(GenerationError) as excinfo:
            collect_sources(tmp_path / "nope", "shared/models", package="acme", patterns=())
        assert excinfo.value.code is ErrorCode.WRITE_FAILED
        assert "Source directory not found" in excinfo.value.message
