"""Shared fixtures: build source models from inline Java."""

from __future__ import annotations

from typing import Callable

import pytest

from dbinfo.models import SourceModel, TypeElement
from dbinfo.parsing.model_builder import SourceModelBuilder


@pytest.fixture(scope="session")
def builder() -> SourceModelBuilder:
    return SourceModelBuilder()


@pytest.fixture
def build_model(builder: SourceModelBuilder) -> Callable[..., SourceModel]:
    """Build a SourceModel from ``name -> java source`` keyword arguments."""

    def _build(**sources: str) -> SourceModel:
        return builder.build_from_sources((f"{name}.java", text) for name, text in sources.items())

    return _build


def type_named(model: SourceModel, qualified_name: str) -> TypeElement:
    return next(t for t in model.types if t.qualified_name == qualified_name)
