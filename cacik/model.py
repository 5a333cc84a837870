"""In-memory model of a parsed Gherkin document."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Union


@dataclass
class DataTable:
    """A table attached to a step or an Examples block, as rows of cell strings."""

    rows: list[list[str]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[list[str]]:
        return iter(self.rows)


@dataclass
class Step:
    """A single Gherkin step; the keyword keeps its trailing space, e.g. ``"Given "``."""

    text: str
    keyword: str = ""
    data_table: Optional[DataTable] = None
    doc_string: Optional[str] = None
    line: int = 0


@dataclass
class Background:
    steps: list[Step] = field(default_factory=list)
    name: str = ""
    line: int = 0


@dataclass
class Scenario:
    steps: list[Step] = field(default_factory=list)
    name: str = ""
    keyword: str = "Scenario"
    tags: list[str] = field(default_factory=list)
    examples: list[DataTable] = field(default_factory=list)
    line: int = 0


@dataclass
class Rule:
    children: list[Union[Background, Scenario]] = field(default_factory=list)
    name: str = ""
    tags: list[str] = field(default_factory=list)
    line: int = 0


@dataclass
class Feature:
    children: list[Union[Background, Scenario, Rule]] = field(default_factory=list)
    name: str = ""
    tags: list[str] = field(default_factory=list)
    description: str = ""
    line: int = 0


@dataclass
class GherkinDocument:
    feature: Optional[Feature] = None
    uri: Optional[str] = None