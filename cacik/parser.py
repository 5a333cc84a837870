"""Discovery and parsing of ``.feature`` files."""

from __future__ import annotations

import os
import stat
from typing import IO, Iterator, Optional, Union

from .model import Background, DataTable, Feature, GherkinDocument, Rule, Scenario, Step

FEATURE_EXTENSION = ".feature"

_STEP_KEYWORDS = ("Given ", "When ", "Then ", "And ", "But ", "* ")

_HEADERS = (
    ("Feature:", "feature"),
    ("Background:", "background"),
    ("Scenario Outline:", "scenario"),
    ("Scenario Template:", "scenario"),
    ("Scenario:", "scenario"),
    ("Example:", "scenario"),
    ("Rule:", "rule"),
    ("Examples:", "examples"),
    ("Scenarios:", "examples"),
)


class GherkinParseError(ValueError):
    """Raised when Gherkin text is malformed."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        super().__init__(f"({line}) {message}" if line is not None else message)


def _walk(path: str) -> Iterator[str]:
    info = os.lstat(path)
    if not stat.S_ISDIR(info.st_mode):
        if os.path.basename(path).endswith(FEATURE_EXTENSION):
            yield path
        return
    for name in sorted(os.listdir(path)):
        yield from _walk(os.path.join(path, name))


def search_feature_files_in(directories) -> list[str]:
    """Return every ``.feature`` file under the given directories, in lexical walk order."""
    found: list[str] = []
    for directory in directories:
        found.extend(_walk(directory))
    return found


def parse_gherkin_file(reader: IO) -> GherkinDocument:
    """Parse Gherkin from a readable text or binary stream."""
    content = reader.read()
    if isinstance(content, bytes):
        content = content.decode("utf-8")
    return parse_gherkin_text(content)


def parse_gherkin_text(text: str) -> GherkinDocument:
    """Parse Gherkin source text into a document."""
    return _Parser().parse(text)


def _split_cells(line: str, lineno: int) -> list[str]:
    body = line.strip()
    if not body.endswith("|") or len(body) < 2:
        raise GherkinParseError("table row must end with '|'", lineno)
    escapes = {"n": "\n", "|": "|", "\\": "\\"}
    cells: list[str] = []
    current: list[str] = []
    chars = iter(body[1:])
    for ch in chars:
        if ch == "\\":
            nxt = next(chars, "")
            current.append(escapes.get(nxt, "\\" + nxt))
        elif ch == "|":
            cells.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    return cells


class _Parser:
    def __init__(self) -> None:
        self.feature: Optional[Feature] = None
        self.rule: Optional[Rule] = None
        self.holder: Optional[Union[Background, Scenario]] = None
        self.step: Optional[Step] = None
        self.table: Optional[DataTable] = None
        self.tags: list[str] = []
        self.description_allowed = False

    def parse(self, text: str) -> GherkinDocument:
        lines = iter(enumerate(text.splitlines(), 1))
        for lineno, raw in lines:
            stripped = raw.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if stripped.startswith("@"):
                self._tags(stripped, lineno)
            elif stripped.startswith("|"):
                self._row(stripped, lineno)
            elif stripped.startswith('"""') or stripped.startswith("```"):
                self._doc_string(raw, lineno, lines)
            elif (header := self._header(stripped)) is not None:
                self._start(*header, lineno)
            elif (step := self._step_keyword(stripped)) is not None:
                self._add_step(step[0], step[1], lineno)
            elif self.description_allowed:
                if self.feature is not None and self.holder is None and self.rule is None:
                    sep = "\n" if self.feature.description else ""
                    self.feature.description += sep + stripped
            else:
                raise GherkinParseError(f"unexpected line: {stripped!r}", lineno)
        return GherkinDocument(feature=self.feature)

    @staticmethod
    def _header(line: str) -> Optional[tuple[str, str, str]]:
        for prefix, kind in _HEADERS:
            if line.startswith(prefix):
                return kind, prefix[:-1], line[len(prefix):].strip()
        return None

    @staticmethod
    def _step_keyword(line: str) -> Optional[tuple[str, str]]:
        for keyword in _STEP_KEYWORDS:
            if line.startswith(keyword):
                return keyword, line[len(keyword):].strip()
        return None

    def _tags(self, line: str, lineno: int) -> None:
        content = line.split(" #", 1)[0]
        for token in content.split():
            if not token.startswith("@") or len(token) < 2:
                raise GherkinParseError(f"invalid tag: {token!r}", lineno)
            self.tags.append(token)

    def _start(self, kind: str, keyword: str, name: str, lineno: int) -> None:
        tags, self.tags = self.tags, []
        self.step = None
        self.table = None
        self.description_allowed = True
        if kind == "feature":
            if self.feature is not None:
                raise GherkinParseError("only one Feature is allowed", lineno)
            self.feature = Feature(name=name, tags=tags, line=lineno)
            self.holder = None
            return
        if self.feature is None:
            raise GherkinParseError(f"expected Feature before {keyword}", lineno)
        container = self.rule if self.rule is not None else self.feature
        if kind == "background":
            background = Background(name=name, line=lineno)
            container.children.append(background)
            self.holder = background
        elif kind == "scenario":
            scenario = Scenario(name=name, keyword=keyword, tags=tags, line=lineno)
            container.children.append(scenario)
            self.holder = scenario
        elif kind == "rule":
            self.rule = Rule(name=name, tags=tags, line=lineno)
            self.feature.children.append(self.rule)
            self.holder = None
        else:
            if not isinstance(self.holder, Scenario):
                raise GherkinParseError("Examples must follow a Scenario", lineno)
            self.table = DataTable()
            self.holder.examples.append(self.table)

    def _add_step(self, keyword: str, text: str, lineno: int) -> None:
        if self.holder is None:
            raise GherkinParseError("step outside of a Scenario or Background", lineno)
        if self.holder.line and isinstance(self.holder, Scenario) and self.holder.examples:
            raise GherkinParseError("step after Examples", lineno)
        self.step = Step(text=text, keyword=keyword, line=lineno)
        self.holder.steps.append(self.step)
        self.table = None
        self.description_allowed = False

    def _row(self, line: str, lineno: int) -> None:
        cells = _split_cells(line, lineno)
        if self.table is None:
            if self.step is None or self.step.data_table is not None or self.step.doc_string is not None:
                raise GherkinParseError("table row without a step", lineno)
            self.table = DataTable()
            self.step.data_table = self.table
        if self.table.rows and len(self.table.rows[0]) != len(cells):
            raise GherkinParseError("inconsistent cell count within the table", lineno)
        self.table.rows.append(cells)
        self.description_allowed = False

    def _doc_string(self, raw: str, lineno: int, lines) -> None:
        if self.step is None or self.step.data_table is not None or self.step.doc_string is not None:
            raise GherkinParseError("doc string without a step", lineno)
        stripped = raw.strip()
        delimiter = stripped[:3]
        indent = len(raw) - len(raw.lstrip())
        content: list[str] = []
        for _, line in lines:
            if line.strip() == delimiter:
                self.step.doc_string = "\n".join(content)
                self.table = None
                return
            leading = len(line) - len(line.lstrip(" "))
            line = line[min(indent, leading):]
            content.append(line.replace("\\" + delimiter[0] * 3, delimiter))
        raise GherkinParseError("unterminated doc string", lineno)