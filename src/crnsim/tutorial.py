"""Keep the markdown tutorial and its notebook rendering consistent.

The tutorial exists twice: as narrative markdown with fenced ``python``
blocks, and as a Jupyter notebook (nbformat 4 JSON) with one code cell per
block. The helpers here render the former into the latter and check that

- both contain the same code, in the same order,
- every code block parses on its own, and
- the example initial conditions / parameter vectors fit their networks.
"""

from __future__ import annotations

import ast
import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence, Tuple, Union

from .examples import get_example, list_available_networks
from .exceptions import ProblemDefinitionError
from .problems import resolve_values

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```[ \t]*([\w+-]*)[^\n]*\n(.*?)^```[ \t]*$", re.MULTILINE | re.DOTALL)

PYTHON_LANGUAGES = ("python", "py", "python3")

NOTEBOOK_METADATA: Dict[str, Any] = {
    "kernelspec": {"display_name": "Python 3", "language": "python", "name": "python3"},
    "language_info": {"name": "python", "pygments_lexer": "ipython3"},
}


def _normalize(code: str) -> str:
    return "\n".join(line.rstrip() for line in code.strip("\n").splitlines())


def _source_lines(text: str) -> List[str]:
    """Notebook-style source: lines keep their newline except the last."""
    lines = text.splitlines(keepends=True)
    if lines:
        lines[-1] = lines[-1].rstrip("\n")
    return lines


def extract_markdown_code(text: str, languages: Sequence[str] = PYTHON_LANGUAGES) -> List[str]:
    """Return the fenced code blocks tagged with one of `languages`, in order."""
    return [
        _normalize(m.group(2))
        for m in _FENCE_RE.finditer(text)
        if m.group(1).lower() in languages
    ]


def extract_notebook_code(notebook: Mapping[str, Any]) -> List[str]:
    """Return the source of every code cell, in order."""
    out: List[str] = []
    for cell in notebook.get("cells", []):
        if cell.get("cell_type") != "code":
            continue
        source = cell.get("source", "")
        if not isinstance(source, str):
            source = "".join(source)
        out.append(_normalize(source))
    return out


def load_notebook(path: Union[str, Path]) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def markdown_to_notebook(text: str) -> Dict[str, Any]:
    """Render markdown with fenced python blocks as an nbformat 4 notebook."""
    cells: List[Dict[str, Any]] = []

    def add_markdown(chunk: str) -> None:
        chunk = chunk.strip("\n")
        if chunk.strip():
            cells.append(
                {
                    "cell_type": "markdown",
                    "id": f"cell-{len(cells)}",
                    "metadata": {},
                    "source": _source_lines(chunk),
                }
            )

    pos = 0
    for m in _FENCE_RE.finditer(text):
        if m.group(1).lower() not in PYTHON_LANGUAGES:
            continue
        add_markdown(text[pos : m.start()])
        cells.append(
            {
                "cell_type": "code",
                "execution_count": None,
                "id": f"cell-{len(cells)}",
                "metadata": {},
                "outputs": [],
                "source": _source_lines(_normalize(m.group(2))),
            }
        )
        pos = m.end()
    add_markdown(text[pos:])

    return {"cells": cells, "metadata": dict(NOTEBOOK_METADATA), "nbformat": 4, "nbformat_minor": 5}


def write_notebook(markdown_path: Union[str, Path], notebook_path: Union[str, Path]) -> Path:
    """Render the markdown tutorial at `markdown_path` into `notebook_path`."""
    text = Path(markdown_path).read_text(encoding="utf-8")
    notebook = markdown_to_notebook(text)
    notebook_path = Path(notebook_path)
    notebook_path.write_text(json.dumps(notebook, indent=1, ensure_ascii=False) + "\n", encoding="utf-8")
    logger.info("Wrote %d cells to %s", len(notebook["cells"]), notebook_path)
    return notebook_path


def check_syntax(blocks: Sequence[str]) -> List[str]:
    """Parse every block on its own; return one message per failing block."""
    errors: List[str] = []
    for i, code in enumerate(blocks):
        try:
            ast.parse(code)
        except SyntaxError as exc:
            errors.append(f"block {i+1}, line {exc.lineno}: {exc.msg}")
    return errors


def compare_code_cells(markdown_blocks: Sequence[str], notebook_blocks: Sequence[str]) -> List[str]:
    """Describe every position where the two code sequences differ."""
    mismatches: List[str] = []
    if len(markdown_blocks) != len(notebook_blocks):
        mismatches.append(
            f"markdown has {len(markdown_blocks)} code blocks, notebook has {len(notebook_blocks)} code cells"
        )
    for i, (md, nb) in enumerate(zip(markdown_blocks, notebook_blocks)):
        if _normalize(md) != _normalize(nb):
            first = md.strip().splitlines()[0] if md.strip() else "<empty>"
            mismatches.append(f"code block {i+1} differs (markdown starts with {first!r})")
    return mismatches


def check_example_dimensions() -> List[str]:
    """Check every built-in example's u0 / p against its species / parameters."""
    errors: List[str] = []
    for name in list_available_networks():
        network, setup = get_example(name)
        for values, names, what in (
            (setup.u0, network.species_names, "species"),
            (setup.p, network.parameter_names, "parameter"),
        ):
            try:
                resolve_values(values, names, what)
            except ProblemDefinitionError as exc:
                errors.append(f"{name}: {exc}")
    return errors


@dataclass
class TutorialCheck:
    """Outcome of `check_tutorial`."""

    markdown_blocks: int
    notebook_cells: int
    mismatches: List[str] = field(default_factory=list)
    syntax_errors: List[str] = field(default_factory=list)
    dimension_errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not (self.mismatches or self.syntax_errors or self.dimension_errors)

    def problems(self) -> List[Tuple[str, str]]:
        return (
            [("mismatch", m) for m in self.mismatches]
            + [("syntax", m) for m in self.syntax_errors]
            + [("dimensions", m) for m in self.dimension_errors]
        )


def check_tutorial(markdown_path: Union[str, Path], notebook_path: Union[str, Path]) -> TutorialCheck:
    """Run every content-consistency check on a tutorial pair."""
    md_blocks = extract_markdown_code(Path(markdown_path).read_text(encoding="utf-8"))
    nb_blocks = extract_notebook_code(load_notebook(notebook_path))
    result = TutorialCheck(
        markdown_blocks=len(md_blocks),
        notebook_cells=len(nb_blocks),
        mismatches=compare_code_cells(md_blocks, nb_blocks),
        syntax_errors=check_syntax(md_blocks),
        dimension_errors=check_example_dimensions(),
    )
    if not result.ok:
        logger.warning("Tutorial check found %d problem(s)", len(result.problems()))
    return result
