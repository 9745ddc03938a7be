"""Tests for lexical structure extraction."""

from __future__ import annotations

from diff_sense.structure import (
    RegexStructureExtractor,
    complexity_bucket,
    count_decision_points,
    find_nested_loops,
    strip_line_comment,
)

SCRIPT_SOURCE = """\
import express from "express";
import { helper } from "./utils";
const fs = require("fs");

/** Greets. */
export function greet(name) {
  if (name) {
    return `hi ${name}`;
  }
  return "hi";
}

export const add = (a, b) => a + b;

export class Service extends Base implements Runner {
  count = 0;
  async run(job) {
    for (const item of job.items) {
      if (item) {
        this.count++;
      }
    }
  }
}

app.get("/users", listUsers);
export default Service;
"""

PYTHON_SOURCE = '''\
import os
from .models import User, Group as G
from fastapi import APIRouter

router = APIRouter()


class Repo(Base, Mixin):
    table = "users"

    def __init__(self, db):
        self.db = db

    async def fetch(self, user_id):
        """Fetch one user."""
        if user_id is None:
            return None
        return await self.db.get(user_id)


@router.get("/users")
def list_users():
    return []


__all__ = ["Repo", "list_users"]
'''


def test_script_imports_and_framework() -> None:
    structure = RegexStructureExtractor().extract(SCRIPT_SOURCE, "javascript")

    imports = {item.module: item for item in structure.imports}
    assert set(imports) == {"express", "./utils", "fs"}
    assert imports["./utils"].is_local is True
    assert imports["./utils"].names == ["helper"]
    assert imports["fs"].names == ["fs"]
    assert structure.framework == "express"


def test_script_functions_classes_and_routes() -> None:
    structure = RegexStructureExtractor().extract(SCRIPT_SOURCE, "javascript")

    functions = {item.name: item for item in structure.functions}
    assert set(functions) == {"greet", "add"}
    assert functions["greet"].line == 6
    assert functions["greet"].documented is True
    assert functions["greet"].decision_points == 1
    assert functions["greet"].length == 6
    assert functions["add"].documented is False

    assert len(structure.classes) == 1
    service = structure.classes[0]
    assert service.name == "Service"
    assert service.superclass == "Base"
    assert service.interfaces == ["Runner"]
    assert service.methods == ["run"]
    assert service.properties == ["count"]

    run = structure.methods[0]
    assert run.is_async is True
    assert run.decision_points == 2

    assert [(route.method, route.path, route.handler) for route in structure.routes] == [
        ("GET", "/users", "listUsers")
    ]


def test_script_exports_resolve_kinds() -> None:
    structure = RegexStructureExtractor().extract(SCRIPT_SOURCE, "javascript")

    exports = [(item.name, item.kind, item.is_default) for item in structure.exports]
    assert exports == [
        ("greet", "function", False),
        ("add", "function", False),
        ("Service", "class", False),
        ("Service", "class", True),
    ]


def test_python_structure() -> None:
    structure = RegexStructureExtractor().extract(PYTHON_SOURCE, "python")

    assert [item.module for item in structure.imports] == ["os", ".models", "fastapi"]
    assert structure.imports[1].names == ["User", "G"]
    assert structure.imports[1].is_local is True
    assert structure.framework == "fastapi"

    repo = structure.classes[0]
    assert repo.name == "Repo"
    assert repo.line == 8
    assert repo.superclass == "Base"
    assert repo.interfaces == ["Mixin"]
    assert repo.methods == ["__init__", "fetch"]
    assert repo.properties == ["table", "db"]

    methods = {item.name: item for item in structure.methods}
    assert methods["fetch"].is_async is True
    assert methods["fetch"].documented is True
    assert methods["__init__"].documented is False

    assert [item.name for item in structure.functions] == ["list_users"]
    assert structure.functions[0].line == 22
    assert [(route.method, route.path, route.handler) for route in structure.routes] == [
        ("GET", "/users", "list_users")
    ]
    assert {(item.name, item.kind) for item in structure.exports} == {
        ("Repo", "class"),
        ("list_users", "function"),
    }


def test_flask_route_methods() -> None:
    source = "\n".join(
        [
            '@app.route("/items", methods=["GET", "POST"])',
            "def items():",
            "    return []",
        ]
    )
    structure = RegexStructureExtractor().extract(source, "python")
    assert [(route.method, route.path) for route in structure.routes] == [
        ("GET", "/items"),
        ("POST", "/items"),
    ]


def test_unsupported_language_yields_empty_structure() -> None:
    structure = RegexStructureExtractor().extract("fn main() {}\n", "rust")
    assert structure.language == "rust"
    assert structure.functions == []
    assert structure.exports == []
    assert structure.framework is None


def test_complexity_bucket_boundaries() -> None:
    assert complexity_bucket(0) == "low"
    assert complexity_bucket(4) == "low"
    assert complexity_bucket(5) == "medium"
    assert complexity_bucket(10) == "medium"
    assert complexity_bucket(11) == "high"


def test_count_decision_points_ignores_comments() -> None:
    assert count_decision_points("if (a) { b(); } // if else", "javascript") == 1
    assert count_decision_points("if a:\n    pass\nelif b:  # else\n    pass", "python") == 2


def test_strip_line_comment_keeps_urls() -> None:
    assert strip_line_comment('fetch("https://example.com")', "javascript") == (
        'fetch("https://example.com")'
    )
    assert strip_line_comment("value = 1  # note", "python") == "value = 1  "


def test_find_nested_loops_python_and_braces() -> None:
    python_lines = [
        "for a in xs:",
        "    for b in ys:",
        "        pass",
        "for c in zs:",
        "    print(c)",
    ]
    assert find_nested_loops(python_lines, "python") == [0]

    script_lines = [
        "for (const a of xs) {",
        "  for (const b of ys) {",
        "    f(a, b);",
        "  }",
        "}",
        "while (x) {",
        "  x--;",
        "}",
    ]
    assert find_nested_loops(script_lines, "javascript") == [0]


def test_find_nested_loops_respects_window() -> None:
    lines = ["for a in xs:", *["    step()" for _ in range(25)], "    for b in ys:", "        pass"]
    assert find_nested_loops(lines, "python", window=20) == []
    assert find_nested_loops(lines, "python", window=40) == [0]
