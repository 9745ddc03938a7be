"""Lexical structure extraction for source files.

Extraction is keyword-anchored text scanning. It trades recall for
simplicity: unusual syntax may be missed, but every hit requires one of the
``export``/``function``/``class``/``import``/``require(``/``def`` anchors.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from re import Match, compile
from typing import Any, Literal, Protocol

logger = logging.getLogger(__name__)

ExportKind = Literal["function", "class", "variable", "type", "interface"]
ComplexityBucket = Literal["low", "medium", "high"]

SCRIPT_LANGUAGES = {"javascript", "typescript", "vue"}
HTTP_VERBS = ("GET", "POST", "PUT", "DELETE", "PATCH")

BRANCH_KEYWORD_RE = compile(r"\b(?:if|else|for|while|switch|case|try|catch)\b")
PY_BRANCH_KEYWORD_RE = compile(r"\b(?:if|elif|else|for|while|try|except)\b")
LOOP_KEYWORD_RE = compile(r"\b(?:for|while)\b")
MEDIUM_COMPLEXITY_MIN = 5
HIGH_COMPLEXITY_MIN = 11

JS_EXPORT_DECL_RE = compile(
    r"^\s*export\s+(?P<default>default\s+)?(?:declare\s+)?(?:abstract\s+)?(?:async\s+)?"
    r"(?P<keyword>function\*?|class|const|let|var|interface|type|enum)\s+(?P<name>[A-Za-z_$][\w$]*)"
)
JS_EXPORT_DEFAULT_NAME_RE = compile(r"^\s*export\s+default\s+(?P<name>[A-Za-z_$][\w$]*)\s*;?\s*$")
JS_EXPORT_LIST_RE = compile(r"^\s*export\s*(?:type\s*)?\{(?P<names>[^}]*)\}")
JS_MODULE_EXPORTS_NAME_RE = compile(r"\bmodule\.exports\s*=\s*(?P<name>[A-Za-z_$][\w$]*)\s*;?\s*$")
JS_MODULE_EXPORTS_OBJECT_RE = compile(r"\bmodule\.exports\s*=\s*\{(?P<names>[^}]*)\}")
JS_EXPORTS_PROPERTY_RE = compile(r"^\s*(?:module\.)?exports\.(?P<name>[A-Za-z_$][\w$]*)\s*=")

JS_IMPORT_FROM_RE = compile(
    r"^\s*import\s+(?:type\s+)?(?P<bindings>.+?)\s+from\s+['\"](?P<module>[^'\"]+)['\"]"
)
JS_IMPORT_SIDE_EFFECT_RE = compile(r"^\s*import\s+['\"](?P<module>[^'\"]+)['\"]")
JS_DYNAMIC_IMPORT_RE = compile(r"\bimport\s*\(\s*['\"](?P<module>[^'\"]+)['\"]\s*\)")
JS_REQUIRE_BINDING_RE = compile(
    r"\b(?:const|let|var)\s+(?P<bindings>\{[^}]*\}|[A-Za-z_$][\w$]*)\s*=\s*"
    r"require\s*\(\s*['\"](?P<module>[^'\"]+)['\"]\s*\)"
)
JS_REQUIRE_RE = compile(r"\brequire\s*\(\s*['\"](?P<module>[^'\"]+)['\"]\s*\)")

JS_FUNCTION_RE = compile(
    r"^\s*(?:export\s+)?(?:default\s+)?(?P<async>async\s+)?function(?:\s*\*\s*|\s+)"
    r"(?P<name>[A-Za-z_$][\w$]*)\s*(?:<[^>]*>)?\s*\((?P<params>[^)]*)\)?"
)
JS_ARROW_RE = compile(
    r"^\s*(?:export\s+)?(?:const|let|var)\s+(?P<name>[A-Za-z_$][\w$]*)\s*(?::[^=]+)?=\s*"
    r"(?P<async>async\s+)?(?:function\b\s*[\w$]*\s*)?\((?P<params>[^)]*)\)[^=;]*?(?:=>|\{)"
)
JS_CLASS_RE = compile(
    r"^\s*(?:export\s+)?(?:default\s+)?(?:abstract\s+)?class\s+(?P<name>[A-Za-z_$][\w$]*)"
    r"(?:<[^>]*>)?(?:\s+extends\s+(?P<superclass>[\w$.]+)(?:<[^>]*>)?)?"
    r"(?:\s+implements\s+(?P<interfaces>[^{]+))?"
)
JS_METHOD_RE = compile(
    r"^\s*(?:(?:public|private|protected|static|readonly|override|abstract)\s+)*"
    r"(?P<async>async\s+)?(?:get\s+|set\s+)?\*?(?P<name>[A-Za-z_$][\w$]*)\s*(?:<[^>]*>)?\s*"
    r"\((?P<params>[^)]*)\)\s*(?::\s*[^{;]+)?\{"
)
JS_PROPERTY_RE = compile(
    r"^\s*(?:(?:public|private|protected|static|readonly|declare)\s+)*"
    r"(?P<name>[A-Za-z_$#][\w$]*)\s*[?!]?\s*(?::|=(?!=|>))"
)
JS_ROUTE_RE = compile(
    r"\b(?:app|router)\.(?P<verb>get|post|put|delete|patch)\s*\(\s*['\"`](?P<path>[^'\"`]+)['\"`]"
    r"\s*(?:,\s*(?P<handler>[\w$.]+))?"
)
JS_NON_METHOD_NAMES = {
    "if",
    "for",
    "while",
    "switch",
    "catch",
    "function",
    "return",
    "super",
    "await",
    "new",
}

PY_DEF_RE = compile(
    r"^(?P<indent>[ \t]*)(?P<async>async\s+)?def\s+(?P<name>\w+)\s*\((?P<params>[^)]*)\)?"
)
PY_CLASS_RE = compile(r"^(?P<indent>[ \t]*)class\s+(?P<name>\w+)\s*(?:\((?P<bases>[^)]*)\))?\s*:")
PY_IMPORT_RE = compile(
    r"^\s*import\s+(?P<modules>[\w.]+(?:\s+as\s+\w+)?(?:\s*,\s*[\w.]+(?:\s+as\s+\w+)?)*)"
)
PY_FROM_IMPORT_RE = compile(r"^\s*from\s+(?P<module>\.*[\w.]*)\s+import\s+(?P<names>.+)$")
PY_ALL_RE = compile(r"^__all__\s*(?::[^=]+)?=\s*[\[(](?P<names>[^\])]*)[\])]?")
PY_ATTRIBUTE_RE = compile(r"^(?P<indent>[ \t]+)(?P<name>[A-Za-z_]\w*)\s*(?::[^=]+)?=(?!=)")
PY_SELF_ATTRIBUTE_RE = compile(r"\bself\.(?P<name>[A-Za-z_]\w*)\s*(?::[^=]+)?=(?!=)")
PY_ROUTE_DECORATOR_RE = compile(
    r"^\s*@(?:\w+)\.(?P<verb>get|post|put|delete|patch)\s*\(\s*['\"](?P<path>[^'\"]+)['\"]"
)
PY_FLASK_ROUTE_RE = compile(
    r"^\s*@(?:\w+)\.route\s*\(\s*['\"](?P<path>[^'\"]+)['\"](?P<rest>.*)$"
)
PY_METHODS_ARG_RE = compile(r"methods\s*=\s*[\[(](?P<methods>[^\])]*)[\])]")

FRAMEWORK_MARKERS: tuple[tuple[str, str], ...] = (
    ("next", "next"),
    ("react", "react"),
    ("vue", "vue"),
    ("@angular", "angular"),
    ("express", "express"),
    ("fastapi", "fastapi"),
    ("django", "django"),
    ("flask", "flask"),
    ("org.springframework", "spring"),
)


@dataclass(slots=True)
class ExportInfo:
    """An exported symbol."""

    name: str
    kind: ExportKind
    is_default: bool = False
    signature: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind,
            "is_default": self.is_default,
            "signature": self.signature,
        }


@dataclass(slots=True)
class ImportInfo:
    """An imported module and its bindings."""

    module: str
    names: list[str] = field(default_factory=list)
    is_local: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"module": self.module, "names": list(self.names), "is_local": self.is_local}


@dataclass(slots=True)
class FunctionInfo:
    """A function or method declaration."""

    name: str
    signature: str
    line: int
    is_async: bool = False
    decision_points: int = 0
    length: int = 1
    documented: bool = False

    @property
    def complexity(self) -> ComplexityBucket:
        return complexity_bucket(self.decision_points)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "signature": self.signature,
            "line": self.line,
            "is_async": self.is_async,
            "complexity": self.complexity,
            "decision_points": self.decision_points,
            "length": self.length,
            "documented": self.documented,
        }


@dataclass(slots=True)
class ClassInfo:
    """A class declaration."""

    name: str
    line: int
    methods: list[str] = field(default_factory=list)
    properties: list[str] = field(default_factory=list)
    superclass: str | None = None
    interfaces: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "line": self.line,
            "methods": list(self.methods),
            "properties": list(self.properties),
            "superclass": self.superclass,
            "interfaces": list(self.interfaces),
        }


@dataclass(slots=True)
class RouteInfo:
    """An HTTP route registration."""

    path: str
    method: str
    handler: str

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "method": self.method, "handler": self.handler}


@dataclass(slots=True)
class FileStructure:
    """Structural summary of one file's text."""

    language: str
    exports: list[ExportInfo] = field(default_factory=list)
    imports: list[ImportInfo] = field(default_factory=list)
    functions: list[FunctionInfo] = field(default_factory=list)
    methods: list[FunctionInfo] = field(default_factory=list)
    classes: list[ClassInfo] = field(default_factory=list)
    routes: list[RouteInfo] = field(default_factory=list)

    @property
    def framework(self) -> str | None:
        return detect_framework(self.imports)

    def all_functions(self) -> list[FunctionInfo]:
        """Top-level functions followed by class methods."""
        return [*self.functions, *self.methods]

    def to_dict(self) -> dict[str, Any]:
        return {
            "language": self.language,
            "framework": self.framework,
            "exports": [item.to_dict() for item in self.exports],
            "imports": [item.to_dict() for item in self.imports],
            "functions": [item.to_dict() for item in self.functions],
            "methods": [item.to_dict() for item in self.methods],
            "classes": [item.to_dict() for item in self.classes],
            "routes": [item.to_dict() for item in self.routes],
        }


class StructureExtractor(Protocol):
    """Protocol for pluggable structural extractors."""

    def extract(self, content: str, language: str) -> FileStructure:
        """Return the structural summary for file text in a language."""


class RegexStructureExtractor:
    """Keyword-anchored regex extractor for JavaScript/TypeScript and Python."""

    def extract(self, content: str, language: str) -> FileStructure:
        if language in SCRIPT_LANGUAGES:
            return _extract_script(content, language)
        if language == "python":
            return _extract_python(content)
        logger.debug(f"No structural patterns for language {language!r}")
        return FileStructure(language=language)


def complexity_bucket(decision_points: int) -> ComplexityBucket:
    """Bucket a branch keyword count: <5 low, 5-10 medium, >10 high."""
    if decision_points >= HIGH_COMPLEXITY_MIN:
        return "high"
    if decision_points >= MEDIUM_COMPLEXITY_MIN:
        return "medium"
    return "low"


def count_decision_points(text: str, language: str) -> int:
    pattern = PY_BRANCH_KEYWORD_RE if language == "python" else BRANCH_KEYWORD_RE
    total = 0
    for line in text.splitlines():
        total += len(pattern.findall(strip_line_comment(line, language)))
    return total


def detect_framework(imports: list[ImportInfo]) -> str | None:
    modules = [item.module.lower() for item in imports]
    for marker, framework in FRAMEWORK_MARKERS:
        for module in modules:
            if module == marker or module.startswith((f"{marker}/", f"{marker}.")):
                return framework
    return None


def strip_line_comment(line: str, language: str) -> str:
    marker = "#" if language == "python" else "//"
    position = line.find(marker)
    if position == -1:
        return line
    if language != "python" and position > 0 and line[position - 1] == ":":
        return line
    return line[:position]


def find_nested_loops(lines: list[str], language: str, window: int = 20) -> list[int]:
    """Return 0-based indexes of loops that open another loop within ``window`` lines."""
    found: list[int] = []
    inner_loops: set[int] = set()
    for index, line in enumerate(lines):
        code = strip_line_comment(line, language)
        if index in inner_loops or not LOOP_KEYWORD_RE.search(code):
            continue
        inner = _inner_loop(lines, index, language, window)
        if inner is not None:
            found.append(index)
            inner_loops.add(inner)
    return found


def _extract_script(content: str, language: str) -> FileStructure:
    lines = content.splitlines()
    structure = FileStructure(language=language)
    class_ranges: list[tuple[int, int]] = []

    for index, line in enumerate(lines):
        class_match = JS_CLASS_RE.match(line)
        if class_match is None:
            continue
        end = _brace_block_end(lines, index)
        class_ranges.append((index, end))
        cls, methods = _script_class(lines, index, end, class_match)
        structure.classes.append(cls)
        structure.methods.extend(methods)

    depth = 0
    for index, line in enumerate(lines):
        inside_class = any(start < index <= end for start, end in class_ranges)
        if depth == 0 and not inside_class:
            function = _script_function(lines, index)
            if function is not None:
                structure.functions.append(function)
        structure.exports.extend(_script_exports(line))
        structure.imports.extend(_script_imports(line))
        structure.routes.extend(_script_routes(line))
        code = strip_line_comment(line, language)
        depth = max(0, depth + code.count("{") - code.count("}"))

    _resolve_export_kinds(structure)
    return structure


def _script_function(lines: list[str], index: int) -> FunctionInfo | None:
    line = lines[index]
    match = JS_FUNCTION_RE.match(line) or JS_ARROW_RE.match(line)
    if match is None:
        return None
    end = _brace_block_end(lines, index)
    body = "\n".join(lines[index : end + 1])
    return FunctionInfo(
        name=match.group("name"),
        signature=_signature(line),
        line=index + 1,
        is_async=bool(match.group("async")),
        decision_points=count_decision_points(body, "javascript"),
        length=end - index + 1,
        documented=_script_documented(lines, index),
    )


def _script_class(
    lines: list[str], start: int, end: int, match: Match[str]
) -> tuple[ClassInfo, list[FunctionInfo]]:
    interfaces_raw = match.group("interfaces") or ""
    cls = ClassInfo(
        name=match.group("name"),
        line=start + 1,
        superclass=match.group("superclass"),
        interfaces=[item.strip() for item in interfaces_raw.split(",") if item.strip()],
    )
    methods: list[FunctionInfo] = []
    first = strip_line_comment(lines[start], "javascript")
    depth = first.count("{") - first.count("}")
    for index in range(start + 1, end + 1):
        line = lines[index]
        if depth == 1:
            method = _script_method(lines, index)
            if method is not None:
                cls.methods.append(method.name)
                methods.append(method)
            else:
                _collect_script_property(cls, line)
        code = strip_line_comment(line, "javascript")
        depth += code.count("{") - code.count("}")
        if depth <= 0:
            break
    return cls, methods


def _script_method(lines: list[str], index: int) -> FunctionInfo | None:
    line = lines[index]
    match = JS_METHOD_RE.match(line)
    if match is None or match.group("name") in JS_NON_METHOD_NAMES:
        return None
    end = _brace_block_end(lines, index)
    body = "\n".join(lines[index : end + 1])
    return FunctionInfo(
        name=match.group("name"),
        signature=_signature(line),
        line=index + 1,
        is_async=bool(match.group("async")),
        decision_points=count_decision_points(body, "javascript"),
        length=end - index + 1,
        documented=_script_documented(lines, index),
    )


def _collect_script_property(cls: ClassInfo, line: str) -> None:
    match = JS_PROPERTY_RE.match(line)
    if match is None or "(" in line.split("=", 1)[0]:
        return
    name = match.group("name")
    if name not in cls.properties and name not in JS_NON_METHOD_NAMES:
        cls.properties.append(name)


def _script_exports(line: str) -> list[ExportInfo]:
    signature = _signature(line)
    decl = JS_EXPORT_DECL_RE.match(line)
    if decl is not None:
        return [
            ExportInfo(
                name=decl.group("name"),
                kind=_export_kind(decl.group("keyword"), line),
                is_default=bool(decl.group("default")),
                signature=signature,
            )
        ]

    default_name = JS_EXPORT_DEFAULT_NAME_RE.match(line)
    if default_name is not None:
        return [
            ExportInfo(
                name=default_name.group("name"),
                kind="variable",
                is_default=True,
                signature=signature,
            )
        ]

    export_list = JS_EXPORT_LIST_RE.match(line)
    if export_list is not None:
        return [
            ExportInfo(name=name, kind="variable", signature=signature)
            for name in _binding_names(export_list.group("names"))
        ]

    module_object = JS_MODULE_EXPORTS_OBJECT_RE.search(line)
    if module_object is not None:
        keys = [chunk.split(":", 1)[0].strip() for chunk in module_object.group("names").split(",")]
        return [
            ExportInfo(name=key, kind="variable", signature=signature)
            for key in keys
            if _is_identifier(key)
        ]

    module_name = JS_MODULE_EXPORTS_NAME_RE.search(line)
    if module_name is not None:
        return [
            ExportInfo(
                name=module_name.group("name"),
                kind="variable",
                is_default=True,
                signature=signature,
            )
        ]

    property_export = JS_EXPORTS_PROPERTY_RE.match(line)
    if property_export is not None:
        kind: ExportKind = "function" if "function" in line or "=>" in line else "variable"
        return [ExportInfo(name=property_export.group("name"), kind=kind, signature=signature)]
    return []


def _script_imports(line: str) -> list[ImportInfo]:
    from_match = JS_IMPORT_FROM_RE.match(line)
    if from_match is not None:
        module = from_match.group("module")
        return [
            ImportInfo(
                module=module,
                names=_import_bindings(from_match.group("bindings")),
                is_local=_is_local_module(module),
            )
        ]

    side_effect = JS_IMPORT_SIDE_EFFECT_RE.match(line)
    if side_effect is not None:
        module = side_effect.group("module")
        return [ImportInfo(module=module, is_local=_is_local_module(module))]

    found: list[ImportInfo] = []
    require_binding = JS_REQUIRE_BINDING_RE.search(line)
    if require_binding is not None:
        module = require_binding.group("module")
        found.append(
            ImportInfo(
                module=module,
                names=_import_bindings(require_binding.group("bindings")),
                is_local=_is_local_module(module),
            )
        )
    else:
        for match in JS_REQUIRE_RE.finditer(line):
            module = match.group("module")
            found.append(ImportInfo(module=module, is_local=_is_local_module(module)))
    for match in JS_DYNAMIC_IMPORT_RE.finditer(line):
        module = match.group("module")
        found.append(ImportInfo(module=module, is_local=_is_local_module(module)))
    return found


def _script_routes(line: str) -> list[RouteInfo]:
    routes: list[RouteInfo] = []
    for match in JS_ROUTE_RE.finditer(line):
        handler = match.group("handler") or "anonymous"
        if handler in {"async", "function"}:
            handler = "anonymous"
        routes.append(
            RouteInfo(path=match.group("path"), method=match.group("verb").upper(), handler=handler)
        )
    return routes


def _script_documented(lines: list[str], index: int) -> bool:
    previous = lines[index - 1].strip() if index > 0 else ""
    before_previous = lines[index - 2].strip() if index > 1 else ""
    return "*/" in previous or previous.startswith("//") or "*/" in before_previous


def _extract_python(content: str) -> FileStructure:
    lines = content.splitlines()
    structure = FileStructure(language="python")
    open_classes: list[tuple[int, ClassInfo]] = []
    pending_routes: list[tuple[str, str]] = []

    index = 0
    while index < len(lines):
        line = lines[index]
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            index += 1
            continue

        indent = _indent_width(line)
        while open_classes and indent <= open_classes[-1][0]:
            open_classes.pop()

        class_match = PY_CLASS_RE.match(line)
        if class_match is not None:
            cls = _python_class(class_match, index)
            structure.classes.append(cls)
            open_classes.append((indent, cls))
            index += 1
            continue

        def_match = PY_DEF_RE.match(line)
        if def_match is not None:
            end = _indent_block_end(lines, index)
            function = _python_function(lines, index, end, def_match)
            owner = open_classes[-1][1] if open_classes else None
            if owner is not None:
                owner.methods.append(function.name)
                body = "\n".join(lines[index : end + 1])
                for attribute in PY_SELF_ATTRIBUTE_RE.finditer(body):
                    if attribute.group("name") not in owner.properties:
                        owner.properties.append(attribute.group("name"))
                structure.methods.append(function)
            elif indent == 0:
                structure.functions.append(function)
            else:
                structure.methods.append(function)
            for method, path in pending_routes:
                structure.routes.append(RouteInfo(path=path, method=method, handler=function.name))
            pending_routes = []
            index = end + 1 if owner is not None or indent == 0 else index + 1
            continue

        if stripped.startswith("@"):
            pending_routes.extend(_python_route_decorator(stripped))
            index += 1
            continue

        if open_classes and indent > open_classes[-1][0]:
            attribute = PY_ATTRIBUTE_RE.match(line)
            owner = open_classes[-1][1]
            if attribute is not None and attribute.group("name") not in owner.properties:
                owner.properties.append(attribute.group("name"))

        statement, consumed = _python_import_statement(lines, index)
        if statement is not None:
            structure.imports.extend(_python_imports(statement))
            index += consumed
            continue

        if PY_ALL_RE.match(line) is not None:
            text, consumed = _collect_until(lines, index, "]" if "[" in line else ")")
            all_match = PY_ALL_RE.match(text.replace("\n", " "))
            names = _quoted_names(all_match.group("names")) if all_match is not None else []
            for name in names:
                structure.exports.append(
                    ExportInfo(name=name, kind="variable", signature=_signature(line))
                )
            index += consumed
            continue

        index += 1

    _resolve_export_kinds(structure)
    return structure


def _python_class(match: Match[str], index: int) -> ClassInfo:
    bases = [
        item.strip()
        for item in (match.group("bases") or "").split(",")
        if item.strip() and "=" not in item
    ]
    return ClassInfo(
        name=match.group("name"),
        line=index + 1,
        superclass=bases[0] if bases else None,
        interfaces=bases[1:],
    )


def _python_function(lines: list[str], index: int, end: int, match: Match[str]) -> FunctionInfo:
    body = "\n".join(lines[index : end + 1])
    return FunctionInfo(
        name=match.group("name"),
        signature=_signature(lines[index]),
        line=index + 1,
        is_async=bool(match.group("async")),
        decision_points=count_decision_points(body, "python"),
        length=end - index + 1,
        documented=_python_documented(lines, index),
    )


def _python_route_decorator(stripped: str) -> list[tuple[str, str]]:
    verb_match = PY_ROUTE_DECORATOR_RE.match(stripped)
    if verb_match is not None:
        return [(verb_match.group("verb").upper(), verb_match.group("path"))]
    flask_match = PY_FLASK_ROUTE_RE.match(stripped)
    if flask_match is None:
        return []
    methods_match = PY_METHODS_ARG_RE.search(flask_match.group("rest"))
    if methods_match is None:
        return [("GET", flask_match.group("path"))]
    methods = [name.upper() for name in _quoted_names(methods_match.group("methods"))]
    return [(method, flask_match.group("path")) for method in methods if method in HTTP_VERBS]


def _python_import_statement(lines: list[str], index: int) -> tuple[str | None, int]:
    stripped = lines[index].strip()
    if not stripped.startswith(("import ", "from ")):
        return None, 0
    if "(" in stripped and ")" not in stripped:
        text, consumed = _collect_until(lines, index, ")")
        return " ".join(part.strip() for part in text.splitlines()), consumed
    return stripped, 1


def _python_imports(statement: str) -> list[ImportInfo]:
    from_match = PY_FROM_IMPORT_RE.match(statement)
    if from_match is not None:
        module = from_match.group("module")
        raw_names = from_match.group("names").split("#", 1)[0].strip().strip("()")
        return [
            ImportInfo(
                module=module,
                names=_binding_names(raw_names),
                is_local=module.startswith("."),
            )
        ]

    import_match = PY_IMPORT_RE.match(statement)
    if import_match is None:
        return []
    found: list[ImportInfo] = []
    for chunk in import_match.group("modules").split(","):
        parts = chunk.split()
        if not parts:
            continue
        alias = parts[2] if len(parts) == 3 and parts[1] == "as" else None
        found.append(ImportInfo(module=parts[0], names=[alias] if alias else [], is_local=False))
    return found


def _python_documented(lines: list[str], index: int) -> bool:
    previous = lines[index - 1].strip() if index > 0 else ""
    if previous.startswith("#"):
        return True
    cursor = index
    while cursor < len(lines) and not strip_line_comment(lines[cursor], "python").rstrip().endswith(
        ":"
    ):
        cursor += 1
    cursor += 1
    while cursor < len(lines) and not lines[cursor].strip():
        cursor += 1
    if cursor >= len(lines):
        return False
    return lines[cursor].strip().startswith(('"""', "'''", 'r"""', "r'''"))


def _resolve_export_kinds(structure: FileStructure) -> None:
    function_names = {item.name for item in structure.functions}
    class_names = {item.name for item in structure.classes}
    for export in structure.exports:
        if export.kind != "variable":
            continue
        if export.name in function_names:
            export.kind = "function"
        elif export.name in class_names:
            export.kind = "class"


def _export_kind(keyword: str, line: str) -> ExportKind:
    if keyword.startswith("function"):
        return "function"
    if keyword == "class":
        return "class"
    if keyword == "interface":
        return "interface"
    if keyword in {"type", "enum"}:
        return "type"
    if "=>" in line or JS_ARROW_RE.match(line) is not None:
        return "function"
    return "variable"


def _import_bindings(bindings: str) -> list[str]:
    text = bindings.strip()
    named: list[str] = []
    brace_start = text.find("{")
    if brace_start != -1:
        brace_end = text.find("}", brace_start)
        if brace_end == -1:
            brace_end = len(text)
        named = _binding_names(text[brace_start + 1 : brace_end])
        text = text[:brace_start] + text[brace_end + 1 :]

    leading: list[str] = []
    for chunk in text.split(","):
        parts = chunk.split()
        if not parts:
            continue
        if parts[0] == "*":
            if len(parts) == 3 and parts[1] == "as":
                leading.append(parts[2])
        elif _is_identifier(parts[0]):
            leading.append(parts[0])
    return [*leading, *named]


def _binding_names(raw: str) -> list[str]:
    """Return bound names from ``a, b as c`` lists (``as`` aliases win)."""
    names: list[str] = []
    for chunk in raw.split(","):
        parts = chunk.split()
        if parts and parts[0] == "type" and len(parts) > 1:
            parts = parts[1:]
        if not parts:
            continue
        name = parts[2] if len(parts) >= 3 and parts[1] == "as" else parts[0]
        if _is_identifier(name) and name not in names:
            names.append(name)
    return names


def _quoted_names(raw: str) -> list[str]:
    names: list[str] = []
    for chunk in raw.split(","):
        name = chunk.strip().strip("'\"")
        if name and _is_identifier(name):
            names.append(name)
    return names


def _is_identifier(value: str) -> bool:
    return value.replace("$", "_").isidentifier()


def _is_local_module(module: str) -> bool:
    return module.startswith(("./", "../"))


def _brace_block_end(lines: list[str], start: int, lookahead: int = 3) -> int:
    """Return the index of the line closing the brace block opened at ``start``."""
    depth = 0
    opened = False
    for index in range(start, len(lines)):
        code = strip_line_comment(lines[index], "javascript")
        for char in code:
            if char == "{":
                depth += 1
                opened = True
            elif char == "}":
                depth -= 1
                if opened and depth <= 0:
                    return index
        if not opened and (code.rstrip().endswith(";") or index - start >= lookahead - 1):
            return start
    return len(lines) - 1 if opened else start


def _indent_block_end(lines: list[str], start: int) -> int:
    base = _indent_width(lines[start])
    end = start
    for index in range(start + 1, len(lines)):
        line = lines[index]
        if not line.strip():
            continue
        if _indent_width(line) <= base:
            break
        end = index
    return end


def _collect_until(lines: list[str], start: int, terminator: str) -> tuple[str, int]:
    collected: list[str] = []
    for index in range(start, len(lines)):
        collected.append(lines[index])
        if terminator in lines[index]:
            return "\n".join(collected), index - start + 1
    return "\n".join(collected), len(lines) - start


def _indent_width(line: str) -> int:
    expanded = line.expandtabs(4)
    return len(expanded) - len(expanded.lstrip())


def _signature(line: str) -> str:
    signature = line.strip()
    if signature.endswith("{"):
        signature = signature[:-1].rstrip()
    return signature


def _inner_loop(lines: list[str], start: int, language: str, window: int) -> int | None:
    limit = min(start + window, len(lines))
    if language == "python":
        base = _indent_width(lines[start])
        for index in range(start + 1, limit):
            if not lines[index].strip():
                continue
            if _indent_width(lines[index]) <= base:
                return None
            if LOOP_KEYWORD_RE.search(strip_line_comment(lines[index], language)):
                return index
        return None

    depth = 0
    for index in range(start, limit):
        code = strip_line_comment(lines[index], language)
        if index > start and depth > 0 and LOOP_KEYWORD_RE.search(code):
            return index
        depth += code.count("{") - code.count("}")
        if index > start and depth <= 0:
            return None
    return None
