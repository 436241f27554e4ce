"""
AST-based call graph extraction for Python programs.

This module builds the arena call graph the audit runs over from a
directory of Python sources. It works purely on the syntax tree: function
definitions become nodes, call expressions become edges, and import
statements are used to resolve dotted call targets to the modules they come
from.

Naming:
- module bodies become ``<module>`` nodes (``pkg.mod.<module>``)
- functions, methods and nested functions use their qualified names
  (``pkg.mod.func``, ``pkg.mod.Class.method``, ``pkg.mod.outer.inner``)
- calls resolved through an import become nodes named after the import
  target (``Crypto.Hash.MD5.new``) owned by the target's module
  (``Crypto.Hash.MD5``)
- calls that cannot be resolved (builtins, methods of local objects) become
  synthetic nodes without a package
"""

import ast
import fnmatch
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from ...application.errors import CallGraphBuildError
from ...machinery.callgraph import CallGraph, Node

LOG = logging.getLogger(__name__)

MODULE_SYMBOL = "<module>"

DEFAULT_PATTERNS = ("**/*.py",)

# Directories never descended into during file discovery
EXCLUDE = (
    ".svn",
    "CVS",
    ".bzr",
    ".hg",
    ".git",
    "__pycache__",
    ".tox",
    ".eggs",
    "*.egg",
    ".venv",
)


class _Module:
    """A parsed source file waiting to be turned into graph nodes."""

    def __init__(self, name: str, tree: ast.Module, filename: str, is_package: bool = False):
        self.name = name
        self.tree = tree
        self.filename = filename
        self.is_package = is_package

    @property
    def package(self) -> str:
        """Package that relative imports inside this module resolve against."""
        if self.is_package:
            return self.name
        return self.name.rpartition(".")[0]


class _ScopeVisitor(ast.NodeVisitor):
    """Tracks the qualified name of the definition being visited."""

    def __init__(self, module: _Module):
        self.module = module
        self.prefix: List[str] = [module.name]
        # (kind, qualified name) for every enclosing def/class
        self.scopes: List[Tuple[str, str]] = []

    def qualname(self, name: str) -> str:
        return ".".join(self.prefix + [name])

    def enter(self, kind: str, name: str) -> str:
        qualname = self.qualname(name)
        self.prefix.append(name)
        self.scopes.append((kind, qualname))
        return qualname

    def leave(self) -> None:
        self.prefix.pop()
        self.scopes.pop()


class _DefinitionCollector(_ScopeVisitor):
    """First pass: record every function and class of a module."""

    def __init__(self, module: _Module, graph: CallGraph, functions: Dict[str, Node], classes: set):
        super().__init__(module)
        self.graph = graph
        self.functions = functions
        self.classes = classes

    def visit_Module(self, node):
        qualname = self.qualname(MODULE_SYMBOL)
        self.functions[qualname] = self.graph.add_node(qualname, self.module.name)
        self.generic_visit(node)

    def _visit_function(self, node):
        qualname = self.enter("def", node.name)
        self.functions[qualname] = self.graph.add_node(qualname, self.module.name)
        self.generic_visit(node)
        self.leave()

    visit_FunctionDef = _visit_function
    visit_AsyncFunctionDef = _visit_function

    def visit_ClassDef(self, node):
        self.classes.add(self.enter("class", node.name))
        self.generic_visit(node)
        self.leave()


class _CallCollector(_ScopeVisitor):
    """Second pass: turn call expressions into edges."""

    def __init__(self, module: _Module, graph: CallGraph, functions: Dict[str, Node], classes: set):
        super().__init__(module)
        self.graph = graph
        self.functions = functions
        self.classes = classes
        self.aliases: Dict[str, str] = {}
        self.current: Optional[Node] = None

    # ---------------------------------------------------------------- imports
    def visit_Import(self, node):
        for alias in node.names:
            if alias.asname:
                self.aliases[alias.asname] = alias.name
            else:
                head = alias.name.split(".", 1)[0]
                self.aliases[head] = head

    def visit_ImportFrom(self, node):
        base = self._import_base(node)
        if base is None:
            return
        for alias in node.names:
            if alias.name == "*":
                continue
            target = f"{base}.{alias.name}" if base else alias.name
            self.aliases[alias.asname or alias.name] = target

    def _import_base(self, node) -> Optional[str]:
        if not node.level:
            return node.module
        parts = self.module.package.split(".") if self.module.package else []
        if node.level - 1 > len(parts):
            LOG.debug("%s: relative import beyond top-level package", self.module.filename)
            return None
        if node.level > 1:
            parts = parts[: len(parts) - (node.level - 1)]
        if node.module:
            parts.append(node.module)
        return ".".join(parts)

    # ------------------------------------------------------------ definitions
    def visit_Module(self, node):
        self.current = self.functions[self.qualname(MODULE_SYMBOL)]
        self.generic_visit(node)

    def _visit_function(self, node):
        # Decorators and defaults run in the enclosing scope
        for expr in node.decorator_list:
            self.visit(expr)
        self.visit(node.args)
        if node.returns is not None:
            self.visit(node.returns)

        saved = self.current
        self.current = self.functions[self.enter("def", node.name)]
        for stmt in node.body:
            self.visit(stmt)
        self.leave()
        self.current = saved

    visit_FunctionDef = _visit_function
    visit_AsyncFunctionDef = _visit_function

    def visit_ClassDef(self, node):
        for expr in node.decorator_list + node.bases + [kw.value for kw in node.keywords]:
            self.visit(expr)
        self.enter("class", node.name)
        for stmt in node.body:
            self.visit(stmt)
        self.leave()

    # ------------------------------------------------------------------ calls
    def visit_Call(self, node):
        parts = _dotted_name(node.func)
        if parts is not None:
            self._record_call(node, parts)
        self.generic_visit(node)

    def _record_call(self, node, parts: List[str]) -> None:
        target = self._resolve(parts)
        if target is not None:
            callee = target if isinstance(target, Node) else self.graph.add_node(
                target, target.rpartition(".")[0] or None)
            kind = "static function"
        else:
            callee = self.graph.add_node(".".join(parts))
            kind = "dynamic method" if len(parts) > 1 else "dynamic function"

        site = "%s call to %s at %s:%i:%i" % (
            kind, callee.name, self.module.filename, node.lineno, node.col_offset)
        self.graph.add_edge(self.current, callee, site)

    def _resolve(self, parts: List[str]):
        """
        Resolve a dotted call target.

        Returns the local Node when the target is defined in the program, the
        external qualified name when it goes through an import, or None.
        """
        head, rest = parts[0], parts[1:]

        if head in ("self", "cls") and rest:
            cls = self._enclosing_class()
            if cls is not None:
                local = self._local(f"{cls}.{'.'.join(rest)}")
                if local is not None:
                    return local

        dotted = ".".join(parts)
        for _, scope in reversed([s for s in self.scopes if s[0] == "def"]):
            local = self._local(f"{scope}.{dotted}")
            if local is not None:
                return local
        local = self._local(f"{self.module.name}.{dotted}")
        if local is not None:
            return local

        if head in self.aliases:
            target = ".".join([self.aliases[head]] + rest)
            local = self._local(target)
            if local is not None:
                return local
            if target in self.classes:
                return None
            return target
        return None

    def _local(self, qualname: str) -> Optional[Node]:
        if qualname in self.functions:
            return self.functions[qualname]
        if qualname in self.classes:
            # Instantiation runs the constructor when the class defines one
            return self.functions.get(f"{qualname}.__init__")
        return None

    def _enclosing_class(self) -> Optional[str]:
        for kind, qualname in reversed(self.scopes):
            if kind == "class":
                return qualname
        return None


def _dotted_name(expr) -> Optional[List[str]]:
    """``a.b.c`` -> ``["a", "b", "c"]``; None for anything else."""
    parts = []
    while isinstance(expr, ast.Attribute):
        parts.append(expr.attr)
        expr = expr.value
    if not isinstance(expr, ast.Name):
        return None
    parts.append(expr.id)
    parts.reverse()
    return parts


class CallGraphBuilder:
    """
    Collects parsed modules and turns them into one CallGraph.

    All modules are registered before any call is resolved, so calls across
    modules of the same program resolve to the program's own nodes
    regardless of file order.
    """

    def __init__(self):
        self._modules: List[_Module] = []

    def add_source(self, source_code: str, module: str, filename: str = "<string>",
                   is_package: bool = False) -> None:
        """
        Parse one module's source.

        Raises:
            CallGraphBuildError: if the source does not parse
        """
        try:
            tree = ast.parse(source_code, filename=filename)
        except SyntaxError as e:
            raise CallGraphBuildError(f"{filename}:{e.lineno}: {e.msg}") from e
        except ValueError as e:
            raise CallGraphBuildError(f"{filename}: {e}") from e
        self._modules.append(_Module(module, tree, filename, is_package))

    def build(self) -> CallGraph:
        graph = CallGraph()
        functions: Dict[str, Node] = {}
        classes: set = set()

        for module in self._modules:
            _DefinitionCollector(module, graph, functions, classes).visit(module.tree)
        for module in self._modules:
            _CallCollector(module, graph, functions, classes).visit(module.tree)

        LOG.info("Built call graph with %i nodes and %i edges from %i modules",
                 len(graph), graph.edge_count, len(self._modules))
        return graph


def extract_call_graph(source_code: str, module: str = "__main__") -> CallGraph:
    """
    Extract a call graph from a single module's source code.

    Raises:
        CallGraphBuildError: if the source does not parse
    """
    builder = CallGraphBuilder()
    builder.add_source(source_code, module)
    return builder.build()


def discover_files(source_dir, patterns: Optional[Sequence[str]] = None) -> List[Path]:
    """
    Find the Python files of a program.

    Args:
        source_dir: Root directory of the program
        patterns: Glob patterns relative to `source_dir` (default ``**/*.py``)

    Returns:
        Sorted list of matching files outside the excluded directories

    Raises:
        CallGraphBuildError: if the directory does not exist or nothing matches
    """
    root = Path(source_dir)
    if not root.is_dir():
        raise CallGraphBuildError(f"source directory not found: {source_dir}")

    found = set()
    for pattern in patterns or DEFAULT_PATTERNS:
        if Path(pattern).is_absolute() or ".." in Path(pattern).parts:
            raise CallGraphBuildError(f"file pattern {pattern!r} must stay inside {source_dir}")
        try:
            matches = list(root.glob(pattern))
        except (NotImplementedError, ValueError) as e:
            raise CallGraphBuildError(f"invalid file pattern {pattern!r}: {e}") from e
        for path in matches:
            try:
                relpath = path.relative_to(root)
            except ValueError as e:
                raise CallGraphBuildError(f"file pattern {pattern!r} leaves {source_dir}") from e
            if path.is_file() and path.suffix == ".py" and not _is_excluded(relpath):
                found.add(path)

    if not found:
        raise CallGraphBuildError(
            f"no Python files in {source_dir} match {', '.join(patterns or DEFAULT_PATTERNS)}")
    return sorted(found)


def _is_excluded(relpath: Path) -> bool:
    return any(fnmatch.fnmatch(part, pattern) for part in relpath.parts[:-1] for pattern in EXCLUDE)


def module_name(relpath: Path, root_name: str = "") -> str:
    """``pkg/sub/mod.py`` -> ``pkg.sub.mod``; ``pkg/__init__.py`` -> ``pkg``."""
    parts = list(relpath.with_suffix("").parts)
    if parts and parts[-1] == "__init__":
        parts.pop()
    return ".".join(parts) or root_name or "__init__"


def build_call_graph(source_dir, patterns: Optional[Sequence[str]] = None) -> CallGraph:
    """
    Build the call graph of the program rooted at `source_dir`.

    Raises:
        CallGraphBuildError: if a file cannot be read or parsed, or no file
            matches
    """
    root = Path(source_dir)
    files = discover_files(root, patterns)
    LOG.info("Loading %i Python files from %s", len(files), root)

    builder = CallGraphBuilder()
    for path in files:
        relpath = path.relative_to(root)
        try:
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise CallGraphBuildError(f"cannot read {relpath}: {e}") from e
        LOG.debug("Parsing %s", relpath)
        builder.add_source(source, module_name(relpath, root.name), relpath.as_posix(),
                           is_package=path.name == "__init__.py")
    return builder.build()
