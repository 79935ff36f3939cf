"""
Environment - scoped variable lookup and mutation.

An Environment is a chain of scopes. Each scope owns a property bag (a
dict, or a pydantic model such as an Entity) and an optional parent.
Lookup walks from child to parent; ``set`` mutates the nearest scope that
already defines the name; ``define`` always writes to the local scope.

Namespaces:
    A root environment may declare namespace paths such as
    ``("entities",)``. A path that starts with a namespace is resolved per
    member, so a child scope can shadow ``entities.apple`` without copying
    the whole ``entities`` object.

References:
    A Reference stored in a scope is followed transparently by ``get`` and
    ``set``. ``create_namespace_references`` builds a read-only scope in
    which every member of a namespace is reachable by its bare name.

Example:
    >>> env = create_root_env({"entities": {"apple": {"eaten": False}}}, [("entities",)])
    >>> child = env.new_child({"food": "apple"})
    >>> child.set("entities.apple.eaten", True)
    >>> env.get("entities.apple.eaten")
    True
    >>> child.lookup("entities.pear.eaten")
    NotFound(path=('entities', 'pear'))
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from ifcore.engine.path import Path, PossiblePath, path_to_string
from ifcore.engine.properties import (
    get_property,
    has_property,
    is_object,
    property_names,
    set_property,
)
from ifcore.errors import ExecutionError, UnknownNameError
from ifcore.script.pathparser import parse_path

# Scope key under which a call binds its positional arguments
ARGS = "__args__"

EnvFn = Callable[["Environment"], Any]


@dataclass(frozen=True)
class NotFound:
    """Sentinel returned when a path could not be resolved.

    Always falsy, so ``location.exits[dir]`` can be used as a condition.
    """

    path: Path

    def __bool__(self) -> bool:
        return False


@dataclass(frozen=True)
class Reference:
    """A pointer to another path in the Environment."""

    path: Path


def is_found(value: Any) -> bool:
    return not isinstance(value, NotFound)


class NamespaceReferences(Mapping):
    """Read-only mapping of a namespace's member names to References."""

    def __init__(self, env: Environment, namespace: Path):
        self._env = env
        self._namespace = namespace

    def __getitem__(self, key: str) -> Reference:
        path = self._namespace + (key,)
        if not self._env.has(path):
            raise KeyError(key)
        return Reference(path)

    def __iter__(self) -> Iterator[str]:
        seen = set()
        env: Environment | None = self._env
        while env is not None:
            ns_obj = env.get_namespace(self._namespace)
            for name in property_names(ns_obj) if ns_obj is not None else ():
                if name not in seen:
                    seen.add(name)
                    yield name
            env = env.parent

    def __len__(self) -> int:
        return sum(1 for _ in self)


class Environment:
    """One scope in a chain of scopes.

    Attributes:
        properties: The property bag owned by this scope
        parent: Enclosing scope, or None for the root
    """

    def __init__(
        self,
        properties: Any = None,
        namespaces: Sequence[Path] = (),
        parent: Environment | None = None,
    ):
        self.properties = properties if properties is not None else {}
        self.parent = parent
        self._namespaces = [tuple(ns) for ns in namespaces]

    def __repr__(self) -> str:
        return f"Environment(depth={self.get_depth()})"

    # =========================================================================
    # Scope chain
    # =========================================================================

    def new_child(self, bindings: Any = None) -> Environment:
        """Create a scope whose parent is this one."""
        return Environment(bindings, parent=self)

    def get_root(self) -> Environment:
        env = self
        while env.parent is not None:
            env = env.parent
        return env

    def get_depth(self) -> int:
        depth = 0
        env = self.parent
        while env is not None:
            depth += 1
            env = env.parent
        return depth

    def get_namespaces(self) -> list[Path]:
        """All namespaces visible from this scope, including the root ``()``."""
        return [(), *self.get_root()._namespaces]

    def match_namespace(self, path: Path) -> tuple[Path, Path]:
        """Split ``path`` into its longest matching namespace and the rest."""
        best: Path = ()
        for ns in self.get_namespaces():
            if len(ns) > len(best) and len(ns) < len(path) and path[: len(ns)] == ns:
                best = ns
        return best, path[len(best):]

    def get_namespace(self, namespace: Path, create: bool = False) -> Any:
        """Get this scope's object for ``namespace``, or None if it has none."""
        obj = self.properties
        for name in namespace:
            if not has_property(obj, name):
                if not create:
                    return None
                set_property(obj, name, {})
            obj = get_property(obj, name)
        return obj

    def _find_env(self, namespace: Path, name: Any) -> Environment | None:
        env: Environment | None = self
        while env is not None:
            ns_obj = env.get_namespace(namespace)
            if ns_obj is not None and has_property(ns_obj, name):
                return env
            env = env.parent
        return None

    # =========================================================================
    # Lookup
    # =========================================================================

    def get(self, name: PossiblePath, follow_references: bool = True) -> Any:
        """Resolve a name or path.

        Raises:
            UnknownNameError: If the first element of a top-level path is
                not defined in any scope
        """
        path = parse_path(name)
        value = self._lookup(path, follow_references)
        if isinstance(value, NotFound) and len(value.path) == 1:
            raise UnknownNameError(f"{path_to_string(value.path)} is not defined")
        return value

    def lookup(self, name: PossiblePath, follow_references: bool = True) -> Any:
        """Resolve a name or path, returning NotFound instead of raising."""
        return self._lookup(parse_path(name), follow_references)

    def has(self, name: PossiblePath) -> bool:
        return is_found(self.lookup(name))

    def _lookup(self, path: Path, follow_references: bool) -> Any:
        if not path:
            return NotFound(path)
        if follow_references:
            path = self._expand_references(path)
        namespace, rest = self.match_namespace(path)
        return self._get_from_namespace(namespace, rest)

    def _get_from_namespace(self, namespace: Path, rest: Path) -> Any:
        if not rest:
            ns_obj = self.get_namespace(namespace)
            return ns_obj if ns_obj is not None else NotFound(namespace)

        head, tail = rest[0], rest[1:]
        env = self._find_env(namespace, head)
        if env is None:
            return NotFound(namespace + (head,))

        value = get_property(env.get_namespace(namespace), head)
        prefix = namespace + (head,)
        for element in tail:
            if isinstance(value, Reference):
                value = self._lookup(value.path, True)
            if not is_object(value) and not isinstance(value, list):
                raise ExecutionError(f"{path_to_string(prefix)} is not an object")
            if not has_property(value, element):
                return NotFound(prefix + (element,))
            value = get_property(value, element)
            prefix = prefix + (element,)
        return value

    def _expand_references(self, path: Path) -> Path:
        expanded: Path = ()
        for i, element in enumerate(path):
            resolved, found = self._follow_references(expanded + (element,), ())
            if not found:
                return resolved + path[i + 1:]
            expanded = resolved
        return expanded

    def _follow_references(self, path: Path, visited: tuple[Path, ...]) -> tuple[Path, bool]:
        namespace, rest = self.match_namespace(path)
        target = self._get_from_namespace(namespace, rest)
        if isinstance(target, Reference):
            if target.path in visited:
                raise ExecutionError(
                    f"Reference loop following {path_to_string(path)}"
                )
            return self._follow_references(target.path, visited + (path,))
        return path, is_found(target)

    # =========================================================================
    # Mutation
    # =========================================================================

    def set(self, name: PossiblePath, value: Any) -> None:
        """Set a value in the nearest scope that owns the name.

        Intermediate objects along a dotted path are created as needed.
        When no scope owns the name it is created in this scope.
        """
        path = self._expand_references(parse_path(name))
        if not path:
            raise ExecutionError("Cannot set an empty path")
        namespace, rest = self.match_namespace(path)
        head, tail = rest[0], rest[1:]
        env = self._find_env(namespace, head) or self
        ns_obj = env.get_namespace(namespace, create=True)

        if not tail:
            set_property(ns_obj, head, value)
            return

        obj = ns_obj
        for element in (head, *tail[:-1]):
            child = get_property(obj, element)
            if isinstance(child, Reference):
                child = self.get(child.path)
            if child is None or isinstance(child, NotFound):
                child = {}
                set_property(obj, element, child)
            elif not is_object(child) and not isinstance(child, list):
                raise ExecutionError(f"{path_to_string(path)}: {element} is not an object")
            obj = child
        set_property(obj, tail[-1], value)

    def define(self, name: str, value: Any) -> None:
        """Define ``name`` in this scope, shadowing any outer definition."""
        set_property(self.properties, name, value)

    # =========================================================================
    # Functions
    # =========================================================================

    def execute(self, fn_name: PossiblePath, bindings: Any = None) -> Any:
        """Call the function stored at ``fn_name`` in a child scope."""
        fn = self.get(fn_name)
        if not callable(fn):
            raise ExecutionError(f"{path_to_string(fn_name)} is not a function")
        return self.execute_fn(fn, bindings)

    def execute_fn(self, fn: EnvFn, bindings: Any = None) -> Any:
        return fn(self.new_child(bindings))

    # =========================================================================
    # Object queries
    # =========================================================================

    def find_objs(
        self,
        predicate: Callable[[Any], bool],
        namespaces: Sequence[Path] | None = None,
    ) -> list[Any]:
        """Find objects in the given namespaces that satisfy ``predicate``.

        Names shadowed by an inner scope are returned once, from the innermost
        scope. Defaults to every declared namespace.
        """
        if namespaces is None:
            namespaces = self.get_namespaces()[1:]

        results = []
        for namespace in namespaces:
            for name in NamespaceReferences(self, tuple(namespace)):
                obj = self.lookup(tuple(namespace) + (name,))
                if is_object(obj) and predicate(obj):
                    results.append(obj)
        return results

    def create_namespace_references(self, namespace: PossiblePath) -> NamespaceReferences:
        """Expose each member of ``namespace`` as a bare-name Reference."""
        return NamespaceReferences(self, parse_path(namespace))

    def reference(self, name: PossiblePath) -> Reference:
        return Reference(parse_path(name))


def create_root_env(obj: Any = None, namespaces: Sequence[PossiblePath] = ()) -> Environment:
    """Create a root Environment over ``obj`` with the given namespaces."""
    return Environment(obj, [parse_path(ns) for ns in namespaces])
