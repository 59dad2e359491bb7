"""Linked descriptor graph consumed by the generator.

The graph is built once by :class:`~gateway_gen.descriptor.registry.Registry`
and treated as read-only afterwards. Back-references from messages and enums
to their file make ``eq=False`` necessary on the node types.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class GoPackage:
    """A Go package identified by its import path.

    ``name`` and ``alias`` only affect how the package is spelled in generated
    code, so they take no part in equality or hashing.
    """

    path: str
    name: str = field(default="", compare=False)
    alias: str = field(default="", compare=False)

    @property
    def identifier(self) -> str:
        """The identifier used to qualify names from this package."""
        return self.alias or self.name

    @property
    def import_spec(self) -> str:
        ident = self.identifier
        if ident and ident != self.path.rsplit("/", 1)[-1]:
            return f'{ident} "{self.path}"'
        return f'"{self.path}"'


@dataclass(eq=False)
class Field:
    name: str
    number: int
    type: str
    type_name: str = ""
    repeated: bool = False
    message: Message | None = None
    enum: Enum | None = None


@dataclass(eq=False)
class Enum:
    name: str
    values: list[str]
    file: File
    outers: tuple[str, ...] = ()

    @property
    def fqen(self) -> str:
        return _qualify(self.file.package, *self.outers, self.name)

    @property
    def go_type_name(self) -> str:
        return "_".join([*self.outers, self.name])


@dataclass(eq=False)
class Message:
    name: str
    file: File
    fields: list[Field] = field(default_factory=list)
    outers: tuple[str, ...] = ()

    @property
    def fqmn(self) -> str:
        return _qualify(self.file.package, *self.outers, self.name)

    @property
    def go_type_name(self) -> str:
        return "_".join([*self.outers, self.name])

    def get_field(self, name: str) -> Field | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None


@dataclass(eq=False)
class PathParam:
    field_path: tuple[str, ...]
    target: Field

    @property
    def go_accessor(self) -> str:
        return ".".join(go_camel_case(part) for part in self.field_path)

    @property
    def dotted(self) -> str:
        return ".".join(self.field_path)


@dataclass(eq=False)
class Binding:
    index: int
    http_method: str
    path_template: str
    path_params: list[PathParam] = field(default_factory=list)
    body: str = ""


@dataclass(eq=False)
class Method:
    name: str
    request_type: Message
    response_type: Message
    bindings: list[Binding] = field(default_factory=list)
    client_streaming: bool = False
    server_streaming: bool = False


@dataclass(eq=False)
class Service:
    name: str
    methods: list[Method] = field(default_factory=list)


@dataclass(eq=False)
class File:
    name: str
    package: str
    go_pkg: GoPackage
    messages: list[Message] = field(default_factory=list)
    enums: list[Enum] = field(default_factory=list)
    services: list[Service] = field(default_factory=list)

    def get_name(self) -> str:
        return self.name


@dataclass(frozen=True)
class ResponseFile:
    """A generated file ready to be handed to the plugin output."""

    go_pkg: GoPackage
    name: str
    content: str


def _qualify(package: str, *names: str) -> str:
    parts = [package] if package else []
    return "." + ".".join([*parts, *names])


def go_camel_case(name: str) -> str:
    """Convert a proto identifier into its exported Go spelling.

    ``user_id`` becomes ``UserId`` and ``foo_bar_2`` becomes ``FooBar_2``,
    matching protoc-gen-go.
    """
    out: list[str] = []
    i = 0
    while i < len(name):
        c = name[i]
        next_is_lower = i + 1 < len(name) and _is_lower(name[i + 1])
        if c == "." and next_is_lower:
            pass
        elif c == ".":
            out.append("_")
        elif c == "_" and (i == 0 or name[i - 1] == "."):
            out.append("X")
        elif c == "_" and next_is_lower:
            pass
        elif c.isdigit():
            out.append(c)
        else:
            out.append(c.upper() if _is_lower(c) else c)
            # a run of lowercase letters after the capital is kept as is
            while i + 1 < len(name) and _is_lower(name[i + 1]):
                i += 1
                out.append(name[i])
        i += 1
    return "".join(out)


def _is_lower(c: str) -> bool:
    return "a" <= c <= "z"
