"""Descriptor registry: links a :class:`DescriptorSet` into the typed graph.

Type names follow protobuf conventions. Fully-qualified names start with a
dot (``.example.v1.Kind``); anything else is resolved relative to a location,
innermost scope first. Once a field type resolves, its name is rewritten to
the fully-qualified form.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import TypeVar

from pydantic import ValidationError

from gateway_gen.core.errors import DescriptorError
from gateway_gen.descriptor.schema import DescriptorSet, EnumSpec, FileSpec, HttpRuleSpec, MessageSpec
from gateway_gen.descriptor.types import (
    Binding,
    Enum,
    Field,
    File,
    GoPackage,
    Message,
    Method,
    PathParam,
    Service,
)

logger = logging.getLogger(__name__)

_PATH_VARIABLE = re.compile(r"\{([^}=]+)(?:=[^}]*)?\}")
_NON_IDENT = re.compile(r"[^A-Za-z0-9_]")

T = TypeVar("T")


class Registry:
    def __init__(self, omit_package_doc: bool = False) -> None:
        self._files: dict[str, File] = {}
        self._messages: dict[str, Message] = {}
        self._enums: dict[str, Enum] = {}
        self._targets: list[str] = []
        self._omit_package_doc = omit_package_doc

    @classmethod
    def from_path(cls, path: str | Path, omit_package_doc: bool = False) -> Registry:
        try:
            raw = Path(path).read_text(encoding="utf-8")
        except FileNotFoundError:
            raise FileNotFoundError(f"Descriptor set not found: {path}") from None
        try:
            descriptor_set = DescriptorSet.model_validate_json(raw)
        except ValidationError as exc:
            raise DescriptorError(f"{path}: invalid descriptor set: {exc}") from exc
        registry = cls(omit_package_doc=omit_package_doc)
        registry.load(descriptor_set)
        return registry

    @property
    def omit_package_doc(self) -> bool:
        return self._omit_package_doc

    def load(self, descriptor_set: DescriptorSet) -> None:
        self._omit_package_doc = self._omit_package_doc or descriptor_set.omit_package_doc

        # types first so services can reference messages from any file
        specs = descriptor_set.files
        for spec in specs:
            self._load_file(spec)
        for spec in specs:
            self._load_fields(spec)
        for spec in specs:
            self._load_services(spec)

        for name in descriptor_set.files_to_generate:
            if name not in self._files:
                raise DescriptorError(f"no descriptor for file to generate: {name}")
            self._targets.append(name)
        logger.debug("Loaded %d file(s), %d target(s)", len(self._files), len(self._targets))

    def targets(self) -> list[File]:
        return [self._files[name] for name in self._targets]

    def lookup_file(self, name: str) -> File:
        try:
            return self._files[name]
        except KeyError:
            raise DescriptorError(f"no such file given: {name}") from None

    def lookup_msg(self, location: str, name: str) -> Message | None:
        return _lookup(self._messages, location, name)

    def lookup_enum(self, location: str, name: str) -> Enum | None:
        return _lookup(self._enums, location, name)

    def _load_file(self, spec: FileSpec) -> None:
        if spec.name in self._files:
            raise DescriptorError(f"duplicate file: {spec.name}")
        file = File(name=spec.name, package=spec.package, go_pkg=go_package_for(spec))
        self._files[spec.name] = file

        for enum_spec in spec.enums:
            self._register_enum(file, enum_spec, ())
        for msg_spec in spec.messages:
            self._register_message(file, msg_spec, ())

    def _register_enum(self, file: File, spec: EnumSpec, outers: tuple[str, ...]) -> None:
        enum = Enum(name=spec.name, values=list(spec.values), file=file, outers=outers)
        file.enums.append(enum)
        self._enums[enum.fqen] = enum

    def _register_message(self, file: File, spec: MessageSpec, outers: tuple[str, ...]) -> None:
        msg = Message(name=spec.name, file=file, outers=outers)
        file.messages.append(msg)
        self._messages[msg.fqmn] = msg

        inner = (*outers, spec.name)
        for enum_spec in spec.nested_enums:
            self._register_enum(file, enum_spec, inner)
        for nested in spec.nested_messages:
            self._register_message(file, nested, inner)

    def _load_fields(self, spec: FileSpec) -> None:
        def walk(msg_spec: MessageSpec, outers: tuple[str, ...]) -> None:
            msg = self._messages[_qualify(spec.package, *outers, msg_spec.name)]
            for field_spec in msg_spec.fields:
                f = Field(
                    name=field_spec.name,
                    number=field_spec.number,
                    type=field_spec.type,
                    type_name=field_spec.type_name,
                    repeated=field_spec.repeated,
                )
                if f.type == "message":
                    f.message = self.lookup_msg(msg.fqmn, f.type_name)
                    if f.message is not None:
                        f.type_name = f.message.fqmn
                elif f.type == "enum":
                    f.enum = self.lookup_enum(msg.fqmn, f.type_name)
                    if f.enum is not None:
                        f.type_name = f.enum.fqen
                msg.fields.append(f)
            for nested in msg_spec.nested_messages:
                walk(nested, (*outers, msg_spec.name))

        for msg_spec in spec.messages:
            walk(msg_spec, ())

    def _load_services(self, spec: FileSpec) -> None:
        file = self._files[spec.name]
        location = _qualify(spec.package)
        for svc_spec in spec.services:
            svc = Service(name=svc_spec.name)
            for method_spec in svc_spec.methods:
                request = self.lookup_msg(location, method_spec.input_type)
                response = self.lookup_msg(location, method_spec.output_type)
                if request is None or response is None:
                    missing = method_spec.input_type if request is None else method_spec.output_type
                    raise DescriptorError(f"{spec.name}: {svc_spec.name}.{method_spec.name}: unknown message {missing}")
                method = Method(
                    name=method_spec.name,
                    request_type=request,
                    response_type=response,
                    client_streaming=method_spec.client_streaming,
                    server_streaming=method_spec.server_streaming,
                )
                for index, rule in enumerate(method_spec.http):
                    method.bindings.append(_new_binding(method, index, rule))
                svc.methods.append(method)
            file.services.append(svc)


def _new_binding(method: Method, index: int, rule: HttpRuleSpec) -> Binding:
    binding = Binding(
        index=index,
        http_method=rule.method.upper(),
        path_template=rule.path,
        body=rule.body,
    )
    for variable in _PATH_VARIABLE.findall(rule.path):
        if method.client_streaming:
            raise DescriptorError(f"{method.name}: cannot use path parameter in client streaming: {rule.path}")
        field_path = tuple(variable.strip().split("."))
        binding.path_params.append(PathParam(field_path=field_path, target=_resolve_field_path(method, field_path)))
    return binding


def _resolve_field_path(method: Method, field_path: tuple[str, ...]) -> Field:
    *parents, leaf = field_path
    msg: Message | None = method.request_type
    for part in parents:
        parent = msg.get_field(part) if msg is not None else None
        msg = parent.message if parent is not None else None
    target = msg.get_field(leaf) if msg is not None else None
    if target is None:
        raise DescriptorError(
            f"{method.request_type.fqmn}: no field {'.'.join(field_path)} for path parameter of {method.name}"
        )
    return target


def go_package_for(spec: FileSpec) -> GoPackage:
    """Derive the Go package of a file from its ``go_package`` option.

    ``"example.com/foo;foopb"`` names the package explicitly. Without a name
    the last path element is used; without any option the proto package is.
    """
    path, _, name = spec.go_package.partition(";")
    if not name:
        name = path.rsplit("/", 1)[-1] if path else spec.package.rsplit(".", 1)[-1]
    name = _NON_IDENT.sub("_", name)
    return GoPackage(path=path, name=name)


def _qualify(package: str, *names: str) -> str:
    return "." + ".".join(p for p in (package, *names) if p)


def _lookup(table: dict[str, T], location: str, name: str) -> T | None:
    if name.startswith("."):
        return table.get(name)
    scope = location.lstrip(".").split(".") if location.strip(".") else []
    for depth in range(len(scope), -1, -1):
        candidate = _qualify(".".join(scope[:depth]), name)
        if candidate in table:
            return table[candidate]
    return None
