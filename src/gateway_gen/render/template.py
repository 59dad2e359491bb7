"""Jinja2 rendering of ``.pb.gw.go`` files.

The template only formats strings; every naming and typing decision is made
here and handed over as small view objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from gateway_gen.core.errors import RenderError
from gateway_gen.core.params import TemplateParams
from gateway_gen.descriptor.types import Binding, File, GoPackage, Message, Method, PathParam, go_camel_case
from gateway_gen.render.pattern import PATTERN_VERSION, CompiledPattern, compile_template

_SCALAR_CONVERTERS = {
    "string": "runtime.String",
    "bool": "runtime.Bool",
    "bytes": "runtime.Bytes",
    "double": "runtime.Float64",
    "float": "runtime.Float32",
    "int32": "runtime.Int32",
    "sint32": "runtime.Int32",
    "sfixed32": "runtime.Int32",
    "int64": "runtime.Int64",
    "sint64": "runtime.Int64",
    "sfixed64": "runtime.Int64",
    "uint32": "runtime.Uint32",
    "fixed32": "runtime.Uint32",
    "uint64": "runtime.Uint64",
    "fixed64": "runtime.Uint64",
}

_REPEATED_SEPARATOR = ","

# keeps otherwise unused base imports referenced
_IMPORT_SUPPRESSORS = {
    "errors": "_ = errors.New",
    "io": "_ io.Reader",
    "net/http": "_ http.Handler",
    "github.com/grpc-ecosystem/grpc-gateway/v2/runtime": "_ = runtime.String",
    "github.com/grpc-ecosystem/grpc-gateway/v2/utilities": "_ = utilities.NewDoubleArray",
    "google.golang.org/grpc/codes": "_ codes.Code",
    "google.golang.org/grpc/grpclog": "_ = grpclog.Errorf",
    "google.golang.org/grpc/metadata": "_ = metadata.Join",
    "google.golang.org/grpc/status": "_ status.Status",
    "google.golang.org/protobuf/proto": "_ proto.Message",
}


@dataclass(frozen=True)
class ParamView:
    name: str
    accessor: str
    kind: str
    converter: str = ""
    enum_type: str = ""
    separator: str = ""


@dataclass(frozen=True)
class BindingView:
    suffix: str
    http_method: str
    path_template: str
    rpc_path: str
    pattern: CompiledPattern
    params: tuple[ParamView, ...]
    body_target: str
    filter_paths: tuple[tuple[str, ...], ...] | None
    patch_field: str
    server_streaming: bool

    @property
    def has_enum_param(self) -> bool:
        return any(p.kind == "enum" for p in self.params)

    @property
    def has_enum_slice_param(self) -> bool:
        return any(p.kind == "enum_slice" for p in self.params)

    @property
    def go_filter(self) -> str:
        seqs = ", ".join("{" + ", ".join(f'"{s}"' for s in path) + "}" for path in self.filter_paths or ())
        return "[][]string{" + seqs + "}"


@dataclass(frozen=True)
class MethodView:
    name: str
    request_type: str
    stream_client_type: str
    client_streaming: bool
    server_streaming: bool
    bindings: tuple[BindingView, ...]


@dataclass
class ServiceView:
    name: str
    client_type: str
    server_type: str
    new_client: str
    methods: list[MethodView] = field(default_factory=list)


class TemplateRenderer:
    """Render gateway source for one file. Implements the ``Renderer`` protocol."""

    def __init__(self, environment: Environment | None = None) -> None:
        self._env = environment or create_environment()

    def render(self, params: TemplateParams) -> str:
        try:
            view = _FileView(params)
            template = self._env.get_template("gateway.go.j2")
            return template.render(
                file=params.file,
                package_name=params.file.go_pkg.name,
                imports=[view.import_spec(pkg) for pkg in params.imports],
                suppressors=[_IMPORT_SUPPRESSORS[p.path] for p in params.imports if p.path in _IMPORT_SUPPRESSORS],
                services=view.services(),
                omit_package_doc=params.omit_package_doc,
                register_func_suffix=params.register_func_suffix,
                handler_context="req.Context()" if params.use_request_context else "ctx",
                pattern_version=PATTERN_VERSION,
            )
        except TemplateError as exc:
            raise RenderError(params.file.get_name(), str(exc)) from exc


def create_environment() -> Environment:
    return Environment(
        loader=PackageLoader("gateway_gen.render", "templates"),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        autoescape=False,
    )


class _FileView:
    def __init__(self, params: TemplateParams) -> None:
        self._params = params
        self._file: File = params.file

    def import_spec(self, pkg: GoPackage) -> str:
        if pkg == self._file.go_pkg:
            return f'{self._self_alias()} "{pkg.path}"'
        return pkg.import_spec

    def services(self) -> list[ServiceView]:
        views: list[ServiceView] = []
        for svc in self._file.services:
            view = ServiceView(
                name=svc.name,
                client_type=self._own(f"{svc.name}Client"),
                server_type=self._own(f"{svc.name}Server"),
                new_client=self._own(f"New{svc.name}Client"),
            )
            for method in svc.methods:
                if not method.bindings:
                    continue
                view.methods.append(
                    MethodView(
                        name=method.name,
                        request_type=self._type(method.request_type),
                        stream_client_type=self._own(f"{svc.name}_{method.name}Client"),
                        client_streaming=method.client_streaming,
                        server_streaming=method.server_streaming,
                        bindings=tuple(self._binding(svc.name, method, b) for b in method.bindings),
                    )
                )
            if view.methods:
                views.append(view)
        return views

    def _binding(self, svc_name: str, method: Method, binding: Binding) -> BindingView:
        package = self._file.package
        service_path = f"{package}.{svc_name}" if package else svc_name
        path_fields = {p.field_path for p in binding.path_params}
        filter_paths = None
        if binding.body != "*" and not method.client_streaming:
            excluded = set(path_fields)
            if binding.body:
                excluded.add(tuple(binding.body.split(".")))
            filter_paths = tuple(sorted(excluded))
        return BindingView(
            suffix=f"{svc_name}_{method.name}_{binding.index}",
            http_method=binding.http_method,
            path_template=binding.path_template,
            rpc_path=f"/{service_path}/{method.name}",
            pattern=compile_template(binding.path_template),
            params=tuple(self._param(p) for p in binding.path_params),
            body_target=self._body_target(binding),
            filter_paths=filter_paths,
            patch_field=self._patch_field(method.request_type, binding),
            server_streaming=method.server_streaming,
        )

    def _param(self, param: PathParam) -> ParamView:
        target = param.target
        nested = len(param.field_path) > 1
        if target.enum is not None:
            enum_type = self._qualified(target.enum.file.go_pkg, target.enum.go_type_name)
            if nested:
                # validated here, assigned through the runtime's field path walk
                return ParamView(
                    name=param.dotted,
                    accessor=param.go_accessor,
                    kind="nested_enum",
                    converter="runtime.EnumSlice" if target.repeated else "runtime.Enum",
                    enum_type=enum_type,
                    separator=_REPEATED_SEPARATOR if target.repeated else "",
                )
            return ParamView(
                name=param.dotted,
                accessor=param.go_accessor,
                kind="enum_slice" if target.repeated else "enum",
                enum_type=enum_type,
                separator=_REPEATED_SEPARATOR if target.repeated else "",
            )
        if not nested and not target.repeated:
            converter = _SCALAR_CONVERTERS.get(target.type)
            if converter is not None:
                return ParamView(name=param.dotted, accessor=param.go_accessor, kind="scalar", converter=converter)
        return ParamView(name=param.dotted, accessor=param.go_accessor, kind="populate")

    def _body_target(self, binding: Binding) -> str:
        if not binding.body:
            return ""
        if binding.body == "*":
            return "&protoReq"
        accessor = ".".join(go_camel_case(part) for part in binding.body.split("."))
        return f"&protoReq.{accessor}"

    def _patch_field(self, request: Message, binding: Binding) -> str:
        if not self._params.allow_patch_feature or binding.http_method != "PATCH":
            return ""
        if binding.body in ("", "*") or request.get_field("update_mask") is None:
            return ""
        return go_camel_case(binding.body)

    def _type(self, msg: Message) -> str:
        return self._qualified(msg.file.go_pkg, msg.go_type_name)

    def _own(self, name: str) -> str:
        return self._qualified(self._file.go_pkg, name)

    def _qualified(self, pkg: GoPackage, name: str) -> str:
        if pkg == self._file.go_pkg:
            if self._params.standalone:
                return f"{self._self_alias()}.{name}"
            return name
        return f"{pkg.identifier}.{name}"

    def _self_alias(self) -> str:
        name = self._file.go_pkg.name
        return "ext" + name[:1].upper() + name[1:]
