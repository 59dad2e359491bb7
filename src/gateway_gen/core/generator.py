import logging
from collections.abc import Sequence

from gateway_gen.core.errors import GatewayGenError, RenderError, SourceValidationError
from gateway_gen.core.imports import collect_imports
from gateway_gen.core.params import TemplateParams
from gateway_gen.core.paths import PathConfig, gateway_filename, parse_path_type, resolve_file_path
from gateway_gen.core.ports.codegen import Renderer, SourceFormatter
from gateway_gen.core.ports.registry import DescriptorRegistry
from gateway_gen.descriptor.types import File, GoPackage, ResponseFile

logger = logging.getLogger(__name__)

DEFAULT_BASE_IMPORTS: tuple[GoPackage, ...] = tuple(
    GoPackage(path=path, name=path.rsplit("/", 1)[-1])
    for path in (
        "context",
        "errors",
        "io",
        "net/http",
        "github.com/grpc-ecosystem/grpc-gateway/v2/runtime",
        "github.com/grpc-ecosystem/grpc-gateway/v2/utilities",
        "google.golang.org/grpc",
        "google.golang.org/grpc/codes",
        "google.golang.org/grpc/grpclog",
        "google.golang.org/grpc/metadata",
        "google.golang.org/grpc/status",
        "google.golang.org/protobuf/proto",
    )
)


class _NoTargetService(Exception):
    """Raised internally when a file has nothing to generate."""


class GatewayGenerator:
    """Generate ``.pb.gw.go`` files for a batch of descriptor files.

    A batch either succeeds as a whole or raises on the first failing file;
    files without any HTTP-bound method are skipped and produce nothing.
    """

    def __init__(
        self,
        registry: DescriptorRegistry,
        base_imports: Sequence[GoPackage],
        use_request_context: bool = False,
        register_func_suffix: str = "",
        path_type: str = "import",
        module: str = "",
        allow_patch_feature: bool = False,
        standalone: bool = False,
        renderer: Renderer | None = None,
        formatter: SourceFormatter | None = None,
    ) -> None:
        self._registry = registry
        self._base_imports = tuple(base_imports)
        self._use_request_context = use_request_context
        self._register_func_suffix = register_func_suffix
        self._path_config = PathConfig(parse_path_type(path_type), module)
        self._allow_patch_feature = allow_patch_feature
        self._standalone = standalone

        if renderer is None:
            from gateway_gen.render.template import TemplateRenderer

            renderer = TemplateRenderer()
        if formatter is None:
            from gateway_gen.validate.formatter import GoSourceFormatter

            formatter = GoSourceFormatter()
        self._renderer = renderer
        self._formatter = formatter

    def generate(self, targets: Sequence[File]) -> list[ResponseFile]:
        files: list[ResponseFile] = []
        for file in targets:
            logger.debug("Processing %s", file.get_name())

            try:
                code = self._generate(file)
            except _NoTargetService:
                logger.info("%s: no target service defined in the file", file.get_name())
                continue

            try:
                formatted = self._formatter.format(code)
            except SourceValidationError as exc:
                logger.error("%s: %s\n%s", file.get_name(), exc, exc.source)
                raise

            try:
                name = resolve_file_path(file, self._path_config)
            except GatewayGenError as exc:
                logger.error("%s: %s\n%s", file.get_name(), exc, code)
                raise

            files.append(
                ResponseFile(
                    go_pkg=file.go_pkg,
                    name=gateway_filename(name),
                    content=formatted,
                )
            )
        return files

    def _generate(self, file: File) -> str:
        if not has_target_service(file):
            raise _NoTargetService

        imports = collect_imports(file, self._base_imports, self._registry, standalone=self._standalone)
        params = TemplateParams(
            file=file,
            imports=tuple(imports),
            use_request_context=self._use_request_context,
            register_func_suffix=self._register_func_suffix,
            allow_patch_feature=self._allow_patch_feature,
            omit_package_doc=self._registry.omit_package_doc,
            standalone=self._standalone,
        )
        try:
            return self._renderer.render(params)
        except RenderError:
            raise
        except Exception as exc:
            raise RenderError(file.get_name(), str(exc)) from exc


def has_target_service(file: File) -> bool:
    """Whether *file* declares at least one method bound to an HTTP route."""
    return any(method.bindings for svc in file.services for method in svc.methods)
