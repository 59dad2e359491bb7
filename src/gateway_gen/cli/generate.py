from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from gateway_gen.core.errors import GatewayGenError
from gateway_gen.core.generator import DEFAULT_BASE_IMPORTS, GatewayGenerator, has_target_service
from gateway_gen.core.paths import PathConfig, gateway_filename, parse_path_type, resolve_file_path
from gateway_gen.descriptor.registry import Registry

console = Console()

DescriptorArg = Annotated[Path, typer.Argument(help="JSON descriptor set produced from the .proto files.")]
PathsOpt = Annotated[
    str,
    typer.Option("--paths", help='Output addressing: "import" or "source_relative".', envvar="GATEWAY_GEN_PATHS"),
]
ModuleOpt = Annotated[
    str,
    typer.Option("--module", help="Go module prefix stripped from output paths.", envvar="GATEWAY_GEN_MODULE"),
]


def _fail(exc: Exception) -> typer.Exit:
    console.print(str(exc), style="red", markup=False)
    return typer.Exit(1)


def generate(
    descriptor: DescriptorArg,
    out: Annotated[Path, typer.Option(help="Directory generated files are written to.", envvar="GATEWAY_GEN_OUT")] = Path(
        "."
    ),
    paths: PathsOpt = "import",
    module: ModuleOpt = "",
    register_func_suffix: Annotated[
        str, typer.Option(help="Suffix appended to the names of Register*Handler functions.")
    ] = "",
    request_context: Annotated[
        bool,
        typer.Option(
            "--request-context/--no-request-context",
            help="Derive the annotation context from the HTTP request instead of the registration context.",
        ),
    ] = True,
    allow_patch_feature: Annotated[
        bool,
        typer.Option(
            "--allow-patch-feature/--no-allow-patch-feature",
            help="Populate update_mask from the body of PATCH requests.",
        ),
    ] = True,
    standalone: Annotated[
        bool, typer.Option(help="Generate a standalone package that imports the target package.")
    ] = False,
    omit_package_doc: Annotated[bool, typer.Option(help="Omit the package doc comment.")] = False,
    dry_run: Annotated[bool, typer.Option(help="List the files that would be written without writing them.")] = False,
) -> None:
    """Generate .pb.gw.go files for the targets of a descriptor set."""
    try:
        registry = Registry.from_path(descriptor, omit_package_doc=omit_package_doc)
        generator = GatewayGenerator(
            registry,
            DEFAULT_BASE_IMPORTS,
            use_request_context=request_context,
            register_func_suffix=register_func_suffix,
            path_type=paths,
            module=module,
            allow_patch_feature=allow_patch_feature,
            standalone=standalone,
        )
        files = generator.generate(registry.targets())
    except (GatewayGenError, FileNotFoundError) as exc:
        raise _fail(exc) from exc

    if dry_run:
        table = Table(show_lines=False)
        for h in ("name", "go package", "bytes"):
            table.add_column(h)
        for f in files:
            table.add_row(f.name, f.go_pkg.path, str(len(f.content.encode("utf-8"))))
        console.print(table)
        console.print(f"({len(files)} files)")
        return

    for f in files:
        target = out / f.name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(f.content, encoding="utf-8")
        console.print(f"[green]Wrote[/green] {target}")


def inspect(
    descriptor: DescriptorArg,
    paths: PathsOpt = "import",
    module: ModuleOpt = "",
) -> None:
    """Show which target files get a gateway file and where it would go."""
    try:
        registry = Registry.from_path(descriptor)
        config = PathConfig(parse_path_type(paths), module)
    except (GatewayGenError, FileNotFoundError) as exc:
        raise _fail(exc) from exc

    table = Table(show_lines=False)
    for h in ("file", "go package", "bound methods", "output"):
        table.add_column(h)
    for file in registry.targets():
        bound = sum(1 for svc in file.services for m in svc.methods if m.bindings)
        if not has_target_service(file):
            output = "-"
        else:
            try:
                output = gateway_filename(resolve_file_path(file, config))
            except GatewayGenError as exc:
                output = f"error: {exc}"
        table.add_row(file.name, file.go_pkg.path, str(bound), output)
    console.print(table)
