from collections.abc import Iterable

from gateway_gen.core.ports.registry import DescriptorRegistry
from gateway_gen.descriptor.types import File, GoPackage, Method


class ImportSet:
    """Ordered packages with a membership set keyed by import path."""

    def __init__(self) -> None:
        self.packages: list[GoPackage] = []
        self.seen: set[str] = set()

    def add(self, pkg: GoPackage) -> bool:
        """Append *pkg* unless its path was already added. Returns whether it was."""
        if pkg.path in self.seen:
            return False
        self.seen.add(pkg.path)
        self.packages.append(pkg)
        return True


def collect_imports(
    file: File,
    base_imports: Iterable[GoPackage],
    registry: DescriptorRegistry,
    standalone: bool = False,
) -> list[GoPackage]:
    """Return the packages the gateway file generated for *file* must import.

    Base imports come first, followed by the file's own package in standalone
    mode, then per method the packages of enum-typed path parameters and of
    the request message. The file's own package is otherwise never imported.
    """
    imports = ImportSet()
    for pkg in base_imports:
        imports.add(pkg)

    if standalone:
        imports.add(file.go_pkg)

    for svc in file.services:
        for method in svc.methods:
            _add_enum_path_param_imports(imports, file, method, registry)
            pkg = method.request_type.file.go_pkg
            if not method.bindings or pkg == file.go_pkg:
                continue
            imports.add(pkg)

    return imports.packages


def _add_enum_path_param_imports(
    imports: ImportSet, file: File, method: Method, registry: DescriptorRegistry
) -> None:
    for binding in method.bindings:
        for param in binding.path_params:
            enum = registry.lookup_enum("", param.target.type_name)
            if enum is None:
                continue
            pkg = enum.file.go_pkg
            if pkg == file.go_pkg:
                continue
            imports.add(pkg)
