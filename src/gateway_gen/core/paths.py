import posixpath
from dataclasses import dataclass
from enum import Enum

from gateway_gen.core.errors import (
    ConfigurationConflictError,
    ModulePrefixMismatchError,
    UnknownPathTypeError,
)
from gateway_gen.descriptor.types import File

GATEWAY_SUFFIX = ".pb.gw.go"


class PathType(Enum):
    IMPORT = "import"
    SOURCE_RELATIVE = "source_relative"


def parse_path_type(value: str) -> PathType:
    # an empty value selects the default
    if value in ("", "import"):
        return PathType.IMPORT
    if value == "source_relative":
        return PathType.SOURCE_RELATIVE
    raise UnknownPathTypeError(value)


@dataclass(frozen=True)
class PathConfig:
    """Output addressing settings.

    ``module`` strips a Go module prefix from import-path based locations and
    is therefore only meaningful with ``paths=import``.
    """

    path_type: PathType = PathType.IMPORT
    module: str = ""

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        if self.module and self.path_type is not PathType.IMPORT:
            raise ConfigurationConflictError(self.module, self.path_type.value)


def resolve_file_path(file: File, config: PathConfig) -> str:
    """Compute where the companion of *file* lives, relative to the output root."""
    name = file.get_name()
    pkg_path = file.go_pkg.path
    config.validate()

    if config.module:
        trim_path, full_path = config.module + "/", pkg_path + "/"
        if not full_path.startswith(trim_path):
            raise ModulePrefixMismatchError(pkg_path, config.module)
        return _join(full_path[len(trim_path) :], posixpath.basename(name))

    if config.path_type is PathType.IMPORT and pkg_path:
        return f"{pkg_path}/{posixpath.basename(name)}"

    return name


def gateway_filename(path: str, suffix: str = GATEWAY_SUFFIX) -> str:
    base, _ = _split_ext(path)
    return f"{base}{suffix}"


def _split_ext(path: str) -> tuple[str, str]:
    # unlike posixpath.splitext a leading dot counts as an extension
    dot = path.rfind(".")
    if dot < 0 or "/" in path[dot:]:
        return path, ""
    return path[:dot], path[dot:]


def _join(*parts: str) -> str:
    kept = [p for p in parts if p]
    if not kept:
        return ""
    return posixpath.normpath(posixpath.join(*kept))
