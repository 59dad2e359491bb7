class GatewayGenError(Exception):
    """Base class for every error raised while generating gateway files."""


class DescriptorError(GatewayGenError, ValueError):
    """The descriptor set cannot be linked into a consistent graph."""


class UnknownPathTypeError(GatewayGenError, ValueError):
    def __init__(self, value: str) -> None:
        super().__init__(f'Unknown path type "{value}": want "import" or "source_relative".')
        self.value = value


class ConfigurationConflictError(GatewayGenError, ValueError):
    def __init__(self, module: str, path_type: str) -> None:
        super().__init__(f"cannot use module={module} with paths={path_type}")
        self.module = module
        self.path_type = path_type


class ModulePrefixMismatchError(GatewayGenError, ValueError):
    def __init__(self, package_path: str, module: str) -> None:
        super().__init__(f"{package_path}: file go path does not match module prefix: {module}/")
        self.package_path = package_path
        self.module = module


class RenderError(GatewayGenError, RuntimeError):
    def __init__(self, file_name: str, reason: str) -> None:
        super().__init__(f"{file_name}: failed to render gateway code: {reason}")
        self.file_name = file_name


class SourceValidationError(GatewayGenError, RuntimeError):
    """Generated source did not parse.

    ``source`` holds the raw text exactly as rendered so a broken template can
    be diagnosed without re-running the generator.
    """

    def __init__(self, message: str, source: str) -> None:
        super().__init__(message)
        self.source = source
