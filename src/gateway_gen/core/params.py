from dataclasses import dataclass

from gateway_gen.descriptor.types import File, GoPackage


@dataclass(frozen=True)
class TemplateParams:
    """Everything the gateway template needs to render one file."""

    file: File
    imports: tuple[GoPackage, ...]
    use_request_context: bool = False
    register_func_suffix: str = ""
    allow_patch_feature: bool = False
    omit_package_doc: bool = False
    standalone: bool = False
