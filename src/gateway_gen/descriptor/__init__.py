from gateway_gen.descriptor.registry import Registry, go_package_for
from gateway_gen.descriptor.schema import DescriptorSet, FileSpec
from gateway_gen.descriptor.types import (
    Binding,
    Enum,
    Field,
    File,
    GoPackage,
    Message,
    Method,
    PathParam,
    ResponseFile,
    Service,
)

__all__ = [
    "Binding",
    "DescriptorSet",
    "Enum",
    "Field",
    "File",
    "FileSpec",
    "GoPackage",
    "Message",
    "Method",
    "PathParam",
    "Registry",
    "ResponseFile",
    "Service",
    "go_package_for",
]
