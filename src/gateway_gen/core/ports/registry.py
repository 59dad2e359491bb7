from typing import Protocol

from gateway_gen.descriptor.types import Enum


class DescriptorRegistry(Protocol):
    def lookup_enum(self, location: str, name: str) -> Enum | None: ...

    @property
    def omit_package_doc(self) -> bool: ...
