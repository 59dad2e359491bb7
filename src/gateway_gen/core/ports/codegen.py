from typing import Protocol

from gateway_gen.core.params import TemplateParams


class Renderer(Protocol):
    def render(self, params: TemplateParams) -> str: ...


class SourceFormatter(Protocol):
    def format(self, source: str) -> str: ...
