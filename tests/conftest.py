"""Shared fixtures and helpers for tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from gateway_gen.descriptor.types import Binding, Enum, Field, File, GoPackage, Message, Method, PathParam, Service

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        if rel.parts and rel.parts[0] == "unit":
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Descriptor graph builders
# ---------------------------------------------------------------------------


def make_file(name: str, go_path: str, package: str = "example.v1", go_name: str = "") -> File:
    return File(
        name=name,
        package=package,
        go_pkg=GoPackage(path=go_path, name=go_name or go_path.rsplit("/", 1)[-1]),
    )


def make_message(file: File, name: str, *fields: Field) -> Message:
    msg = Message(name=name, file=file, fields=list(fields))
    file.messages.append(msg)
    return msg


def make_enum(file: File, name: str, *values: str) -> Enum:
    enum = Enum(name=name, values=list(values) or ["UNKNOWN"], file=file)
    file.enums.append(enum)
    return enum


def enum_field(name: str, enum: Enum, number: int = 1) -> Field:
    return Field(name=name, number=number, type="enum", type_name=enum.fqen, enum=enum)


def string_field(name: str, number: int = 1) -> Field:
    return Field(name=name, number=number, type="string")


def bind(request: Message, http_method: str, path: str, *params: str, body: str = "", index: int = 0) -> Binding:
    path_params = []
    for param in params:
        target = request.get_field(param)
        assert target is not None, param
        path_params.append(PathParam(field_path=(param,), target=target))
    return Binding(index=index, http_method=http_method, path_template=path, path_params=path_params, body=body)


def add_service(file: File, name: str, *methods: Method) -> Service:
    svc = Service(name=name, methods=list(methods))
    file.services.append(svc)
    return svc


def make_method(name: str, request: Message, *bindings: Binding, response: Message | None = None) -> Method:
    return Method(name=name, request_type=request, response_type=response or request, bindings=list(bindings))


class FakeRegistry:
    """Enum lookup over an explicit list, recording every lookup."""

    def __init__(self, *enums: Enum, omit_package_doc: bool = False) -> None:
        self._enums = {e.fqen: e for e in enums}
        self._omit_package_doc = omit_package_doc
        self.lookups: list[str] = []

    @property
    def omit_package_doc(self) -> bool:
        return self._omit_package_doc

    def lookup_enum(self, location: str, name: str) -> Enum | None:
        self.lookups.append(name)
        return self._enums.get(name)


# ---------------------------------------------------------------------------
# Descriptor set documents
# ---------------------------------------------------------------------------


def library_descriptor_set() -> dict[str, Any]:
    """A two-file descriptor set: shared types plus a bookstore service."""
    return {
        "files": [
            {
                "name": "example/types/kind.proto",
                "package": "example.types",
                "go_package": "example.com/api/types;typespb",
                "enums": [{"name": "Kind", "values": ["KIND_UNSPECIFIED", "KIND_BOOK"]}],
                "messages": [
                    {
                        "name": "Paging",
                        "fields": [{"name": "page_size", "number": 1, "type": "int32"}],
                    }
                ],
            },
            {
                "name": "example/library/library.proto",
                "package": "example.library.v1",
                "go_package": "example.com/api/library/v1;librarypb",
                "messages": [
                    {
                        "name": "Book",
                        "fields": [
                            {"name": "name", "number": 1, "type": "string"},
                            {"name": "title", "number": 2, "type": "string"},
                        ],
                    },
                    {
                        "name": "GetBookRequest",
                        "fields": [{"name": "name", "number": 1, "type": "string"}],
                    },
                    {
                        "name": "ListBooksRequest",
                        "fields": [
                            {"name": "shelf_id", "number": 1, "type": "int64"},
                            {"name": "kind", "number": 2, "type": "enum", "type_name": ".example.types.Kind"},
                        ],
                    },
                    {
                        "name": "ListBooksResponse",
                        "fields": [
                            {"name": "books", "number": 1, "type": "message", "type_name": "Book", "repeated": True}
                        ],
                    },
                    {
                        "name": "UpdateBookRequest",
                        "fields": [
                            {"name": "book", "number": 1, "type": "message", "type_name": "Book"},
                            {
                                "name": "update_mask",
                                "number": 2,
                                "type": "message",
                                "type_name": ".google.protobuf.FieldMask",
                            },
                        ],
                    },
                ],
                "services": [
                    {
                        "name": "LibraryService",
                        "methods": [
                            {
                                "name": "GetBook",
                                "input_type": "GetBookRequest",
                                "output_type": "Book",
                                "http": [{"method": "get", "path": "/v1/{name=shelves/*/books/*}"}],
                            },
                            {
                                "name": "ListBooks",
                                "input_type": "ListBooksRequest",
                                "output_type": "ListBooksResponse",
                                "http": [{"method": "get", "path": "/v1/shelves/{shelf_id}/kinds/{kind}/books"}],
                            },
                            {
                                "name": "WatchBooks",
                                "input_type": ".example.types.Paging",
                                "output_type": "Book",
                                "server_streaming": True,
                                "http": [{"method": "get", "path": "/v1/books:watch"}],
                            },
                            {
                                "name": "UpdateBook",
                                "input_type": "UpdateBookRequest",
                                "output_type": "Book",
                                "http": [
                                    {"method": "patch", "path": "/v1/{book.name=shelves/*/books/*}", "body": "book"}
                                ],
                            },
                            {
                                "name": "Ping",
                                "input_type": "GetBookRequest",
                                "output_type": "Book",
                            },
                        ],
                    }
                ],
            },
        ],
        "files_to_generate": ["example/types/kind.proto", "example/library/library.proto"],
    }


@pytest.fixture
def descriptor_set() -> dict[str, Any]:
    return library_descriptor_set()


@pytest.fixture
def descriptor_path(tmp_path: Path, descriptor_set: dict[str, Any]) -> Path:
    path = tmp_path / "descriptors.json"
    path.write_text(json.dumps(descriptor_set), encoding="utf-8")
    return path
