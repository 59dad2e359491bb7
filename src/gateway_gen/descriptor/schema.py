from pydantic import BaseModel, ConfigDict, Field


class _Spec(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class FieldSpec(_Spec):
    name: str
    number: int
    type: str
    type_name: str = ""
    repeated: bool = False


class EnumSpec(_Spec):
    name: str
    values: list[str] = Field(default_factory=list)


class MessageSpec(_Spec):
    name: str
    fields: list[FieldSpec] = Field(default_factory=list)
    nested_messages: list["MessageSpec"] = Field(default_factory=list)
    nested_enums: list[EnumSpec] = Field(default_factory=list)


MessageSpec.model_rebuild()  # necessary for recursive types


class HttpRuleSpec(_Spec):
    method: str
    path: str
    body: str = ""


class MethodSpec(_Spec):
    name: str
    input_type: str
    output_type: str
    client_streaming: bool = False
    server_streaming: bool = False
    http: list[HttpRuleSpec] = Field(default_factory=list)


class ServiceSpec(_Spec):
    name: str
    methods: list[MethodSpec] = Field(default_factory=list)


class FileSpec(_Spec):
    name: str
    package: str = ""
    go_package: str = ""
    messages: list[MessageSpec] = Field(default_factory=list)
    enums: list[EnumSpec] = Field(default_factory=list)
    services: list[ServiceSpec] = Field(default_factory=list)


class DescriptorSet(_Spec):
    """Serialized form of a plugin request: every parsed file plus the targets."""

    files: list[FileSpec]
    files_to_generate: list[str] = Field(default_factory=list)
    omit_package_doc: bool = False
