"""Compile HTTP rule path templates into ``runtime.NewPattern`` arguments.

Grammar::

    Template = "/" Segments [ ":" Verb ]
    Segments = Segment { "/" Segment }
    Segment  = "*" | "**" | LITERAL | Variable
    Variable = "{" FieldPath [ "=" Segments ] "}"
"""

from dataclasses import dataclass

from gateway_gen.core.errors import DescriptorError

OP_NOP = 0
OP_PUSH = 1
OP_LIT_PUSH = 2
OP_PUSH_M = 3
OP_CONCAT_N = 4
OP_CAPTURE = 5

PATTERN_VERSION = 1


@dataclass(frozen=True)
class CompiledPattern:
    ops: tuple[int, ...]
    pool: tuple[str, ...]
    verb: str

    def go_ops(self) -> str:
        return "[]int{" + ", ".join(str(op) for op in self.ops) + "}"

    def go_pool(self) -> str:
        return "[]string{" + ", ".join(f'"{s}"' for s in self.pool) + "}"


def compile_template(template: str) -> CompiledPattern:
    if not template.startswith("/"):
        raise DescriptorError(f"path template must start with '/': {template}")
    body, verb = _split_verb(template[1:])

    ops: list[int] = []
    pool: list[str] = []

    def intern(value: str) -> int:
        if value not in pool:
            pool.append(value)
        return pool.index(value)

    def compile_segment(segment: str) -> None:
        if segment == "*":
            ops.extend((OP_PUSH, 0))
        elif segment == "**":
            ops.extend((OP_PUSH_M, 0))
        elif not segment or "{" in segment or "}" in segment:
            raise DescriptorError(f"invalid segment {segment!r} in path template: {template}")
        else:
            ops.extend((OP_LIT_PUSH, intern(segment)))

    for segment in _split_segments(body, template):
        if segment.startswith("{"):
            if not segment.endswith("}"):
                raise DescriptorError(f"invalid variable {segment!r} in path template: {template}")
            name, _, inner = segment[1:-1].partition("=")
            inner_segments = inner.split("/") if inner else ["*"]
            for part in inner_segments:
                compile_segment(part)
            ops.extend((OP_CONCAT_N, len(inner_segments)))
            ops.extend((OP_CAPTURE, intern(name.strip())))
        else:
            compile_segment(segment)

    return CompiledPattern(ops=tuple(ops), pool=tuple(pool), verb=verb)


def _split_verb(body: str) -> tuple[str, str]:
    # a verb is a ':' after the last segment, outside of any variable
    last = body.rsplit("/", 1)[-1]
    if ":" in last and "}" not in last[last.index(":") :]:
        head, _, verb = body.rpartition(":")
        return head, verb
    return body, ""


def _split_segments(body: str, template: str) -> list[str]:
    if not body:
        return []
    segments: list[str] = []
    depth = 0
    current = ""
    for c in body:
        if c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
            if depth < 0:
                raise DescriptorError(f"unbalanced '}}' in path template: {template}")
        if c == "/" and depth == 0:
            segments.append(current)
            current = ""
            continue
        current += c
    if depth != 0:
        raise DescriptorError(f"unbalanced '{{' in path template: {template}")
    segments.append(current)
    return segments
