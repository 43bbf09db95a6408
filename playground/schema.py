"""
Schema resolver.

Callers describe the object they want in a Zod-like notation::

    z.object({
      name: z.string().describe("Product name"),
      price: z.number().optional(),
      tags: z.array(z.string()),
      tier: z.enum(["free", "pro"]).default("free"),
    })

The text is tokenized and parsed into a SchemaNode tree; nothing in it is
ever executed. The tree compiles to a pydantic model (validation) and to
a JSON schema (structured output request). Any parse failure degrades
to schemaless extraction.
"""

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Literal, Optional, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field, create_model

from .errors import SchemaCompileError

logger = logging.getLogger(__name__)

MAX_SCHEMA_CHARS = 20000
MAX_DEPTH = 32

_MISSING = object()

_TOKEN_RE = re.compile(
    r"""
      (?P<ws>\s+|//[^\n]*|/\*.*?\*/)
    | (?P<string>"(?:[^"\\\n]|\\.)*"|'(?:[^'\\\n]|\\.)*'|`[^`$\\]*`)
    | (?P<number>-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?)
    | (?P<ident>[A-Za-z_$][A-Za-z0-9_$]*)
    | (?P<punct>[(){}\[\],:.])
    """,
    re.VERBOSE | re.DOTALL,
)

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "0": "\0"}

Token = Tuple[str, str, int]


def _unquote(raw: str) -> str:
    body = raw[1:-1]
    out = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            nxt = body[i + 1]
            out.append(_ESCAPES.get(nxt, nxt))
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def _tokenize(text: str) -> List[Token]:
    tokens: List[Token] = []
    pos = 0
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if not m:
            raise SchemaCompileError(f"Unexpected character {text[pos]!r} at offset {pos}")
        kind = m.lastgroup
        if kind != "ws":
            tokens.append((kind, m.group(), pos))
        pos = m.end()
    return tokens


@dataclass
class SchemaNode:
    """One node of a parsed schema description."""
    kind: str  # string | number | boolean | array | object | enum
    description: Optional[str] = None
    optional: bool = False
    nullable: bool = False
    default: Any = _MISSING
    items: Optional["SchemaNode"] = None
    fields: Dict[str, "SchemaNode"] = field(default_factory=dict)
    values: List[str] = field(default_factory=list)

    @property
    def has_default(self) -> bool:
        return self.default is not _MISSING

    @property
    def required(self) -> bool:
        return not self.optional and not self.has_default


class _Parser:
    """Recursive-descent parser over the token list."""

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0
        self.depth = 0

    def peek(self) -> Optional[Token]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def next(self) -> Token:
        tok = self.peek()
        if tok is None:
            raise SchemaCompileError("Unexpected end of schema")
        self.pos += 1
        return tok

    def accept(self, value: str) -> bool:
        tok = self.peek()
        if tok is not None and tok[1] == value and tok[0] in ("punct", "ident"):
            self.pos += 1
            return True
        return False

    def expect(self, value: str) -> Token:
        tok = self.next()
        if tok[1] != value:
            raise SchemaCompileError(f"Expected {value!r} at offset {tok[2]}, found {tok[1]!r}")
        return tok

    def ident(self) -> str:
        kind, value, offset = self.next()
        if kind != "ident":
            raise SchemaCompileError(f"Expected a name at offset {offset}, found {value!r}")
        return value

    def parse(self) -> SchemaNode:
        node = self.expr()
        tok = self.peek()
        if tok is not None:
            raise SchemaCompileError(f"Unexpected {tok[1]!r} at offset {tok[2]}")
        return node

    def expr(self) -> SchemaNode:
        self.depth += 1
        if self.depth > MAX_DEPTH:
            raise SchemaCompileError("Schema is nested too deeply")
        self.expect("z")
        self.expect(".")
        node = _construct(self.ident(), self.args())
        while self.accept("."):
            node = _modify(node, self.ident(), self.args())
        self.depth -= 1
        return node

    def args(self) -> List[Any]:
        self.expect("(")
        values: List[Any] = []
        while not self.accept(")"):
            values.append(self.value())
            if not self.accept(","):
                self.expect(")")
                break
        return values

    def value(self) -> Any:
        kind, value, offset = self.peek() or ("", "", -1)
        if kind == "ident" and value == "z":
            return self.expr()
        self.pos += 1
        if kind == "string":
            return _unquote(value)
        if kind == "number":
            return float(value) if any(c in value for c in ".eE") else int(value)
        if kind == "ident" and value in ("true", "false", "null"):
            return {"true": True, "false": False, "null": None}[value]
        if value == "[":
            items = []
            while not self.accept("]"):
                items.append(self.value())
                if not self.accept(","):
                    self.expect("]")
                    break
            return items
        if value == "{":
            entries: Dict[str, Any] = {}
            while not self.accept("}"):
                key_kind, key, key_offset = self.next()
                if key_kind == "string":
                    key = _unquote(key)
                elif key_kind != "ident":
                    raise SchemaCompileError(f"Expected a field name at offset {key_offset}")
                self.expect(":")
                entries[key] = self.value()
                if not self.accept(","):
                    self.expect("}")
                    break
            return entries
        if offset < 0:
            raise SchemaCompileError("Unexpected end of schema")
        raise SchemaCompileError(f"Unsupported value {value!r} at offset {offset}")


def _construct(name: str, args: List[Any]) -> SchemaNode:
    if name in ("string", "number", "boolean"):
        if args:
            raise SchemaCompileError(f"z.{name}() takes no arguments")
        return SchemaNode(kind=name)
    if name == "array":
        if len(args) != 1 or not isinstance(args[0], SchemaNode):
            raise SchemaCompileError("z.array() takes exactly one schema")
        return SchemaNode(kind="array", items=args[0])
    if name == "object":
        if len(args) != 1 or not isinstance(args[0], dict):
            raise SchemaCompileError("z.object() takes exactly one field map")
        for key, child in args[0].items():
            if not isinstance(child, SchemaNode):
                raise SchemaCompileError(f"Field {key!r} is not a schema")
        return SchemaNode(kind="object", fields=dict(args[0]))
    if name == "enum":
        if (len(args) != 1 or not isinstance(args[0], list) or not args[0]
                or not all(isinstance(v, str) for v in args[0])):
            raise SchemaCompileError("z.enum() takes a non-empty list of strings")
        return SchemaNode(kind="enum", values=list(args[0]))
    raise SchemaCompileError(f"Unsupported type z.{name}()")


def _modify(node: SchemaNode, name: str, args: List[Any]) -> SchemaNode:
    if name in ("optional", "nullable", "nullish"):
        if args:
            raise SchemaCompileError(f".{name}() takes no arguments")
        return replace(
            node,
            optional=node.optional or name in ("optional", "nullish"),
            nullable=node.nullable or name in ("nullable", "nullish"),
        )
    if name == "describe":
        if len(args) != 1 or not isinstance(args[0], str):
            raise SchemaCompileError(".describe() takes one string")
        return replace(node, description=args[0])
    if name == "default":
        if len(args) != 1 or _contains_schema(args[0]):
            raise SchemaCompileError(".default() takes one literal value")
        return replace(node, default=args[0])
    raise SchemaCompileError(f"Unsupported modifier .{name}()")


def _contains_schema(value: Any) -> bool:
    if isinstance(value, SchemaNode):
        return True
    if isinstance(value, list):
        return any(_contains_schema(v) for v in value)
    if isinstance(value, dict):
        return any(_contains_schema(v) for v in value.values())
    return False


def parse_schema(text: str) -> SchemaNode:
    """Parse schema text into a tree. Raises SchemaCompileError."""
    if len(text) > MAX_SCHEMA_CHARS:
        raise SchemaCompileError("Schema description is too long")
    return _Parser(_tokenize(text)).parse()


# ============================================================================
# Compilation
# ============================================================================

def to_json_schema(node: SchemaNode) -> Dict[str, Any]:
    """JSON schema for a node, inlined (no $refs)."""
    if node.kind == "string":
        schema: Dict[str, Any] = {"type": "string"}
    elif node.kind == "number":
        schema = {"type": "number"}
    elif node.kind == "boolean":
        schema = {"type": "boolean"}
    elif node.kind == "enum":
        schema = {"type": "string", "enum": list(node.values)}
    elif node.kind == "array":
        schema = {"type": "array", "items": to_json_schema(node.items)}
    else:
        schema = {
            "type": "object",
            "properties": {key: to_json_schema(child) for key, child in node.fields.items()},
            "required": [key for key, child in node.fields.items() if child.required],
            "additionalProperties": False,
        }

    if node.nullable:
        schema = {"anyOf": [schema, {"type": "null"}]}
    if node.description:
        schema["description"] = node.description
    if node.has_default:
        schema["default"] = node.default
    return schema


def _model_name(*parts: str) -> str:
    name = "_".join(re.sub(r"\W", "", p.title()) or "Field" for p in parts)
    return name or "ExtractedObject"


def _annotation(node: SchemaNode, name: str) -> Any:
    if node.kind == "string":
        ann: Any = str
    elif node.kind == "number":
        ann = Union[int, float]
    elif node.kind == "boolean":
        ann = bool
    elif node.kind == "enum":
        ann = Literal[tuple(node.values)]
    elif node.kind == "array":
        ann = List[_annotation(node.items, f"{name}_Item")]
    else:
        ann = _build_model(node, name)

    if node.optional or node.nullable:
        ann = Optional[ann]
    return ann


def _build_model(node: SchemaNode, name: str) -> Type[BaseModel]:
    # Attribute names are positional; the caller's key is the alias so
    # names like "schema" or "model_config" survive unchanged.
    fields: Dict[str, Any] = {}
    for i, (key, child) in enumerate(node.fields.items()):
        if child.has_default:
            default = child.default
        elif child.optional:
            default = None
        else:
            default = ...
        fields[f"field_{i}"] = (
            _annotation(child, _model_name(name, key)),
            Field(default, alias=key, description=child.description),
        )
    return create_model(
        name,
        __config__=ConfigDict(extra="ignore"),
        **fields,
    )


def _dump(value: Any, node: SchemaNode) -> Any:
    """Dump a validated value back to plain JSON using the original keys.

    Optional fields the model left out stay absent; defaults are filled in.
    """
    if node.kind == "object" and isinstance(value, BaseModel):
        out: Dict[str, Any] = {}
        for i, (key, child) in enumerate(node.fields.items()):
            attr = f"field_{i}"
            if attr in value.model_fields_set or child.has_default:
                out[key] = _dump(getattr(value, attr), child)
        return out
    if node.kind == "array" and isinstance(value, list):
        return [_dump(v, node.items) for v in value]
    return value


@dataclass
class ResolvedSchema:
    """A compiled schema, or the schemaless marker."""
    schemaless: bool = True
    node: Optional[SchemaNode] = None
    model: Optional[Type[BaseModel]] = None
    json_schema: Optional[Dict[str, Any]] = None

    @property
    def field_names(self) -> List[str]:
        return list(self.node.fields) if self.node else []

    def response_format(self) -> Dict[str, Any]:
        if self.schemaless:
            return {"type": "json_object"}
        return {
            "type": "json_schema",
            "json_schema": {"name": "response", "schema": self.json_schema, "strict": False},
        }

    def validate(self, data: Any) -> Any:
        """Validate against the schema; passthrough when schemaless.

        Raises pydantic.ValidationError on mismatch.
        """
        if self.schemaless:
            return data
        return _dump(self.model.model_validate(data), self.node)


SCHEMALESS = ResolvedSchema(schemaless=True)


def compile_schema(text: str) -> ResolvedSchema:
    """Compile schema text. Raises SchemaCompileError."""
    node = parse_schema(text)
    if node.kind != "object":
        raise SchemaCompileError("Top-level schema must be z.object(...)")
    return ResolvedSchema(
        schemaless=False,
        node=node,
        model=_build_model(node, "ExtractedObject"),
        json_schema=to_json_schema(node),
    )


def resolve_schema(text: Optional[str]) -> ResolvedSchema:
    """Resolve caller schema text, degrading to schemaless on any failure."""
    if not text or not text.strip():
        return SCHEMALESS
    try:
        return compile_schema(text)
    except SchemaCompileError as e:
        logger.warning(f"Schema did not compile, using schemaless extraction: {e}")
        return SCHEMALESS
