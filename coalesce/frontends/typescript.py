"""TypeScript front end: the JavaScript table plus type-level declarations."""

from __future__ import annotations

from coalesce.frontends.base import NodeMapping
from coalesce.frontends.javascript import JAVASCRIPT_NODE_MAP, JavaScriptFrontend
from coalesce.frontends.naming import declared_name
from coalesce.uir.models import Language, NodeType

TYPESCRIPT_NODE_MAP: dict[str, NodeMapping] = {
    **JAVASCRIPT_NODE_MAP,
    "interface_declaration": NodeMapping(NodeType.interface(), declared_name),
    "abstract_class_declaration": NodeMapping(NodeType.klass(), declared_name),
    "type_alias_declaration": NodeMapping(NodeType.constant(), declared_name),
    "enum_declaration": NodeMapping(NodeType.klass(), declared_name),
    "function_signature": NodeMapping(NodeType.function(), declared_name),
    "method_signature": NodeMapping(NodeType.function(), declared_name),
    "abstract_method_signature": NodeMapping(NodeType.function(), declared_name),
    "property_signature": NodeMapping(NodeType.variable(), declared_name),
    "public_field_definition": NodeMapping(NodeType.variable(), declared_name),
    "internal_module": NodeMapping(NodeType.module(), declared_name),
}


class TypeScriptFrontend(JavaScriptFrontend):
    grammar = "typescript"
    language = Language.TYPESCRIPT
    root_name = "typescript_program"
    node_map = TYPESCRIPT_NODE_MAP
