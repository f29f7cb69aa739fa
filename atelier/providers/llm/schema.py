"""Strict generation contracts.

strictify_schema() rewrites a JSON schema so that every object node
requires exactly its declared properties and rejects unknown ones. Local
$ref pointers are inlined first because strict providers resolve them
poorly.
"""

import copy
from typing import Any

_SUBSCHEMA_LIST_KEYS = ("anyOf", "oneOf", "allOf", "prefixItems")
_SUBSCHEMA_KEYS = ("items", "not", "additionalItems", "contains")


def strictify_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """Return a strict copy of a JSON schema.

    The input is not modified. Applying the function to its own output
    returns an equal schema.

    Raises:
        ValueError: If the schema contains an unresolvable or recursive $ref
    """
    root = copy.deepcopy(schema)
    definitions = {**root.pop("definitions", {}), **root.pop("$defs", {})}
    return _strictify(root, definitions, ())


def _strictify(
    node: Any,
    definitions: dict[str, Any],
    ref_stack: tuple[str, ...],
) -> Any:
    if isinstance(node, list):
        return [_strictify(item, definitions, ref_stack) for item in node]
    if not isinstance(node, dict):
        return node

    if "$ref" in node:
        ref = node["$ref"]
        if ref in ref_stack:
            raise ValueError(f"Recursive schema reference: {ref}")
        target = _resolve_ref(ref, definitions)
        siblings = {k: v for k, v in node.items() if k != "$ref"}
        merged = {**copy.deepcopy(target), **siblings}
        return _strictify(merged, definitions, (*ref_stack, ref))

    result = dict(node)
    if "default" in result and result["default"] is None:
        # Strict contracts make every field required, so a null default is noise
        del result["default"]

    properties = result.get("properties")
    if isinstance(properties, dict):
        result["properties"] = {
            name: _strictify(sub, definitions, ref_stack)
            for name, sub in properties.items()
        }
    if _is_object(result):
        result["required"] = list(result.get("properties", {}).keys())
        result["additionalProperties"] = False
        result.setdefault("properties", {})

    for key in _SUBSCHEMA_KEYS:
        if isinstance(result.get(key), dict):
            result[key] = _strictify(result[key], definitions, ref_stack)
    for key in _SUBSCHEMA_LIST_KEYS:
        if isinstance(result.get(key), list):
            result[key] = _strictify(result[key], definitions, ref_stack)

    return result


def _is_object(node: dict[str, Any]) -> bool:
    node_type = node.get("type")
    if node_type == "object":
        return True
    if isinstance(node_type, list) and "object" in node_type:
        return True
    return "properties" in node and node_type is None


def _resolve_ref(ref: str, definitions: dict[str, Any]) -> dict[str, Any]:
    for prefix in ("#/$defs/", "#/definitions/"):
        if ref.startswith(prefix):
            name = ref[len(prefix):]
            if name in definitions:
                return definitions[name]
    raise ValueError(f"Unresolvable schema reference: {ref}")


def iter_object_nodes(schema: Any):
    """Yield every object node of a schema, depth first."""
    if isinstance(schema, list):
        for item in schema:
            yield from iter_object_nodes(item)
        return
    if not isinstance(schema, dict):
        return
    if _is_object(schema):
        yield schema
    for value in schema.values():
        if isinstance(value, dict | list):
            yield from iter_object_nodes(value)
