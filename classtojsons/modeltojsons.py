"""
Module to convert a class type model to JSON schema documents.
"""

import json
import os
import re
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

from classtojsons.typemodel import (ArrayType, ClassEntity, ClassReference, FieldEntity, ParameterizedType,
                                    ScalarType, TypeRef, load_type_model_from_file)

JsonSchema = Dict[str, Any]

DEFINITIONS_PREFIX = "#/definitions/"

# the closing delimiter keeps at least one '*' so "/***/" has an empty body
COMMENT_DELIMITERS = re.compile(r'^\s*/\*+(.*?)\*+/\s*$', re.DOTALL)

PRIMITIVE_TYPES = {'byte', 'short', 'int', 'long', 'float', 'double', 'boolean', 'char', 'void'}

LIST_TYPES = {'java.util.List', 'java.util.ArrayList', 'java.util.LinkedList', 'java.util.Collection'}
SET_TYPES = {'java.util.Set', 'java.util.HashSet', 'java.util.LinkedHashSet', 'java.util.TreeSet', 'java.util.SortedSet'}
MAP_TYPES = {'java.util.Map', 'java.util.HashMap', 'java.util.LinkedHashMap', 'java.util.TreeMap',
             'java.util.SortedMap', 'java.util.concurrent.ConcurrentHashMap'}
TIME_TYPES = {'java.util.Date', 'java.util.Calendar'}

SCALAR_KINDS = {
    'int': 'integer',
    'java.lang.Integer': 'integer',
    'long': 'integer',
    'java.lang.Long': 'integer',
    'boolean': 'boolean',
    'java.lang.Boolean': 'boolean',
    'double': 'number',
    'java.lang.Double': 'number',
    'java.math.BigDecimal': 'number',
    'java.math.BigInteger': 'number',
    'java.lang.String': 'string',
}


def type_name(type_ref: TypeRef) -> Optional[str]:
    """Return the (qualified) source name of a type reference, if it has one."""
    if isinstance(type_ref, ScalarType):
        return type_ref.name
    if isinstance(type_ref, ParameterizedType):
        return type_ref.qualified_name
    if isinstance(type_ref, ClassReference):
        return type_ref.target.qualified_name
    return None


def is_standard_class(entity: ClassEntity) -> bool:
    """Classes from the java.* packages are never expanded into object schemas."""
    return entity.qualified_name is not None and entity.qualified_name.startswith('java.')


def is_model_class(type_ref: TypeRef) -> bool:
    return isinstance(type_ref, ClassReference) and not is_standard_class(type_ref.target)


def is_class_like(type_ref: TypeRef) -> bool:
    if isinstance(type_ref, ArrayType):
        return False
    if isinstance(type_ref, ScalarType):
        return type_ref.name not in PRIMITIVE_TYPES
    return True


def is_list_type(type_ref: TypeRef) -> bool:
    return type_name(type_ref) in LIST_TYPES


def is_map_type(type_ref: TypeRef) -> bool:
    return type_name(type_ref) in MAP_TYPES


def resolve_scalar_kind(type_ref: TypeRef) -> str:
    """
    Map a type reference to a JSON schema leaf type.

    The mapping is total: anything that is not recognized is an "object".
    """
    if isinstance(type_ref, ArrayType):
        return 'array'
    name = type_name(type_ref)
    if name is None:
        return 'object'
    if name in SCALAR_KINDS:
        return SCALAR_KINDS[name]
    if name in LIST_TYPES or name in SET_TYPES:
        return 'array'
    if name in MAP_TYPES:
        return 'object'
    if name in TIME_TYPES or name.startswith('java.time.'):
        return 'string'
    return 'object'


def clean_doc_comment(comment: str) -> str:
    """
    Strip the comment delimiters and the leading '*' of continuation lines.

    >>> clean_doc_comment("/** Name of the user\\n * more detail */")
    'Name of the user more detail'
    """
    match = COMMENT_DELIMITERS.match(comment)
    if match:
        comment = match.group(1)
    else:
        comment = re.sub(r'^\s*/\*+|\*+/\s*$', '', comment)
    comment = re.sub(r'\s*\*', '', comment.strip())
    return comment.strip()


def definition_ref(key: str) -> JsonSchema:
    return {"$ref": DEFINITIONS_PREFIX + key}


class _Frame:
    """Fields of a class body that still have to be converted."""

    def __init__(self, fields: List[FieldEntity], properties: JsonSchema):
        self.fields: Iterator[FieldEntity] = iter(fields)
        self.properties = properties


class ClassToJsonSchemaConverter:
    """
    Converts class entities of a type model into JSON schema documents.

    Every class is expanded at most once per top level conversion. Repeated
    encounters, including the ones that close a reference cycle, become
    "$ref" pointers into "#/definitions/". The definitions section itself is
    not emitted.

    The traversal keeps an explicit stack of partially converted class bodies
    so that deep class chains do not depend on the interpreter recursion limit.
    The visited set is owned by each top level call; the converter itself
    keeps no state between calls.
    """

    def convert_class(self, entity: ClassEntity, visited: Optional[Set[str]] = None) -> JsonSchema:
        """
        Convert a class or enum entity to a JSON schema document.

        :param entity: The entry class entity.
        :param visited: Keys of the classes already expanded in this traversal. A fresh set
                        is used when omitted.
        :return: The schema document.
        """
        if visited is None:
            visited = set()
        schema, frame = self._open_class(entity, visited)
        self._drain(frame, visited)
        return schema

    def convert_field(self, field: FieldEntity, visited: Set[str]) -> JsonSchema:
        """
        Convert a single field to its property schema.
        """
        schema, frame = self._field_schema(field, visited)
        self._drain(frame, visited)
        return schema

    def resolve_type_schema(self, type_ref: TypeRef, visited: Set[str]) -> JsonSchema:
        """
        Convert an array element or container argument type to a schema.
        """
        schema, frame = self._type_schema(type_ref, visited)
        self._drain(frame, visited)
        return schema

    def _drain(self, frame: Optional[_Frame], visited: Set[str]) -> None:
        if frame is None:
            return
        stack = [frame]
        while stack:
            top = stack[-1]
            field = next(top.fields, None)
            if field is None:
                stack.pop()
                continue
            prop, nested = self._field_schema(field, visited)
            top.properties[field.name] = prop
            if nested is not None:
                stack.append(nested)

    def _open_class(self, entity: ClassEntity, visited: Set[str]) -> Tuple[JsonSchema, Optional[_Frame]]:
        """
        Start the schema of a class. Returns the schema and, for object
        schemas, the frame holding the fields still to be converted.
        """
        key = entity.key
        if key in visited:
            return definition_ref(key), None
        visited.add(key)

        if entity.is_enum:
            return {
                "type": "string",
                "title": entity.simple_name,
                "enum": list(entity.enum_constants)
            }, None

        properties: JsonSchema = {}
        schema = {
            "type": "object",
            "title": entity.simple_name,
            "properties": properties
        }
        return schema, _Frame(entity.fields, properties)

    def _type_schema(self, type_ref: TypeRef, visited: Set[str]) -> Tuple[JsonSchema, Optional[_Frame]]:
        if is_model_class(type_ref):
            return self._open_class(type_ref.target, visited)  # type: ignore[union-attr]
        return {"type": resolve_scalar_kind(type_ref)}, None

    def _field_schema(self, field: FieldEntity, visited: Set[str]) -> Tuple[JsonSchema, Optional[_Frame]]:
        field_type = field.type
        frame = None
        if isinstance(field_type, ArrayType):
            items, frame = self._type_schema(field_type.element, visited)
            schema = {"type": "array", "items": items}
        elif is_model_class(field_type):
            schema, frame = self._open_class(field_type.target, visited)  # type: ignore[union-attr]
        elif is_list_type(field_type) and isinstance(field_type, ParameterizedType) and len(field_type.type_args) == 1:
            items, frame = self._type_schema(field_type.type_args[0], visited)
            schema = {"type": "array", "items": items}
        elif is_map_type(field_type) and isinstance(field_type, ParameterizedType) and len(field_type.type_args) == 2 \
                and all(is_class_like(t) for t in field_type.type_args):
            value_type = field_type.type_args[1]
            if is_model_class(value_type):
                additional_properties = definition_ref(value_type.target.key)  # type: ignore[union-attr]
            else:
                additional_properties = {"type": resolve_scalar_kind(value_type)}
            schema = {"type": "object", "additionalProperties": additional_properties}
        else:
            schema = {"type": resolve_scalar_kind(field_type)}

        if field.doc_comment is not None:
            schema["description"] = clean_doc_comment(field.doc_comment)
        return schema, frame


def has_schema(schema: JsonSchema) -> bool:
    """An object schema without any property means no schema is defined for the class."""
    return 'enum' in schema or '$ref' in schema or bool(schema.get('properties'))


def select_entry_classes(entities: List[ClassEntity], class_name: Optional[str] = None) -> List[ClassEntity]:
    """
    Pick the entities that get their own schema document. Interfaces are skipped.
    """
    entries = [entity for entity in entities if not entity.is_interface]
    if class_name:
        entries = [entity for entity in entries if class_name in (entity.simple_name, entity.qualified_name)]
        if not entries:
            raise ValueError(f"Class {class_name} not found")
    return entries


def write_json_schemas(entities: List[ClassEntity], output_dir: Optional[str] = None,
                       class_name: Optional[str] = None) -> List[Tuple[ClassEntity, JsonSchema]]:
    """
    Convert each entry entity with its own visited set and write one schema
    file per class into output_dir, or print the schemas when no directory is given.

    :param entities: The class entities of the type model.
    :param output_dir: The directory for the <SimpleName>.json files.
    :param class_name: Only convert the class with this simple or qualified name.
    :return: The converted (entity, schema) pairs in request order.
    """
    converter = ClassToJsonSchemaConverter()
    results = []
    file_names: Set[str] = set()
    if output_dir and not os.path.exists(output_dir):
        os.makedirs(output_dir, exist_ok=True)

    for entity in select_entry_classes(entities, class_name):
        schema = converter.convert_class(entity)
        results.append((entity, schema))
        if not has_schema(schema):
            print(f"No schema defined for class: {entity.simple_name}")
            continue
        if not output_dir:
            print(json.dumps(schema, indent=4))
            continue
        file_name = entity.simple_name if entity.simple_name not in file_names else entity.key
        file_names.add(file_name)
        schema_file = os.path.join(output_dir, file_name + ".json")
        with open(schema_file, 'w', encoding='utf-8') as file:
            json.dump(schema, file, indent=4)
        print(f"Schema saved to: {schema_file}")
    return results


def convert_type_model_to_json_schema(model_file: str, output_dir: Optional[str] = None,
                                      class_name: Optional[str] = None) -> List[Tuple[ClassEntity, JsonSchema]]:
    """
    Convert a JSON type model file to JSON schema files.

    :param model_file: The path to the input type model file.
    :param output_dir: The directory for the output schema files; stdout when omitted.
    :param class_name: Only convert the class with this simple or qualified name.
    """
    entities = load_type_model_from_file(model_file)
    return write_json_schemas(entities, output_dir, class_name)
