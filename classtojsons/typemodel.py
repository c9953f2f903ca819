"""
Type model consumed by the JSON schema compiler.

A type model is a graph of class-like entities whose fields point at each
other through ClassReference type references. The graph may be cyclic.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union


@dataclass(eq=False)
class ClassEntity:
    """A class, enum or interface declaration."""
    simple_name: str
    qualified_name: Optional[str] = None
    is_enum: bool = False
    is_interface: bool = False
    fields: List['FieldEntity'] = field(default_factory=list)
    enum_constants: List[str] = field(default_factory=list)

    @property
    def key(self) -> str:
        # the simple name fallback can collide across packages
        return self.qualified_name or self.simple_name


@dataclass
class ScalarType:
    """Primitive keyword or non-container library class, by qualified name."""
    name: str


@dataclass
class ArrayType:
    element: 'TypeRef'


@dataclass
class ParameterizedType:
    """Library container such as java.util.List<T> or java.util.Map<K, V>."""
    qualified_name: str
    type_args: List['TypeRef'] = field(default_factory=list)


@dataclass
class ClassReference:
    target: ClassEntity

    def __repr__(self) -> str:
        return f"ClassReference(target={self.target.key!r})"


TypeRef = Union[ScalarType, ArrayType, ParameterizedType, ClassReference]


@dataclass
class FieldEntity:
    name: str
    type: TypeRef
    doc_comment: Optional[str] = None
    is_static: bool = False


def _require(node: Any, key: str, expected: Union[type, Tuple[type, ...]], context: str) -> Any:
    """Return node[key], or raise ValueError if it is absent or has the wrong type."""
    if not isinstance(node, dict):
        raise ValueError(f"Type model {context} must be an object, got {node!r}")
    if key not in node:
        raise ValueError(f"Type model {context} without {key}: {node}")
    value = node[key]
    if not isinstance(value, expected):
        raise ValueError(f"Type model {context} has invalid {key}: {value!r}")
    return value


def _optional_list(node: Dict[str, Any], key: str, context: str) -> List[Any]:
    value = node.get(key, [])
    if not isinstance(value, list):
        raise ValueError(f"Type model {context} has invalid {key}: {value!r}")
    return value


def load_type_model(model: Dict[str, Any]) -> List[ClassEntity]:
    """
    Build class entities from a JSON type model document.

    The document has a "classes" list; each class names its fields and each
    field carries a type node of kind "scalar", "array", "parameterized" or
    "class". Class nodes refer to other classes by qualified (or simple) name.

    :param model: The parsed JSON type model.
    :return: The class entities in document order.
    :raises ValueError: When the document does not have this shape.
    """
    if not isinstance(model, dict) or not isinstance(model.get('classes'), list):
        raise ValueError("Type model must be an object with a 'classes' list")

    entities: List[ClassEntity] = []
    by_name: Dict[str, ClassEntity] = {}
    for class_def in model['classes']:
        entity = ClassEntity(
            simple_name=_require(class_def, 'simpleName', str, 'class'),
            qualified_name=class_def.get('qualifiedName'),
            is_enum=class_def.get('isEnum', False),
            is_interface=class_def.get('isInterface', False),
            enum_constants=list(_optional_list(class_def, 'enumConstants', 'class')))
        entities.append(entity)
        by_name[entity.key] = entity
        by_name.setdefault(entity.simple_name, entity)

    def build_type(type_def: Any) -> TypeRef:
        if isinstance(type_def, str):
            return ScalarType(type_def)
        if not isinstance(type_def, dict):
            raise ValueError(f"Type model contains unexpected type node {type_def!r}")
        kind = type_def.get('kind')
        if kind == 'scalar':
            return ScalarType(_require(type_def, 'name', str, 'scalar type'))
        elif kind == 'array':
            return ArrayType(build_type(_require(type_def, 'element', (str, dict), 'array type')))
        elif kind == 'parameterized':
            qualified_name = _require(type_def, 'qualifiedName', str, 'parameterized type')
            return ParameterizedType(qualified_name, [build_type(t) for t in _optional_list(type_def, 'typeArgs', 'parameterized type')])
        elif kind == 'class':
            ref = _require(type_def, 'ref', str, 'class type')
            if ref not in by_name:
                raise ValueError(f"Type model references unknown class {ref}")
            return ClassReference(by_name[ref])
        raise ValueError(f"Type model contains unknown type kind {kind}")

    for entity, class_def in zip(entities, model['classes']):
        for field_def in _optional_list(class_def, 'fields', 'class'):
            entity.fields.append(FieldEntity(
                name=_require(field_def, 'name', str, 'field'),
                type=build_type(_require(field_def, 'type', (str, dict), 'field')),
                doc_comment=field_def.get('docComment'),
                is_static=field_def.get('static', False)))
    return entities


def load_type_model_from_file(model_file: str, encoding: str = "utf-8") -> List[ClassEntity]:
    with open(model_file, 'r', encoding=encoding) as f:
        return load_type_model(json.load(f))
