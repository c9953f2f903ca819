"""
Module to convert Java class declarations to JSON schema documents.
"""

from typing import Dict, List, Optional, Set, Tuple

from classtojsons import javaparser
from classtojsons.modeltojsons import (LIST_TYPES, MAP_TYPES, PRIMITIVE_TYPES, SCALAR_KINDS, SET_TYPES, TIME_TYPES,
                                       JsonSchema, write_json_schemas)
from classtojsons.typemodel import ArrayType, ClassEntity, ClassReference, FieldEntity, ParameterizedType, ScalarType, TypeRef

JAVA_LANG_TYPES = {'String', 'Integer', 'Long', 'Boolean', 'Double', 'Float', 'Short', 'Byte', 'Character',
                   'Number', 'Object', 'CharSequence', 'Enum', 'Void'}

JAVA_TIME_TYPES = {'Instant', 'LocalDate', 'LocalDateTime', 'LocalTime', 'OffsetDateTime', 'OffsetTime',
                   'ZonedDateTime', 'Duration', 'Period', 'Year', 'YearMonth', 'MonthDay', 'ZoneId', 'ZoneOffset'}

CONTAINER_TYPES = LIST_TYPES | SET_TYPES | MAP_TYPES

# library classes a wildcard import can bring into scope
KNOWN_LIBRARY_TYPES = (set(SCALAR_KINDS) - PRIMITIVE_TYPES) | CONTAINER_TYPES | TIME_TYPES | \
    {'java.time.' + name for name in JAVA_TIME_TYPES} | {'java.util.UUID', 'java.util.Optional', 'java.util.Locale'}


class _Scope:
    """Name resolution context of one type declaration."""

    def __init__(self, java_file: javaparser.JavaFile, chain: List[javaparser.TypeDecl]):
        self.java_file = java_file
        self.chain = chain
        self.type_params: Set[str] = set()
        for decl in chain:
            self.type_params.update(decl.type_params)

    def nested(self, decl: javaparser.TypeDecl) -> '_Scope':
        return _Scope(self.java_file, self.chain + [decl])


class JavaTypeModelBuilder:
    """
    Builds the class type model from parsed Java files.

    All files are registered before any field type is resolved, so fields can
    refer to classes declared later or in another input file.
    """

    def __init__(self, include_static: bool = True):
        self.include_static = include_static
        self.files: List[javaparser.JavaFile] = []
        self.entry_classes: List[ClassEntity] = []
        self.classes_by_name: Dict[str, ClassEntity] = {}
        self.declarations: List[Tuple[javaparser.TypeDecl, ClassEntity, _Scope]] = []
        self.entities_by_decl: Dict[int, ClassEntity] = {}

    def add_file(self, java_file: javaparser.JavaFile) -> None:
        self.files.append(java_file)
        scope = _Scope(java_file, [])
        for decl in java_file.types:
            entity = self.register(decl, java_file.package, scope)
            self.entry_classes.append(entity)

    def register(self, decl: javaparser.TypeDecl, parent_name: str, parent_scope: _Scope) -> ClassEntity:
        """Create the entity of a declaration and of its nested declarations."""
        qualified_name = f"{parent_name}.{decl.name}" if parent_name else decl.name
        entity = ClassEntity(
            simple_name=decl.name,
            qualified_name=qualified_name,
            is_enum=decl.kind == 'enum',
            is_interface=decl.kind == 'interface',
            enum_constants=list(decl.enum_constants))
        scope = parent_scope.nested(decl)
        self.classes_by_name[qualified_name] = entity
        self.entities_by_decl[id(decl)] = entity
        self.declarations.append((decl, entity, scope))
        for nested in decl.types:
            self.register(nested, qualified_name, scope)
        return entity

    def build(self) -> List[ClassEntity]:
        """
        Resolve the fields of every registered declaration.

        :return: The top level declarations of all files in input order.
        """
        for decl, entity, scope in self.declarations:
            for field in decl.fields:
                is_static = 'static' in field.modifiers or entity.is_interface
                if is_static and not self.include_static:
                    continue
                entity.fields.append(FieldEntity(
                    name=field.name,
                    type=self.resolve_type(field.type, scope),
                    doc_comment=field.doc_comment,
                    is_static=is_static))
        return list(self.entry_classes)

    def resolve_type(self, type_name: javaparser.TypeName, scope: _Scope) -> TypeRef:
        type_ref = self.resolve_element_type(type_name, scope)
        for _ in range(type_name.dims):
            type_ref = ArrayType(type_ref)
        return type_ref

    def resolve_element_type(self, type_name: javaparser.TypeName, scope: _Scope) -> TypeRef:
        name = type_name.name
        if name in PRIMITIVE_TYPES:
            return ScalarType(name)
        if name in scope.type_params:
            # type variables stay unresolved
            return ScalarType(name)
        entity = self.find_class(name, scope)
        if entity is not None:
            return ClassReference(entity)
        qualified_name = self.qualify(name, scope)
        if qualified_name in CONTAINER_TYPES:
            return ParameterizedType(qualified_name, [self.resolve_type(arg, scope) for arg in type_name.args])
        return ScalarType(qualified_name)

    def find_nested(self, entity: ClassEntity, names: List[str]) -> Optional[ClassEntity]:
        for name in names:
            found = self.classes_by_name.get(f"{entity.qualified_name}.{name}")
            if found is None:
                return None
            entity = found
        return entity

    def find_class(self, name: str, scope: _Scope) -> Optional[ClassEntity]:
        """
        Find a class of the model by the name used in a field declaration.

        Lookup order: nested and enclosing declarations, declarations of the same
        file, single type imports, the same package, wildcard imports, and finally
        the name as a qualified name.
        """
        if '.' in name:
            first, *rest = name.split('.')
            outer = self.find_class(first, scope)
            if outer is not None:
                return self.find_nested(outer, rest)
            return self.classes_by_name.get(name)

        for decl in reversed(scope.chain):
            if decl.name == name:
                return self.entities_by_decl[id(decl)]
            for nested in decl.types:
                if nested.name == name:
                    return self.entities_by_decl[id(nested)]
        java_file = scope.java_file
        for decl in java_file.types:
            if decl.name == name:
                return self.entities_by_decl[id(decl)]
        for imp in java_file.imports:
            if not imp.is_wildcard and imp.name.rsplit('.', 1)[-1] == name:
                return self.classes_by_name.get(imp.name)
        package_name = f"{java_file.package}.{name}" if java_file.package else name
        if package_name in self.classes_by_name:
            return self.classes_by_name[package_name]
        for imp in java_file.imports:
            if imp.is_wildcard and f"{imp.name}.{name}" in self.classes_by_name:
                return self.classes_by_name[f"{imp.name}.{name}"]
        return None

    def qualify(self, name: str, scope: _Scope) -> str:
        """Qualify the name of a library class."""
        if '.' in name:
            first, rest = name.split('.', 1)
            qualified_first = self.qualify(first, scope)
            return f"{qualified_first}.{rest}" if qualified_first != first else name
        imports = scope.java_file.imports
        for imp in imports:
            if not imp.is_wildcard and imp.name.rsplit('.', 1)[-1] == name:
                return imp.name
        if name in JAVA_LANG_TYPES:
            return 'java.lang.' + name
        for imp in imports:
            if imp.is_wildcard and f"{imp.name}.{name}" in KNOWN_LIBRARY_TYPES:
                return f"{imp.name}.{name}"
        return name


def build_type_model(java_files: List[javaparser.JavaFile], include_static: bool = True) -> List[ClassEntity]:
    builder = JavaTypeModelBuilder(include_static)
    for java_file in java_files:
        builder.add_file(java_file)
    return builder.build()


def convert_java_to_json_schema(java_files: List[str] | str, output_dir: Optional[str] = None, class_name: Optional[str] = None,
                                skip_static: bool = False) -> List[Tuple[ClassEntity, JsonSchema]]:
    """
    Convert the classes declared in Java source files to JSON schema files.

    :param java_files: The path(s) to the input Java source files.
    :param output_dir: The directory for the <SimpleName>.json files; stdout when omitted.
    :param class_name: Only convert the class with this simple or qualified name.
    :param skip_static: Leave static fields out of the schemas.
    """
    if isinstance(java_files, str):
        java_files = [java_files]
    parsed = []
    for java_file in java_files:
        result = javaparser.parse_from_file(java_file)
        if result is not None:
            parsed.append(result)
    entities = build_type_model(parsed, include_static=not skip_static)
    return write_json_schemas(entities, output_dir, class_name)
