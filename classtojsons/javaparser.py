"""
Parser for the declaration structure of Java source files.

Only what a JSON schema needs is kept: package, imports, class, interface and
enum declarations, their fields with declared types and doc comments, and
enum constants. Method, constructor and initializer bodies are consumed as
balanced token groups and dropped. Record declarations are parsed and
dropped as well.
"""

import typing
import json

from lark import Lark, Transformer, Token, v_args

BNF = r'''
start: package_decl? import_decl* _type_decl*

package_decl: _modifiers PACKAGE qualified_name ";"
import_decl: IMPORT STATIC? qualified_name wildcard? ";"
wildcard: "." "*"

_type_decl: class_decl | interface_decl | enum_decl | record_decl | ";"

class_decl: _modifiers CLASS IDENT type_params? class_header* class_body
interface_decl: _modifiers "@"? INTERFACE IDENT type_params? class_header* class_body
enum_decl: _modifiers ENUM IDENT class_header* enum_body
record_decl: _modifiers IDENT IDENT type_params? paren_group class_header* class_body
class_header: (EXTENDS | IMPLEMENTS | IDENT) type ("," type)*

class_body: "{" _member* "}"
_member: field_decl | method_decl | initializer | compact_constructor
       | class_decl | interface_decl | enum_decl | record_decl | ";"

enum_body: "{" enum_constants? enum_members? "}"
enum_constants: enum_constant ("," enum_constant)* ","?
enum_constant: annotation* IDENT paren_group? class_body?
enum_members: ";" _member*

field_decl: _modifiers type declarator ("," declarator)* ";"
declarator.2: IDENT dims? ("=" initializer_expr)?
initializer_expr: _expr_item+

method_decl: _modifiers type_params? type? IDENT paren_group _token* (block | ";")
initializer: STATIC? block
compact_constructor: _modifiers IDENT block

_modifiers: (annotation | MODIFIER | STATIC)*
annotation: "@" qualified_name paren_group?

type: class_type dims?
class_type: type_segment ("." type_segment)*
type_segment: annotation* IDENT type_args?
type_args: "<" (_type_arg ("," _type_arg)*)? ">"
_type_arg: type | wildcard_type
wildcard_type: "?" ((EXTENDS | SUPER) type)?
type_params: "<" type_param ("," type_param)* ">"
type_param: annotation* IDENT (EXTENDS type ("&" type)*)?
dims: dim+
dim: annotation* "[" "]"

qualified_name: IDENT ("." IDENT)*

paren_group: "(" (_expr_item | ";")* ")"
block: "{" (_expr_item | ";")* "}"
_expr_item: block | paren_group | _token
_token: IDENT | NUMBER | STRING | TEXT_BLOCK | CHAR_LIT | OP
      | MODIFIER | STATIC | PACKAGE | IMPORT | CLASS | INTERFACE | ENUM | EXTENDS | IMPLEMENTS | SUPER
      | "," | "." | "<" | ">" | "[" | "]" | "=" | "?" | "@" | "&" | "*"

PACKAGE.2: /package\b/
IMPORT.2: /import\b/
CLASS.2: /class\b/
INTERFACE.2: /interface\b/
ENUM.2: /enum\b/
EXTENDS.2: /extends\b/
IMPLEMENTS.2: /implements\b/
SUPER.2: /super\b/
STATIC.2: /static\b/
MODIFIER.2: /(?:public|protected|private|final|transient|volatile|abstract|synchronized|native|strictfp|default|sealed|non-sealed)\b/

IDENT: /(?:[^\W\d]|\$)[\w$]*/
NUMBER: /\d[\w.]*/
TEXT_BLOCK.3: /"""[\s\S]*?"""/
STRING: /"(?:[^"\\\n]|\\.)*"/
CHAR_LIT: /'(?:[^'\\\n]|\\.)*'/
OP: /[^\s\w$(){}\[\]<>;,.=?@&*"']/

DOC_COMMENT: /\/\*\*(?!\/)[\s\S]*?\*\//
BLOCK_COMMENT: /\/\*(?!\*[^\/])[\s\S]*?\*\//
LINE_COMMENT: /\/\/[^\n]*/

%import common.WS
%ignore WS
%ignore DOC_COMMENT
%ignore BLOCK_COMMENT
%ignore LINE_COMMENT
'''

TypeName = typing.NamedTuple('TypeName', [('name', str), ('args', typing.List['TypeName']), ('dims', int)])
Declarator = typing.NamedTuple('Declarator', [('name', str), ('dims', int)])
Field = typing.NamedTuple('Field', [('name', str), ('type', 'TypeName'), ('doc_comment', typing.Optional[str]), ('modifiers', typing.List[str])])
Body = typing.NamedTuple('Body', [('fields', typing.List['Field']), ('types', typing.List['TypeDecl']), ('enum_constants', typing.List[str])])
TypeDecl = typing.NamedTuple('TypeDecl', [('kind', str), ('name', str), ('type_params', typing.List[str]), ('modifiers', typing.List[str]),
                                          ('fields', typing.List['Field']), ('enum_constants', typing.List[str]), ('types', typing.List['TypeDecl'])])
Import = typing.NamedTuple('Import', [('name', str), ('is_static', bool), ('is_wildcard', bool)])
PackageDecl = typing.NamedTuple('PackageDecl', [('name', str)])
JavaFile = typing.NamedTuple('JavaFile', [('package', str), ('imports', typing.List['Import']), ('types', typing.List['TypeDecl'])])

MODIFIER_TOKENS = ('MODIFIER', 'STATIC')


def _tokens(children, *types):
    return [c for c in children if isinstance(c, Token) and c.type in types]


class JavaTransformer(Transformer):
    '''Converts the syntax tree into namedtuple declarations'''

    def __init__(self, data: str, doc_comments: typing.List[Token]):
        super().__init__()
        self.data = data
        self.doc_comments = doc_comments

    def doc_comment_before(self, start_pos: int) -> typing.Optional[str]:
        '''Returns the doc comment that directly precedes the given position'''
        candidate = None
        for comment in self.doc_comments:
            if comment.end_pos > start_pos:
                break
            candidate = comment
        if candidate is not None and not self.data[candidate.end_pos:start_pos].strip():
            return candidate.value
        return None

    def qualified_name(self, tokens):
        return '.'.join(t.value for t in tokens)

    def wildcard(self, tokens):
        return True

    def package_decl(self, children):
        return PackageDecl(next(c for c in children if isinstance(c, str) and not isinstance(c, Token)))

    def import_decl(self, children):
        name = next(c for c in children if isinstance(c, str) and not isinstance(c, Token))
        return Import(name, bool(_tokens(children, 'STATIC')), True in children)

    def annotation(self, children):
        return None

    def paren_group(self, children):
        return None

    def block(self, children):
        return None

    def initializer_expr(self, children):
        return None

    def method_decl(self, children):
        return None

    def initializer(self, children):
        return None

    def compact_constructor(self, children):
        return None

    def record_decl(self, children):
        # records are skipped, references to them resolve like library classes
        return None

    def class_header(self, children):
        return None

    def dim(self, children):
        return 1

    def dims(self, children):
        return sum(children)

    def type_args(self, children):
        return list(children)

    def wildcard_type(self, children):
        # only an upper bound narrows what the container holds
        if _tokens(children, 'EXTENDS'):
            return children[-1]
        return TypeName('Object', [], 0)

    def type_segment(self, children):
        name = _tokens(children, 'IDENT')[0].value
        args = next((c for c in children if isinstance(c, list)), [])
        return name, args

    def class_type(self, segments):
        return TypeName('.'.join(name for name, _ in segments), segments[-1][1], 0)

    def type(self, children):
        class_type = children[0]
        dims = children[1] if len(children) > 1 else 0
        return class_type._replace(dims=dims)

    def type_param(self, children):
        return _tokens(children, 'IDENT')[0].value

    def type_params(self, children):
        return list(children)

    def declarator(self, children):
        dims = next((c for c in children if isinstance(c, int) and not isinstance(c, bool)), 0)
        return Declarator(_tokens(children, 'IDENT')[0].value, dims)

    @v_args(meta=True)
    def field_decl(self, meta, children):
        '''Returns one Field namedtuple per declarator'''
        modifiers = [t.value for t in _tokens(children, *MODIFIER_TOKENS)]
        field_type = next(c for c in children if isinstance(c, TypeName))
        doc_comment = self.doc_comment_before(meta.start_pos)
        fields = []
        for declarator in (c for c in children if isinstance(c, Declarator)):
            fields.append(Field(declarator.name, field_type._replace(dims=field_type.dims + declarator.dims), doc_comment, modifiers))
        return fields

    def class_body(self, children):
        '''Returns a Body namedtuple with the fields and nested types'''
        fields = []
        types = []
        for child in children:
            if isinstance(child, list):
                fields.extend(child)
            elif isinstance(child, TypeDecl):
                types.append(child)
        return Body(fields, types, [])

    def enum_constant(self, children):
        return _tokens(children, 'IDENT')[0].value

    def enum_constants(self, children):
        return [c for c in children if isinstance(c, str)]

    def enum_members(self, children):
        return self.class_body(children)

    def enum_body(self, children):
        constants = next((c for c in children if isinstance(c, list)), [])
        members = next((c for c in children if isinstance(c, Body)), Body([], [], []))
        return members._replace(enum_constants=constants)

    def _declaration(self, kind, children):
        name = _tokens(children, 'IDENT')[0].value
        modifiers = [t.value for t in _tokens(children, *MODIFIER_TOKENS)]
        type_params = next((c for c in children if isinstance(c, list)), [])
        body = next(c for c in children if isinstance(c, Body))
        return TypeDecl(kind, name, type_params, modifiers, body.fields, body.enum_constants, body.types)

    def class_decl(self, children):
        return self._declaration('class', children)

    def interface_decl(self, children):
        return self._declaration('interface', children)

    def enum_decl(self, children):
        return self._declaration('enum', children)

    def start(self, children):
        package = next((c.name for c in children if isinstance(c, PackageDecl)), '')
        imports = [c for c in children if isinstance(c, Import)]
        types = [c for c in children if isinstance(c, TypeDecl)]
        return JavaFile(package, imports, types)


def parse(data: str) -> JavaFile:
    doc_comments: typing.List[Token] = []
    parser = Lark(BNF, start='start', parser='earley', lexer='basic', propagate_positions=True,
                  lexer_callbacks={'DOC_COMMENT': doc_comments.append})
    tree = parser.parse(data)
    return JavaTransformer(data, doc_comments).transform(tree)


def parse_from_file(file: str, encoding: str = "utf-8") -> typing.Optional[JavaFile]:
    with open(file, 'r', encoding=encoding) as f:
        data = f.read()
    if data:
        return parse(data)
    return None


def _recursive_to_dict(obj):
    if isinstance(obj, tuple) and hasattr(obj, '_asdict'):
        return {k: _recursive_to_dict(v) for k, v in obj._asdict().items()}
    if isinstance(obj, list):
        return [_recursive_to_dict(x) for x in obj]
    return obj


def serialize2json(data: str) -> str:
    return json.dumps(_recursive_to_dict(parse(data)), indent=4)
