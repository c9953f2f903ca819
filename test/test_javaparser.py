import json
import os
import sys
import unittest

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from classtojsons.javaparser import TypeName, parse, parse_from_file, serialize2json


def java_path(*segments):
    return os.path.join(os.path.dirname(__file__), 'java', 'com', 'example', *segments)


class TestJavaParser(unittest.TestCase):

    def test_package_and_imports(self):
        java_file = parse("""
            package com.example.app;

            import java.util.List;
            import java.util.*;
            import static java.lang.Math.max;

            class Empty {}
        """)
        self.assertEqual(java_file.package, 'com.example.app')
        self.assertEqual([(i.name, i.is_static, i.is_wildcard) for i in java_file.imports], [
            ('java.util.List', False, False),
            ('java.util', False, True),
            ('java.lang.Math.max', True, False),
        ])
        self.assertEqual([t.name for t in java_file.types], ['Empty'])

    def test_default_package(self):
        java_file = parse("public class Point { int x; int y; }")
        self.assertEqual(java_file.package, '')
        self.assertEqual([f.name for f in java_file.types[0].fields], ['x', 'y'])

    def test_field_types(self):
        java_file = parse("""
            class Holder {
                private java.util.Map<String, List<Integer>> map;
                protected byte[][] grid;
                int values[];
                List<? extends Number> upper;
                List<? super Integer> lower;
                List<?> unknown;
                Outer.Inner inner;
            }
        """)
        fields = {f.name: f.type for f in java_file.types[0].fields}
        self.assertEqual(fields['map'], TypeName('java.util.Map', [
            TypeName('String', [], 0),
            TypeName('List', [TypeName('Integer', [], 0)], 0)], 0))
        self.assertEqual(fields['grid'], TypeName('byte', [], 2))
        self.assertEqual(fields['values'], TypeName('int', [], 1))
        self.assertEqual(fields['upper'].args, [TypeName('Number', [], 0)])
        self.assertEqual(fields['lower'].args, [TypeName('Object', [], 0)])
        self.assertEqual(fields['unknown'].args, [TypeName('Object', [], 0)])
        self.assertEqual(fields['inner'].name, 'Outer.Inner')

    def test_multiple_declarators(self):
        java_file = parse("class Pair { int x = 1, y = compute(2, 3), z; }")
        fields = java_file.types[0].fields
        self.assertEqual([f.name for f in fields], ['x', 'y', 'z'])
        self.assertTrue(all(f.type.name == 'int' for f in fields))

    def test_modifiers(self):
        java_file = parse("class Config { public static final String NAME = \"config\"; private transient int cache; }")
        name, cache = java_file.types[0].fields
        self.assertEqual(name.modifiers, ['public', 'static', 'final'])
        self.assertEqual(cache.modifiers, ['private', 'transient'])

    def test_doc_comments(self):
        java_file = parse("""
            class Documented {
                /** The identifier */
                long id;

                /** Detached comment */

                int count;

                /* block comment */
                String name;

                /**
                 * Annotated
                 */
                @Deprecated
                @SuppressWarnings("unused")
                String legacy;
            }
        """)
        docs = {f.name: f.doc_comment for f in java_file.types[0].fields}
        self.assertEqual(docs['id'], '/** The identifier */')
        self.assertEqual(docs['count'], '/** Detached comment */')
        self.assertIsNone(docs['name'])
        self.assertIn('Annotated', docs['legacy'])

    def test_doc_comment_interrupted_by_code(self):
        java_file = parse("""
            class Interrupted {
                /** Belongs to nothing */
                void run() {}
                int value;
            }
        """)
        self.assertIsNone(java_file.types[0].fields[0].doc_comment)

    def test_methods_and_initializers_are_dropped(self):
        java_file = parse("""
            class Busy {
                static { REGISTRY.put("a", new int[] {1, 2}); }
                { counter = 0; }
                int counter;
                Busy() { this(1); }
                Busy(int start) { counter = start; }
                public <T> List<T> items(Class<T> type) throws Exception { return null; }
                abstract void pending();
                String label;
            }
        """)
        self.assertEqual([f.name for f in java_file.types[0].fields], ['counter', 'label'])

    def test_enum_constants(self):
        java_file = parse_from_file(java_path('Status.java'))
        status = java_file.types[0]
        self.assertEqual(status.kind, 'enum')
        self.assertEqual(status.enum_constants, ['ACTIVE', 'SUSPENDED', 'DELETED'])
        self.assertEqual([f.name for f in status.fields], ['code'])

    def test_enum_without_members(self):
        java_file = parse("enum Direction { NORTH, SOUTH, }")
        self.assertEqual(java_file.types[0].enum_constants, ['NORTH', 'SOUTH'])
        self.assertEqual(java_file.types[0].fields, [])

    def test_nested_declarations(self):
        java_file = parse_from_file(java_path('graph', 'Node.java'))
        node, graph = java_file.types
        self.assertEqual(node.type_params, ['T'])
        self.assertEqual(graph.kind, 'interface')
        self.assertEqual([(t.kind, t.name) for t in node.types], [('class', 'Edge'), ('interface', 'Visitor')])
        edge = node.types[0]
        self.assertEqual([f.name for f in edge.fields], ['target', 'weight', 'kind'])
        self.assertEqual([(t.kind, t.name, t.enum_constants) for t in edge.types], [('enum', 'Kind', ['DIRECTED', 'UNDIRECTED'])])

    def test_braces_in_literals(self):
        java_file = parse_from_file(java_path('Marker.java'))
        self.assertEqual(java_file.types[0].name, 'Marker')
        self.assertEqual(java_file.types[0].fields, [])

    def test_annotation_type(self):
        java_file = parse("public @interface Audited { String value() default \"\"; }")
        self.assertEqual((java_file.types[0].kind, java_file.types[0].name), ('interface', 'Audited'))

    def test_sealed_hierarchy(self):
        java_file = parse("""
            public sealed interface Shape permits Circle, Square {}
            non-sealed class Circle implements Shape { double radius; }
            final class Square implements Shape { double side; }
        """)
        shape, circle, square = java_file.types
        self.assertEqual((shape.kind, shape.modifiers), ('interface', ['public', 'sealed']))
        self.assertEqual(circle.modifiers, ['non-sealed'])
        self.assertEqual([f.name for f in circle.fields], ['radius'])
        self.assertEqual([f.name for f in square.fields], ['side'])

    def test_records_are_dropped(self):
        java_file = parse("""
            package com.example;

            public record Point(int x, int y) implements Comparable<Point> {
                public Point {
                    if (x < 0) throw new IllegalArgumentException();
                }
                static int origin = 0;
            }

            record Pair<A, B>(A first, B second) {}

            class Plot {
                Point center;
                String record;
                private record Range(int from, int to) {}
            }
        """)
        self.assertEqual([t.name for t in java_file.types], ['Plot'])
        plot = java_file.types[0]
        self.assertEqual([f.name for f in plot.fields], ['center', 'record'])
        self.assertEqual(plot.types, [])

    def test_serialize2json(self):
        data = json.loads(serialize2json("package p; class A { int a; }"))
        self.assertEqual(data['package'], 'p')
        self.assertEqual(data['types'][0]['fields'][0]['type'], {"name": "int", "args": [], "dims": 0})


if __name__ == '__main__':
    unittest.main()
