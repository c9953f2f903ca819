"""
Class declarations to JSON schema.

The public functions are imported on first access so that the command line
tool does not load the Java grammar for model conversions.
"""

import importlib

_EXPORTS = {
    "convert_java_to_json_schema": "javatojsons",
    "build_type_model": "javatojsons",
    "convert_type_model_to_json_schema": "modeltojsons",
    "write_json_schemas": "modeltojsons",
    "ClassToJsonSchemaConverter": "modeltojsons",
    "load_type_model": "typemodel",
    "load_type_model_from_file": "typemodel",
}

__all__ = sorted(_EXPORTS)


def __getattr__(name):
    if name in _EXPORTS:
        module = importlib.import_module(f"{__name__}.{_EXPORTS[name]}")
        value = getattr(module, name)
        globals()[name] = value
        return value
    if name.startswith('_'):
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    # submodules such as classtojsons.javaparser
    try:
        return importlib.import_module(f"{__name__}.{name}")
    except ModuleNotFoundError as e:
        if e.name != f"{__name__}.{name}":
            raise
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}") from e


def __dir__():
    return sorted(set(globals()) | set(_EXPORTS))
