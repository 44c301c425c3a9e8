import importlib

mod = "jsonvet"
class LazyLoader:
    """
    Lazy loader for the jsonvet functions to keep import time low.
    """
    def __init__(self, mappings):
        self._modules = {}
        self._mappings = mappings

    def _load_module(self, module_name):
        if module_name not in self._modules:
            self._modules[module_name] = importlib.import_module(module_name)
        return self._modules[module_name]

    def __getattr__(self, item):
        if item in self._mappings:
            module_name, attr_name = self._mappings[item]
            module = self._load_module(module_name)
            return getattr(module, attr_name)
        else:
            return self._load_module(f"{mod}.{item}")

# Define the public names and their corresponding module paths
_mappings = {
    "Schema": (f"{mod}.schema", "Schema"),
    "validate": (f"{mod}.schema", "validate"),
    "compile_schema": (f"{mod}.compiler", "compile_schema"),
    "SchemaCompiler": (f"{mod}.compiler", "SchemaCompiler"),
    "CompileError": (f"{mod}.compiler", "CompileError"),
    "MalformedKeywordError": (f"{mod}.compiler", "MalformedKeywordError"),
    "UnresolvedReferenceError": (f"{mod}.compiler", "UnresolvedReferenceError"),
    "Validator": (f"{mod}.validator", "Validator"),
    "ValidationDepthError": (f"{mod}.validator", "ValidationDepthError"),
    "Result": (f"{mod}.results", "Result"),
    "ValidationError": (f"{mod}.results", "ValidationError"),
    "ValidationOutcome": (f"{mod}.results", "ValidationOutcome"),
    "ErrorKind": (f"{mod}.results", "ErrorKind"),
    "MappingResolver": (f"{mod}.resolver", "MappingResolver"),
    "UrlResolver": (f"{mod}.resolver", "UrlResolver"),
    "validate_file": (f"{mod}.filevalidate", "validate_file"),
}

_lazy_loader = LazyLoader(_mappings)

def __getattr__(name):
    return getattr(_lazy_loader, name)
