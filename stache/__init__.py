"""
Stache — Statically typed Mustache compiler

Compiles Mustache templates into Python render functions. Every name used
by a template is resolved against a declared data-model type at compile
time, so the generated code performs plain attribute access and never
parses a template at runtime.
"""

__version__ = "0.1.0"
