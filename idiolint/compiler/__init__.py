"""Userspace around the engine: the built-in reader, source loaders and config loading."""

from idiolint.compiler.config_loader import ConfigLoader, get_default_config, load_config
from idiolint.compiler.lexer import Token, tokenize
from idiolint.compiler.loader import ReaderLoader, SourceLoader
from idiolint.compiler.parser import Parser, parse_source

__all__ = [
    "ConfigLoader",
    "Parser",
    "ReaderLoader",
    "SourceLoader",
    "Token",
    "get_default_config",
    "load_config",
    "parse_source",
    "tokenize",
]
