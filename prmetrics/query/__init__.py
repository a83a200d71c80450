"""Search-query language: tokenizer, compiler and validator."""

from prmetrics.query.compiler import build_query, format_date, parse_query, query_complexity
from prmetrics.query.params import build_query_string, default_query, parse_query_params
from prmetrics.query.tokenizer import Token, TokenKind, tokenize
from prmetrics.query.validator import (
    MAX_QUERY_LENGTH,
    SUPPORTED_QUALIFIERS,
    suggest_query_fixes,
    validate_and_sanitize,
    validate_query,
    validate_realtime,
)

__all__ = [
    # Tokenizer
    "Token",
    "TokenKind",
    "tokenize",
    # Compiler
    "parse_query",
    "build_query",
    "query_complexity",
    "format_date",
    # Validator
    "MAX_QUERY_LENGTH",
    "SUPPORTED_QUALIFIERS",
    "validate_query",
    "validate_realtime",
    "validate_and_sanitize",
    "suggest_query_fixes",
    # URL parameters
    "default_query",
    "parse_query_params",
    "build_query_string",
]
