"""dialectQL compilation layer: IR statements → dialect SQL."""
from dialectql.compile.base import RenderedSQL
from dialectql.compile.builder import QueryBuilder, render
from dialectql.compile.clause_builders import ClauseAssembler, assemble
from dialectql.compile.ddl_builder import DDLTranslator, render_alter
from dialectql.compile.expression_builder import ExpressionTranslator, translate
from dialectql.compile.literals import LiteralFormatter, quote_identifier, render_literal
from dialectql.compile.registry import DialectRegistry

__all__ = [
    "RenderedSQL",
    "QueryBuilder",
    "render",
    "ClauseAssembler",
    "assemble",
    "DDLTranslator",
    "render_alter",
    "ExpressionTranslator",
    "translate",
    "LiteralFormatter",
    "quote_identifier",
    "render_literal",
    "DialectRegistry",
]
