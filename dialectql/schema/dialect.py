"""The DialectDescriptor: everything one backend does differently.

A descriptor is an immutable bundle of capability flags, literal tokens,
clause orders and override functions.  The translators in
:mod:`dialectql.compile` are a single engine parameterised by a descriptor;
adding a dialect means composing a descriptor, never subclassing the engine.

Create one through the builder::

    from dialectql import DialectDescriptor
    from dialectql.schema.expressions import Op

    descriptor = (
        DialectDescriptor.builder("legacydb")
        .booleans("1", "0")
        .operators(ilike=False, is_true=False, bitwise=False)
        .default_from("FROM DUAL")
        .build()
    )

or derive one from an existing descriptor with :meth:`DialectDescriptor.evolve`::

    relaxed = descriptor.evolve(unsupported_alter_ops=frozenset())

Descriptors are validated on construction, so a misconfigured descriptor
fails at registration time rather than on the first query.
"""
from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from dialectql.errors import ConfigurationError
from dialectql.schema.expressions import (
    BITWISE_OPS,
    AlterKind,
    LiteralKind,
    Op,
    StatementKind,
)

#: ``(op, operands, render) -> sql``; ``render`` turns any node into SQL.
OperatorRenderer = Callable[[Op, tuple[Any, ...], Callable[[Any], str]], str]

#: ``(value, descriptor) -> sql`` for one literal kind.
LiteralRenderer = Callable[[Any, Any], str]

#: ``(op, translator) -> sql`` for one ALTER TABLE kind.
AlterRenderer = Callable[[Any, Any], str]

#: ``(base_type_sql, column) -> sql`` for identity columns.
IdentityRenderer = Callable[[str, Any], str]

#: ``(limit, offset) -> sql`` pagination fragment.
LimitRenderer = Callable[[int | None, int | None], str]

Case = Literal["upper", "lower"]

SELECT_CLAUSES: tuple[str, ...] = (
    "with", "select", "distinct", "columns", "from", "join", "where",
    "group", "having", "compounds", "order", "limit", "lock",
)
INSERT_CLAUSES: tuple[str, ...] = ("insert", "columns", "values")
UPDATE_CLAUSES: tuple[str, ...] = ("update", "set", "where")
DELETE_CLAUSES: tuple[str, ...] = ("delete", "where")

DEFAULT_CLAUSE_ORDERS: Mapping[StatementKind, tuple[str, ...]] = MappingProxyType({
    StatementKind.SELECT: SELECT_CLAUSES,
    StatementKind.INSERT: INSERT_CLAUSES,
    StatementKind.UPDATE: UPDATE_CLAUSES,
    StatementKind.DELETE: DELETE_CLAUSES,
})

DEFAULT_BITWISE_FUNCTIONS: Mapping[Op, str] = MappingProxyType({
    Op.BIT_AND: "BITAND",
    Op.BIT_OR: "BITOR",
    Op.BIT_XOR: "BITXOR",
})

DEFAULT_LOCK_CLAUSES: Mapping[str, str] = MappingProxyType({
    "update": "FOR UPDATE",
    "share": "FOR SHARE",
})

# The clause that carries the statement keyword; every order must keep it.
_KEYWORD_CLAUSE: dict[StatementKind, str] = {
    StatementKind.SELECT: "select",
    StatementKind.INSERT: "insert",
    StatementKind.UPDATE: "update",
    StatementKind.DELETE: "delete",
}

_MAPPING_FIELDS = (
    "clause_orders",
    "bitwise_functions",
    "lock_clauses",
    "operator_overrides",
    "literal_overrides",
    "alter_overrides",
    "connection_defaults",
)


class DialectDescriptor(BaseModel):
    """Immutable description of one backend's SQL dialect.

    Attributes are grouped as follows.

    Identifiers:
        identifier_quote: Quote character; doubled when it occurs in a name.
        identifier_input_case: Fold names to this case before quoting.
        identifier_output_case: Fold result column names to this case.
        qualifier_separator: Separator between qualifier and name.

    Literals:
        true_literal / false_literal: Boolean tokens.
        blob_open / blob_close / blob_hex_case: Hex blob literal wrapping.
        supports_timestamp_fraction: Render microseconds in timestamps.
        supports_time_fraction: Render microseconds in TIME values.
        param_placeholder: Bound-parameter placeholder.
        literal_overrides: Renderers keyed by :class:`LiteralKind`.

    Clauses:
        clause_orders: Ordered clause names per :class:`StatementKind`.
        default_from: FROM fragment used when a SELECT has no table.
        with_keyword / recursive_with_keyword: CTE introducers.
        recursive_cte_requires_column_aliases: Reject recursive CTEs
            without a column list.
        lock_clauses: Lock style → SQL.
        limit_renderer: Pagination override.

    Operators:
        supports_ilike, supports_is_true, supports_bitwise_operators,
        supports_bitwise_complement, supports_shift_operators: Native
            operator availability; unsupported ones are emulated.
        bitwise_functions: Function names used when bitwise operators are
            not native.
        upper_function: Function used by the case-insensitive LIKE emulation.
        operator_overrides: Renderers keyed by :class:`Op`.

    DDL:
        alter_overrides: Renderers keyed by :class:`AlterKind`.
        unsupported_alter_ops: ALTER kinds the backend cannot perform.
        identity_renderer: Identity column override.
        create_table_as_with_data: Wrap CTAS queries and append WITH DATA.
        supports_create_table_if_not_exists / supports_drop_table_if_exists.

    Database:
        supports_transaction_isolation_levels: Allow SET TRANSACTION.
        type_classifier: ``db_type -> ColumnType`` override.
        primary_key_index_pattern: Regex naming primary-key indexes.
        primary_key_constraint_name: Constraint name marking primary keys.
        version_function: SQL function returning the server version string.
        last_insert_id_sql: Statement fetching the last identity value.
        schema_parser / index_parser: Introspection hooks taking
            ``(database, table)``.
        connector: ``ConnectionOptions -> Connection`` factory.
        connection_defaults: Defaults for absent connection options.
    """

    model_config = ConfigDict(
        frozen=True, extra="forbid", arbitrary_types_allowed=True, validate_default=True
    )

    name: str

    identifier_quote: str = '"'
    identifier_input_case: Case | None = None
    identifier_output_case: Case | None = None
    qualifier_separator: str = "."

    true_literal: str = "TRUE"
    false_literal: str = "FALSE"
    blob_open: str = "X'"
    blob_close: str = "'"
    blob_hex_case: Case = "lower"
    supports_timestamp_fraction: bool = True
    supports_time_fraction: bool = True
    param_placeholder: str = "?"
    literal_overrides: Mapping[LiteralKind, LiteralRenderer] = Field(default_factory=dict)

    clause_orders: Mapping[StatementKind, tuple[str, ...]] = Field(
        default_factory=lambda: dict(DEFAULT_CLAUSE_ORDERS)
    )
    default_from: str | None = None
    with_keyword: str = "WITH"
    recursive_with_keyword: str = "WITH RECURSIVE"
    recursive_cte_requires_column_aliases: bool = False
    lock_clauses: Mapping[str, str] = Field(default_factory=lambda: dict(DEFAULT_LOCK_CLAUSES))
    limit_renderer: LimitRenderer | None = None

    supports_ilike: bool = True
    supports_is_true: bool = True
    supports_bitwise_operators: bool = True
    supports_bitwise_complement: bool = True
    supports_shift_operators: bool = True
    bitwise_functions: Mapping[Op, str] = Field(
        default_factory=lambda: dict(DEFAULT_BITWISE_FUNCTIONS)
    )
    upper_function: str = "UPPER"
    operator_overrides: Mapping[Op, OperatorRenderer] = Field(default_factory=dict)

    alter_overrides: Mapping[AlterKind, AlterRenderer] = Field(default_factory=dict)
    unsupported_alter_ops: frozenset[AlterKind] = frozenset()
    identity_renderer: IdentityRenderer | None = None
    create_table_as_with_data: bool = False
    supports_create_table_if_not_exists: bool = False
    supports_drop_table_if_exists: bool = False

    supports_transaction_isolation_levels: bool = False
    type_classifier: Callable[[str], Any] | None = None
    primary_key_index_pattern: re.Pattern[str] | None = None
    primary_key_constraint_name: str | None = None
    version_function: str | None = None
    last_insert_id_sql: str | None = None
    schema_parser: Callable[[Any, Any], Any] | None = None
    index_parser: Callable[[Any, Any], Any] | None = None
    connector: Callable[[Any], Any] | None = None
    connection_defaults: Mapping[str, Any] = Field(default_factory=dict)

    @field_validator(*_MAPPING_FIELDS, mode="after")
    @classmethod
    def _read_only(cls, value: Mapping[Any, Any]) -> Mapping[Any, Any]:
        return MappingProxyType(dict(value))

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def builder(cls, name: str) -> DialectDescriptorBuilder:
        """Return a :class:`DialectDescriptorBuilder` starting from the defaults."""
        return DialectDescriptorBuilder(name)

    @classmethod
    def create(cls, **options: Any) -> DialectDescriptor:
        """Validate ``options`` into a descriptor.

        Raises:
            ConfigurationError: If an option is unknown or has the wrong type.
        """
        try:
            return cls.model_validate(options)
        except ValidationError as exc:
            raise ConfigurationError(
                f"Invalid dialect descriptor option(s) for '{options.get('name')}': {exc}",
                dialect=options.get("name"),
            ) from exc

    def evolve(self, **changes: Any) -> DialectDescriptor:
        """Return a copy with ``changes`` applied (validated again).

        Raises:
            ConfigurationError: If a key is not a descriptor field.
        """
        current = {
            name: dict(value) if isinstance(value, MappingProxyType) else value
            for name, value in self
        }
        return type(self).create(**{**current, **changes})

    def clause_order(self, kind: StatementKind) -> tuple[str, ...]:
        """Return the clause order for ``kind``.

        Raises:
            ConfigurationError: If the dialect has no order for ``kind``.
        """
        order = self.clause_orders.get(kind)
        if order is None:
            raise ConfigurationError(
                f"Dialect '{self.name}' has no clause order for '{kind.value}' statements.",
                dialect=self.name,
            )
        return order

    @property
    def supports_ctes(self) -> bool:
        return "with" in self.clause_orders.get(StatementKind.SELECT, ())

    # ------------------------------------------------------------------
    # Internal validation
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def _validate(self) -> DialectDescriptor:
        """Raise :class:`ConfigurationError` for inconsistent descriptors.

        Rules
        -----
        ``clause_orders`` must cover SELECT
            Every dialect renders SELECT statements.

        each order keeps its keyword clause
            An order without ``select`` (``insert``, ...) would silently
            emit headless statements.

        ``bitwise_functions`` must be complete without native operators
            BIT_AND / BIT_OR / BIT_XOR are emulated through these names.
        """
        if not self.name:
            raise ConfigurationError("Dialect descriptors need a name.")

        if StatementKind.SELECT not in self.clause_orders:
            raise ConfigurationError(
                f"Dialect '{self.name}' must define a clause order for SELECT.",
                dialect=self.name,
            )
        for kind, order in self.clause_orders.items():
            keyword = _KEYWORD_CLAUSE[kind]
            if keyword not in order:
                raise ConfigurationError(
                    f"Clause order for '{kind.value}' in dialect "
                    f"'{self.name}' is missing the '{keyword}' clause.",
                    dialect=self.name,
                )

        if not self.supports_bitwise_operators:
            missing = sorted(op.value for op in BITWISE_OPS if op not in self.bitwise_functions)
            if missing:
                raise ConfigurationError(
                    f"Dialect '{self.name}' emulates bitwise operators but has no "
                    f"function for {missing}.",
                    dialect=self.name,
                )
        return self




class DialectDescriptorBuilder:
    """Fluent builder for :class:`DialectDescriptor`.

    Always obtained via :meth:`DialectDescriptor.builder`.  Each method sets
    one independent group of options; they can be called in any order.
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._options: dict[str, Any] = {}
        self._clause_orders: dict[StatementKind, tuple[str, ...]] = dict(DEFAULT_CLAUSE_ORDERS)
        self._operator_overrides: dict[Op, OperatorRenderer] = {}
        self._literal_overrides: dict[LiteralKind, LiteralRenderer] = {}
        self._alter_overrides: dict[AlterKind, AlterRenderer] = {}
        self._unsupported_alter_ops: set[AlterKind] = set()

    def quoting(
        self,
        quote: str = '"',
        input_case: Case | None = None,
        output_case: Case | None = None,
    ) -> DialectDescriptorBuilder:
        """Set the identifier quote and case folding for input and output names."""
        self._options.update(
            identifier_quote=quote,
            identifier_input_case=input_case,
            identifier_output_case=output_case,
        )
        return self

    def booleans(self, true: str, false: str) -> DialectDescriptorBuilder:
        self._options.update(true_literal=true, false_literal=false)
        return self

    def blobs(
        self, open_: str = "X'", close: str = "'", hex_case: Case = "lower"
    ) -> DialectDescriptorBuilder:
        self._options.update(blob_open=open_, blob_close=close, blob_hex_case=hex_case)
        return self

    def fractional_seconds(
        self, timestamp: bool = True, time: bool = True
    ) -> DialectDescriptorBuilder:
        """Choose whether timestamps and times render microseconds."""
        self._options.update(
            supports_timestamp_fraction=timestamp, supports_time_fraction=time
        )
        return self

    def placeholder(self, placeholder: str) -> DialectDescriptorBuilder:
        self._options["param_placeholder"] = placeholder
        return self

    def default_from(self, fragment: str) -> DialectDescriptorBuilder:
        """FROM fragment used by table-less SELECTs (e.g. ``FROM DUAL``)."""
        self._options["default_from"] = fragment
        return self

    def clause_order(
        self, kind: StatementKind, clauses: list[str] | tuple[str, ...]
    ) -> DialectDescriptorBuilder:
        self._clause_orders[kind] = tuple(clauses)
        return self

    def without_ctes(self) -> DialectDescriptorBuilder:
        """Drop the ``with`` clause: any CTE becomes a capability error."""
        order = self._clause_orders[StatementKind.SELECT]
        self._clause_orders[StatementKind.SELECT] = tuple(c for c in order if c != "with")
        return self

    def recursive_cte_column_aliases(self, required: bool = True) -> DialectDescriptorBuilder:
        self._options["recursive_cte_requires_column_aliases"] = required
        return self

    def locks(self, **clauses: str) -> DialectDescriptorBuilder:
        """Replace the lock style table (``update="FOR UPDATE"``)."""
        self._options["lock_clauses"] = clauses
        return self

    def pagination(self, renderer: LimitRenderer) -> DialectDescriptorBuilder:
        self._options["limit_renderer"] = renderer
        return self

    def operators(
        self,
        *,
        ilike: bool = True,
        is_true: bool = True,
        bitwise: bool = True,
        complement: bool = True,
        shifts: bool = True,
    ) -> DialectDescriptorBuilder:
        """Declare which operators are native; the rest are emulated."""
        self._options.update(
            supports_ilike=ilike,
            supports_is_true=is_true,
            supports_bitwise_operators=bitwise,
            supports_bitwise_complement=complement,
            supports_shift_operators=shifts,
        )
        return self

    def bitwise_functions(self, **names: str) -> DialectDescriptorBuilder:
        """Function names for emulated bitwise ops (``BIT_AND="BITAND"``)."""
        self._options["bitwise_functions"] = {Op(k): v for k, v in names.items()}
        return self

    def override_operator(self, op: Op, renderer: OperatorRenderer) -> DialectDescriptorBuilder:
        self._operator_overrides[op] = renderer
        return self

    def override_literal(
        self, kind: LiteralKind, renderer: LiteralRenderer
    ) -> DialectDescriptorBuilder:
        self._literal_overrides[kind] = renderer
        return self

    def override_alter(self, kind: AlterKind, renderer: AlterRenderer) -> DialectDescriptorBuilder:
        self._alter_overrides[kind] = renderer
        return self

    def unsupported_alter(self, *kinds: AlterKind) -> DialectDescriptorBuilder:
        self._unsupported_alter_ops.update(kinds)
        return self

    def identity(self, renderer: IdentityRenderer) -> DialectDescriptorBuilder:
        self._options["identity_renderer"] = renderer
        return self

    def create_table_as_with_data(self) -> DialectDescriptorBuilder:
        """Render ``CREATE TABLE t AS (<query>) WITH DATA``."""
        self._options["create_table_as_with_data"] = True
        return self

    def if_exists(self, create: bool = True, drop: bool = True) -> DialectDescriptorBuilder:
        """Enable ``CREATE TABLE IF NOT EXISTS`` / ``DROP TABLE IF EXISTS``."""
        self._options.update(
            supports_create_table_if_not_exists=create,
            supports_drop_table_if_exists=drop,
        )
        return self

    def transaction_isolation(self) -> DialectDescriptorBuilder:
        self._options["supports_transaction_isolation_levels"] = True
        return self

    def introspection(self, **hooks: Any) -> DialectDescriptorBuilder:
        """Set introspection options.

        Accepts ``type_classifier``, ``primary_key_index_pattern``,
        ``primary_key_constraint_name``, ``version_function``,
        ``last_insert_id_sql``, ``schema_parser`` and ``index_parser``.
        """
        allowed = {
            "type_classifier",
            "primary_key_index_pattern",
            "primary_key_constraint_name",
            "version_function",
            "last_insert_id_sql",
            "schema_parser",
            "index_parser",
        }
        unknown = sorted(set(hooks) - allowed)
        if unknown:
            raise ConfigurationError(
                f"Unknown introspection option(s): {unknown}.", dialect=self._name
            )
        self._options.update(hooks)
        return self

    def connection(
        self, connector: Callable[[Any], Any] | None = None, **defaults: Any
    ) -> DialectDescriptorBuilder:
        """Set the driver connector and defaults for absent connection options."""
        if connector is not None:
            self._options["connector"] = connector
        self._options["connection_defaults"] = defaults
        return self

    def build(self) -> DialectDescriptor:
        """Validate the configuration and return the :class:`DialectDescriptor`.

        Raises:
            ConfigurationError: When the options are inconsistent.
        """
        return DialectDescriptor.create(
            name=self._name,
            clause_orders=self._clause_orders,
            operator_overrides=self._operator_overrides,
            literal_overrides=self._literal_overrides,
            alter_overrides=self._alter_overrides,
            unsupported_alter_ops=frozenset(self._unsupported_alter_ops),
            **self._options,
        )
