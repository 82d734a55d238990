"""
Bookstore API — Mapping Registry
=================================

What:  Converts between ORM entities and pydantic DTOs using explicit
       field-correspondence rules.
How:   Each rule names a (source type, destination type) pair, the fields
       copied between them, and optionally nested fields whose values are
       themselves mapped with another registered rule.
Who:   Built once by `build_mapping_registry()` in create_app() and handed to
       every CrudHandler. Nothing looks the registry up globally.

Fail-fast:
    `register()` checks every declared field against both types (pydantic
    `model_fields` or the SQLAlchemy mapper attributes) and that nested
    rules already exist. A typo in a rule raises MappingConfigurationError
    while the app is being built, never in the middle of a request.

Example:
    registry = MappingRegistry()
    registry.register(Book, BookRead, fields=("id", "title", "isbn"))
    dto = registry.map(book, BookRead)
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import inspect
from sqlalchemy.exc import NoInspectionAvailable

from bookstore_api.exceptions import MappingConfigurationError

T = TypeVar("T")


def declared_fields(cls: type) -> Tuple[str, ...]:
    """
    Names of the fields a pydantic model or a mapped ORM class declares.

    Raises MappingConfigurationError for any other type.
    """
    if isinstance(cls, type) and issubclass(cls, BaseModel):
        return tuple(cls.model_fields)
    try:
        mapper = inspect(cls)
    except NoInspectionAvailable:
        raise MappingConfigurationError(
            f"{getattr(cls, '__name__', cls)!s} is neither a pydantic model nor a mapped ORM class",
        )
    return tuple(mapper.attrs.keys())


@dataclass(frozen=True)
class MappingRule:
    """One (source → destination) correspondence."""

    source: type
    destination: type
    fields: Tuple[str, ...]
    # field name → destination type its value is mapped to
    nested: Mapping[str, type] = field(default_factory=dict)


class MappingRegistry:
    """Holds MappingRules and applies them."""

    def __init__(self) -> None:
        self._rules: Dict[Tuple[type, type], MappingRule] = {}

    def register(
        self,
        source: type,
        destination: type,
        fields: Iterable[str],
        nested: Optional[Mapping[str, type]] = None,
    ) -> MappingRule:
        """Validate and store a rule. Returns the stored rule."""
        field_names = tuple(fields)
        nested_map = dict(nested or {})
        rule_name = f"{source.__name__} -> {destination.__name__}"

        if not field_names:
            raise MappingConfigurationError(f"Mapping {rule_name} declares no fields")

        source_fields = set(declared_fields(source))
        destination_fields = set(declared_fields(destination))
        for name in field_names:
            if name not in source_fields:
                raise MappingConfigurationError(
                    f"Mapping {rule_name}: source has no field '{name}'",
                    context={"rule": rule_name, "field": name},
                )
            if name not in destination_fields:
                raise MappingConfigurationError(
                    f"Mapping {rule_name}: destination has no field '{name}'",
                    context={"rule": rule_name, "field": name},
                )

        for name, nested_destination in nested_map.items():
            if name not in field_names:
                raise MappingConfigurationError(
                    f"Mapping {rule_name}: nested field '{name}' is not in the field list",
                )
            if not any(dst is nested_destination for (_, dst) in self._rules):
                raise MappingConfigurationError(
                    f"Mapping {rule_name}: no rule registered that produces "
                    f"{nested_destination.__name__} for nested field '{name}'",
                )

        rule = MappingRule(source, destination, field_names, nested_map)
        self._rules[(source, destination)] = rule
        return rule

    def rule_for(self, source: type, destination: type) -> MappingRule:
        try:
            return self._rules[(source, destination)]
        except KeyError:
            raise MappingConfigurationError(
                f"No mapping registered for {source.__name__} -> {destination.__name__}",
            )

    def map(self, obj: Any, destination: Type[T]) -> T:
        """Copy the declared fields of `obj` into a new `destination` instance."""
        rule = self.rule_for(type(obj), destination)
        values: Dict[str, Any] = {}
        for name in rule.fields:
            value = getattr(obj, name)
            if name in rule.nested and value is not None:
                value = self._map_nested(value, rule.nested[name])
            values[name] = value
        return destination(**values)

    def map_many(self, objs: Iterable[Any], destination: Type[T]) -> List[T]:
        return [self.map(obj, destination) for obj in objs]

    def _map_nested(self, value: Any, destination: type) -> Any:
        if isinstance(value, (list, tuple, set)):
            return self.map_many(value, destination)
        return self.map(value, destination)
