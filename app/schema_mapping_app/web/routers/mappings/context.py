from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from schema_mapping_app.domain.mapping import DataSchemaFieldMapping, DataSchemaMapping
from schema_mapping_app.domain.resource import Resource

RESULT_INPUT = "input"
RESULT_SOURCE = "source"
RESULT_ERROR = "error"
RESULT_SUCCESS = "success"

PARAM_RESOURCE = "r"
PARAM_SCHEMA_ID = "id"
PARAM_MAPPING_ID = "mid"
PARAM_SOURCE = "source"
PARAM_SCHEMA_NAME = "schema_name"


def _first_value(values: Mapping[str, Any] | None, key: str) -> str:
    if values is None:
        return ""
    raw = values.get(key)
    if raw is None:
        return ""
    return str(raw).strip()


@dataclass(frozen=True)
class MappingRequestParams:
    """Parameters read before the field-mapping payload is bound."""

    resource: str = ""
    schema_id: str = ""
    mid: int | None = None
    mid_invalid: bool = False
    source: str = ""
    schema_name: str = ""


def extract_early_params(
    query: Mapping[str, Any] | None,
    form: Mapping[str, Any] | None = None,
) -> MappingRequestParams:
    def _value(key: str) -> str:
        return _first_value(form, key) or _first_value(query, key)

    raw_mid = _value(PARAM_MAPPING_ID)
    mid: int | None = None
    mid_invalid = False
    if raw_mid:
        try:
            mid = int(raw_mid)
        except ValueError:
            mid_invalid = True
    return MappingRequestParams(
        resource=_value(PARAM_RESOURCE),
        schema_id=_value(PARAM_SCHEMA_ID),
        mid=mid,
        mid_invalid=mid_invalid,
        source=_value(PARAM_SOURCE),
        schema_name=_value(PARAM_SCHEMA_NAME),
    )


@dataclass
class MappingRequestContext:
    params: MappingRequestParams
    resource: Resource | None = None
    mapping: DataSchemaMapping | None = None
    mid: int | None = None
    columns: list[str] = field(default_factory=list)
    peek: list[list[str]] = field(default_factory=list)
    fields: list[DataSchemaFieldMapping] = field(default_factory=list)
    result: str = RESULT_INPUT
    not_found: bool = False
    action_errors: list[str] = field(default_factory=list)
    action_warnings: list[str] = field(default_factory=list)

    def add_action_error(self, message: str) -> None:
        self.action_errors.append(str(message))

    def add_action_warning(self, message: str) -> None:
        self.action_warnings.append(str(message))

    def fail(self, message: str) -> None:
        self.add_action_error(message)
        self.result = RESULT_ERROR

    @property
    def has_errors(self) -> bool:
        return bool(self.action_errors)
