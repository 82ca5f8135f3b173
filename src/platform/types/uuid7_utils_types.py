"""
UUID7 Pydantic type

uuid_utils.UUID carries no Pydantic schema, so purchase ids coming through
FastAPI path/body parameters are validated through this subclass:
JSON strings are parsed into UUIDs, UUID objects pass through, and
responses always serialize back to the canonical string form.
"""

from typing import Any

from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler
from pydantic.json_schema import JsonSchemaValue
from pydantic_core import core_schema
from uuid_utils import UUID, uuid7


class UtilsUUID7(UUID):
    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        def _to_uuid(value: Any) -> UUID:
            if isinstance(value, UUID):
                return value
            try:
                return UUID(str(value))
            except Exception as e:
                raise ValueError(f'Invalid UUID: {value}') from e

        from_str = core_schema.chain_schema(
            [
                core_schema.str_schema(),
                core_schema.no_info_plain_validator_function(_to_uuid),
            ]
        )
        return core_schema.json_or_python_schema(
            json_schema=from_str,
            python_schema=core_schema.union_schema(
                [core_schema.is_instance_schema(UUID), from_str]
            ),
            serialization=core_schema.plain_serializer_function_ser_schema(
                str, when_used='always', return_schema=core_schema.str_schema()
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls, schema: core_schema.CoreSchema, handler: GetJsonSchemaHandler
    ) -> JsonSchemaValue:
        return {'type': 'string', 'format': 'uuid'}


def new_uuid7() -> UUID:
    return uuid7()
