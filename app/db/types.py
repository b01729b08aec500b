from sqlalchemy import JSON, String, cast, type_coerce
from sqlalchemy.dialects.postgresql import JSONB

# Array-of-ids column: JSONB on PostgreSQL, JSON text elsewhere.
StringList = JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql")


def array_contains(column, value: str, dialect_name: str):
    """Filter clause for "column holds value" on a StringList column"""
    if dialect_name == "postgresql":
        return type_coerce(column, JSONB).contains([value])
    # Elements are serialized as JSON strings, so a quoted match is exact for ids
    return cast(column, String).like(f'%"{value}"%')
