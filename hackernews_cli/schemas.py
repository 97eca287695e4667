# JSON Schemas for HN payloads. Permissive on extra fields due to live data variability.
id_list_schema = {
    "type": "array",
    "items": {"type": "integer"},
}

item_schema = {
    "type": "object",
    "required": ["id", "type", "time"],
    "properties": {
        "id": {"type": "integer"},
        "type": {"type": "string", "enum": ["story", "comment", "job", "poll", "pollopt", "ask"]},
        "by": {"type": "string"},
        "time": {"type": "integer"},  # Unix seconds
        "text": {"type": "string"},
        "title": {"type": "string"},
        "url": {"type": "string"},
        "score": {"type": "integer"},
        "descendants": {"type": "integer"},
        "kids": {
            "type": "array",
            "items": {"type": "integer"}
        },
        "dead": {"type": "boolean"},
        "deleted": {"type": "boolean"},
        "parent": {"type": "integer"},
        "poll": {"type": "integer"},
        "parts": {
            "type": "array",
            "items": {"type": "integer"}
        }
    },
    "additionalProperties": True,
}

comment_schema = {
    "allOf": [
        item_schema,
        {"type": "object", "required": ["parent"]}
    ]
}

pollopt_schema = {
    "allOf": [
        item_schema,
        {"type": "object", "required": ["poll"]}
    ]
}

# kind-specific checks layered on item_schema; kinds not listed only need the common shape
kind_schemas = {
    "comment": comment_schema,
    "pollopt": pollopt_schema,
}


def schema_for(kind: str) -> dict:
    return kind_schemas.get(kind, item_schema)
