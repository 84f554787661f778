"""Base schema classes with camelCase alias generation.

Backend Python code stays snake_case. Persisted JSON and API output are camelCase.
"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts snake_case or camelCase input, outputs camelCase with by_alias."""
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "protected_namespaces": (),
    }
