"""Shared pydantic base for the JSON contract.

The React dashboards read camelCase keys (farmDetails, soilType,
lastUpdated), so every schema serializes with camelCase aliases while
Python code keeps snake_case attribute names. Inputs accept either form.
NaN and Infinity are rejected everywhere: the JSON parser lets them
through, but they cannot be stored and serialized back out.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        allow_inf_nan=False,
    )
