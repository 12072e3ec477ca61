"""Shared pydantic configuration for persisted domain models."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class StateModel(BaseModel):
    """Base for models stored in the state tree.

    Fields are snake_case in Python and camelCase in the persisted blob and in
    store paths; either spelling is accepted on input. Assignments are
    validated so path writes cannot put a wrongly typed value into the tree.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )
