"""Base Pydantic models for recordguard.

Every model exposed by the package (validation results, introspection output,
settings, schema-definition files) inherits from ``RecordguardBaseModel`` so
that they share one configuration:

- Strict field validation (no extra fields allowed)
- Immutable instances, safe to hand to callers and diagnostic sinks

Example:
    >>> from recordguard.models import RecordguardBaseModel
    >>>
    >>> class Point(RecordguardBaseModel):
    ...     x: int
    ...     y: int = 0
    >>>
    >>> Point(x=1).model_dump()
    {'x': 1, 'y': 0}
"""

from pydantic import BaseModel, ConfigDict


class RecordguardBaseModel(BaseModel):
    """Base model for all recordguard Pydantic models.

    - extra="forbid": Rejects any fields not defined in the model
    - frozen=True: Makes instances immutable

    Validated records themselves are not Pydantic models; they hold arbitrary
    dynamic data and are checked by the validator instead.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)
