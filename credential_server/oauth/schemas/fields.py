"""Field types shared by the request schemas.

Both types validate the value but keep the caller's raw string, so that
redirect URIs and identifiers are compared exactly as they were sent.
"""

import uuid
from typing import Annotated

from pydantic import AfterValidator, AnyUrl, TypeAdapter, ValidationError

_any_url = TypeAdapter(AnyUrl)


def _check_absolute_uri(value: str) -> str:
    try:
        _any_url.validate_python(value)
    except ValidationError:
        raise ValueError("must be an absolute URI")
    return value


def _check_uuid(value: str) -> str:
    try:
        uuid.UUID(value)
    except ValueError:
        raise ValueError("must be a UUID")
    return value


AbsoluteUri = Annotated[str, AfterValidator(_check_absolute_uri)]
UuidStr = Annotated[str, AfterValidator(_check_uuid)]
