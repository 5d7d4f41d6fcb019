"""공통 Pydantic 스키마 정의.

Common Pydantic schema definitions shared across API domains.
JSON bodies use camelCase keys; snake_case input is accepted as well.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """camelCase JSON 키를 사용하는 기본 스키마.

    Base schema serialising to camelCase keys (``accessToken``,
    ``passwordChangeRequired``) while accepting either casing on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(CamelModel):
    """단순 메시지 응답 스키마 — Plain message response."""

    message: str
