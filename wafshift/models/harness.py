"""Request harness contract — where a variant was injected and what came back.

The harness that actually sends variants lives outside the engine; these
models are the uniform shape it hands back.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from wafshift.utils.http import with_query_param


class HeaderInjection(BaseModel):
    kind: Literal["header"] = "header"
    name: str = "User-Agent"

    def apply(self, headers: dict[str, str], value: str) -> dict[str, str]:
        return {**headers, self.name: value}


class QueryInjection(BaseModel):
    kind: Literal["query"] = "query"
    param: str = "test"

    def build_url(self, url: str, value: str) -> str:
        return with_query_param(url, self.param, value)


class BodyInjection(BaseModel):
    kind: Literal["body"] = "body"
    param: str = "test"
    content_type: str = "application/x-www-form-urlencoded"

    def build_body(self, value: str) -> dict[str, str]:
        return {self.param: value}


class ProtocolInjection(BaseModel):
    """Variant placed directly in the request line (path component)."""

    kind: Literal["protocol"] = "protocol"
    method: str = "GET"

    def build_url(self, url: str, value: str) -> str:
        return f"{url.rstrip('/')}/{value}"


InjectionPoint = Annotated[
    HeaderInjection | QueryInjection | BodyInjection | ProtocolInjection,
    Field(discriminator="kind"),
]


class RequestOutcome(BaseModel):
    """Summary of one delivered variant."""

    variant: str = ""
    status_code: int
    blocked: bool
    response_time: float = 0.0
    injection_point: InjectionPoint = Field(default_factory=QueryInjection)

    @classmethod
    def from_status(
        cls,
        status_code: int,
        injection_point: InjectionPoint | None = None,
        *,
        variant: str = "",
        response_time: float = 0.0,
        block_codes: frozenset[int] = frozenset({403, 406, 429, 501, 503}),
    ) -> RequestOutcome:
        return cls(
            variant=variant,
            status_code=status_code,
            blocked=status_code in block_codes,
            response_time=response_time,
            injection_point=injection_point or QueryInjection(),
        )
