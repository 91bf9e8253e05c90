import datetime
from typing import Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from intact_http.core.body import ResponseBody


class PipelineResponse(BaseModel):
    """An HTTP response as seen by the response pipeline.

    Headers are kept as `httpx.Headers`: lookups are case-insensitive and
    repeated header names keep every value in the order received.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    status_code: int = Field()
    headers: httpx.Headers = Field(default_factory=httpx.Headers)
    body: ResponseBody = Field(default_factory=lambda: ResponseBody.from_bytes(b""))
    url: Optional[str] = Field(default=None)
    reason_phrase: str = Field(default="")
    elapsed: Optional[datetime.timedelta] = Field(default=None)

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> "PipelineResponse":
        """Wraps a streamed httpx response without reading its body."""
        try:
            url: Optional[str] = str(response.url)
        except RuntimeError:
            # Response was built without an attached request
            url = None
        return cls(
            status_code=response.status_code,
            headers=response.headers,
            body=ResponseBody(response.aiter_bytes(), on_close=response.aclose),
            url=url,
            reason_phrase=response.reason_phrase,
        )

    @property
    def declared_content_length(self) -> Optional[int]:
        """The Content-Length header as an int, or None if absent or malformed."""
        value = self.headers.get("content-length")
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    @property
    def content_encoding(self) -> Optional[str]:
        return self.headers.get("content-encoding")
