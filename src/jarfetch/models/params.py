"""Request parameter models: the tagged request body union and RequestParams."""

import logging
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from .options import check_transport_options

logger = logging.getLogger(__name__)


class RedirectMode(str, Enum):
    """How redirects are handled for a request."""

    # Let the transport follow redirects itself
    FOLLOW = "follow"
    # Follow 301/302 in the facade so Set-Cookie on every hop is honoured
    MANUAL = "manual"


class MultipartOptions(BaseModel):
    """Per-part options of a multipart field."""

    filename: Optional[str] = None
    content_type: Optional[str] = None

    model_config = {"extra": "forbid", "frozen": True}


class MultipartField(BaseModel):
    """
    A multipart value with explicit part options.

    Example:
        MultipartField(value=b"...", options={"filename": "a.png", "content_type": "image/png"})
        MultipartField(value=open("report.pdf", "rb"), options="report.pdf")
    """

    value: Any
    options: Union[MultipartOptions, str, None] = None

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @property
    def filename(self) -> Optional[str]:
        if isinstance(self.options, str):
            return self.options
        return self.options.filename if self.options else None

    @property
    def content_type(self) -> Optional[str]:
        if isinstance(self.options, MultipartOptions):
            return self.options.content_type
        return None


class FormBody(BaseModel):
    """application/x-www-form-urlencoded body; non-string values are sent as their string form."""

    kind: Literal["form"] = "form"
    fields: dict[str, Any]

    model_config = {"frozen": True}


class MultipartBody(BaseModel):
    """multipart/form-data body; values may be lists, MultipartField or plain values."""

    kind: Literal["multipart"] = "multipart"
    fields: dict[str, Any]

    model_config = {"frozen": True, "arbitrary_types_allowed": True}


class JsonBody(BaseModel):
    """application/json body."""

    kind: Literal["json"] = "json"
    data: Any

    model_config = {"frozen": True}


RequestBody = Annotated[Union[FormBody, MultipartBody, JsonBody], Field(discriminator="kind")]

# Shortcut keyword -> body model, highest precedence first
BODY_SHORTCUTS: tuple[tuple[str, type[BaseModel], str], ...] = (
    ("form", FormBody, "fields"),
    ("form_data", MultipartBody, "fields"),
    ("json", JsonBody, "data"),
)


class RequestParams(BaseModel):
    """
    Parameters of one request.

    The body shortcuts ``form``, ``form_data`` and ``json`` are accepted as
    keyword arguments and folded into ``body``. When several are given only
    the first in the order form > form_data > json is kept.

    Example:
        RequestParams(method="POST", form={"user": "alice"})
        RequestParams(query={"page": "2"}, encoding="cp1252")
        RequestParams(json={"a": 1}, redirect=RedirectMode.FOLLOW)
    """

    method: str = Field("GET", min_length=1, description="HTTP method")
    headers: dict[str, str] = Field(default_factory=dict, description="Request headers")
    query: dict[str, Any] = Field(default_factory=dict, description="Query string parameters")
    body: Optional[RequestBody] = Field(None, description="Request body, one kind at most")
    encoding: Optional[str] = Field(None, description="Encoding the response is converted from")
    return_buffer: bool = Field(False, description="Return raw bytes instead of text")
    redirect: RedirectMode = Field(RedirectMode.MANUAL, description="Redirect handling")
    options: dict[str, Any] = Field(default_factory=dict, description="Per-request transport options")

    model_config = {"extra": "forbid", "frozen": True}

    @model_validator(mode="before")
    @classmethod
    def _fold_body_shortcuts(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        data = dict(data)
        supplied = [
            (name, model, attr, data.pop(name))
            for name, model, attr in BODY_SHORTCUTS
            if name in data
        ]
        supplied = [entry for entry in supplied if entry[3] is not None]
        if not supplied:
            return data

        if data.get("body") is not None:
            raise ValueError("Pass either body or one of form/form_data/json, not both")

        name, model, attr, value = supplied[0]
        if len(supplied) > 1:
            dropped = ", ".join(entry[0] for entry in supplied[1:])
            logger.warning(f"Multiple request bodies given; using {name}, ignoring {dropped}")

        data["body"] = model(**{attr: value})
        return data

    @field_validator("method")
    @classmethod
    def _upper_method(cls, value: str) -> str:
        return value.upper()

    @field_validator("options")
    @classmethod
    def _check_options(cls, value: dict[str, Any]) -> dict[str, Any]:
        return check_transport_options(value)

    def with_method(self, method: str) -> "RequestParams":
        """Return a copy of these params using ``method``."""
        return self.model_copy(update={"method": method.upper()})

    def for_redirect(self) -> "RequestParams":
        """
        Params for the next hop of a 301/302 redirect.

        The method collapses to GET; body, query and caller headers are
        dropped. Response handling (encoding, return_buffer) and transport
        options carry over.
        """
        return RequestParams(
            method="GET",
            encoding=self.encoding,
            return_buffer=self.return_buffer,
            redirect=RedirectMode.MANUAL,
            options=self.options,
        )
