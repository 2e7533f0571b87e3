from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ArticlePayload(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    title: str = Field(..., min_length=1)
    author: Optional[str] = None
    tags: Optional[str] = None
    summary_html: Optional[str] = None
    body_html: str = ""
    external_id: Optional[str] = None
    published_at: Optional[str] = None

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, v: Any):
        return v.strip() if isinstance(v, str) else v

    @field_validator("summary_html", mode="before")
    @classmethod
    def _blank_summary_is_none(cls, v: Optional[str]):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def _join_tags(cls, v: Any):
        if isinstance(v, (list, tuple)):
            return ", ".join(str(t) for t in v if t)
        return v

    def to_api_payload(self) -> dict[str, Any]:
        return {"article": self.model_dump(exclude_none=True)}


class MetafieldPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    namespace: str
    key: str
    value: Any
    type: Optional[str] = None

    @classmethod
    def from_source(cls, metafield: dict[str, Any]) -> "MetafieldPayload":
        """Keep only the fields the create endpoint accepts."""
        return cls(
            namespace=metafield.get("namespace"),
            key=metafield.get("key"),
            value=metafield.get("value"),
            type=metafield.get("type") or None,
        )

    def to_api_payload(self) -> dict[str, Any]:
        return {"metafield": self.model_dump(exclude_none=True)}
