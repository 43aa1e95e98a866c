"""Shared base for request payload models."""

from typing import Any

from pydantic import BaseModel, model_validator


class FormModel(BaseModel):
    """Request payload that treats empty strings as absent.

    Browser forms submit "" for untouched inputs. Dropping those keys makes
    optional fields fall back to None and required fields report as missing.
    """

    @model_validator(mode="before")
    @classmethod
    def drop_empty_strings(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {
                key: value
                for key, value in data.items()
                if not (isinstance(value, str) and value.strip() == "")
            }
        return data
