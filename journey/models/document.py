# journey/models/document.py
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, ValidationError

from journey.errors import MalformedDocumentError


def plain(value: Any) -> Any:
    """Turn enum members back into the raw strings the store expects"""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, list):
        return [plain(item) for item in value]
    if isinstance(value, dict):
        return {key: plain(item) for key, item in value.items()}
    return value


def lower_enum(value: Any) -> Any:
    """Before-validator: enum values match case-insensitively"""
    if isinstance(value, str):
        return value.lower()
    return value


class DocumentModel(BaseModel):
    """Record that maps to and from a string-keyed store document.

    Decoding is all-or-nothing: every key in REQUIRED_KEYS must be present
    and every value must have the declared shape, otherwise the whole record
    is rejected with MalformedDocumentError.
    """

    model_config = ConfigDict(populate_by_name=True)

    REQUIRED_KEYS: ClassVar[Tuple[str, ...]] = ()

    @classmethod
    def from_document(cls, data: Any, document_id: Optional[str] = None):
        if not isinstance(data, dict):
            raise MalformedDocumentError(cls.__name__, detail="document is not a mapping")

        missing = [key for key in cls.REQUIRED_KEYS if key not in data]
        if missing:
            raise MalformedDocumentError(cls.__name__, missing)

        payload = {key: value for key, value in data.items() if key != "_id"}
        if document_id is not None:
            payload["id"] = document_id

        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            raise MalformedDocumentError(cls.__name__, detail=str(e.errors()[0]["loc"])) from e

    def to_document(self) -> Dict[str, Any]:
        """Store representation; unset optionals are left out rather than written as null"""
        return plain(self.model_dump(by_alias=True, exclude_none=True, exclude={"id"}))
