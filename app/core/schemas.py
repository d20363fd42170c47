from decimal import Decimal
from typing import Annotated, Any, Dict, Optional
from pydantic import BaseModel, PlainSerializer

# Day counts and money are Decimal internally and plain JSON numbers on the wire
JsonDecimal = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    code: Optional[str] = None

    @classmethod
    def body(cls, message: str, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Error envelope. Extra details are merged at the top level."""
        content = cls(error=message, code=code).model_dump(exclude_none=True)
        if details:
            content.update(details)
        return content
