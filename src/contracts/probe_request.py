from typing import Optional

from pydantic import BaseModel


class ProbeRequest(BaseModel):
    """
    Data model representing a URL test request from the client.
    """

    # Missing and blank are both reported by the URL validator.
    url: Optional[str] = None
