import base64
from dataclasses import dataclass


@dataclass(frozen=True)
class ImageInput:
    """An image attached to a chat request."""

    data: bytes
    media_type: str

    def to_data_url(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.media_type};base64,{encoded}"
