"""
Payload Renderer Port
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class IPayloadRenderer(Protocol):
    """Turns snapshot text into a scannable image."""

    def render(self, text: str) -> str:
        """
        Encode text as a scannable image.

        Returns:
            ``data:image/png;base64,...`` URL
        """
        ...
