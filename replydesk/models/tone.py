"""Tone attributes used when asking the draft service for a new reply."""

from pydantic import BaseModel, Field

NO_CHANGE = "No Change"


class ToneAttributes(BaseModel):
    """Formality and length adjustments for a regeneration."""

    formality: str = Field(NO_CHANGE, description="e.g. Formal, Casual, Friendly")
    length: str = Field(NO_CHANGE, description="e.g. Short, Medium, Long")

    @property
    def combined(self) -> str:
        """Tone descriptor sent to the draft service.

        ``"Formal, Short length"``; the length suffix is left off when
        length is unchanged (``"Formal, No Change"``).
        """
        length_part = self.length
        if length_part != NO_CHANGE:
            length_part = f"{length_part} length"
        return f"{self.formality}, {length_part}"
