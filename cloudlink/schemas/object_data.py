"""
Object Data Schema.

The envelope CloudLink wraps around every stored object.
"""

from pydantic import BaseModel, ConfigDict, Field


class ObjectData(BaseModel):
    """
    Stored item as returned by CloudLink.

    An envelope without uid means the object does not exist.
    """

    uid: str | None = Field(default=None, description="Opaque object identifier")
    payload: str | None = Field(default=None, description="Serialized JSON payload")

    model_config = ConfigDict(frozen=True, extra="ignore")

    @property
    def exists(self) -> bool:
        """Whether the envelope refers to a stored object."""
        return self.uid is not None
