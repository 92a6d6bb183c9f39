"""
Note Service: Note Entity and JSON Encoding
=============================================

What:  The Note record and the single routine that turns notes into a
       JSON response body.
Why:   The entity has no fields the API hides, so one Pydantic model serves
       as both the row shape and the wire shape.

Wire format:
    {"id": 20, "title": "mocked title", "content": "mocked content"}

    A zero id or an empty string is omitted, so a note decoded from a create
    request body and never stored encodes without an "id" key.
"""

from typing import List

from pydantic import BaseModel, Field, TypeAdapter, field_validator


class Note(BaseModel):
    """
    A persisted text note.

    id is assigned by the store on creation. Request bodies may leave it out
    (it defaults to 0); add() ignores it and update() uses it to pick the row.
    """

    id: int = Field(default=0, description="Store-assigned identifier")
    title: str = Field(default="", description="Note title")
    content: str = Field(default="", description="Note body text")

    @field_validator("id", "title", "content", mode="before")
    @classmethod
    def null_as_empty(cls, value, info):
        # A JSON null leaves the field at its zero value
        if value is None:
            return cls.model_fields[info.field_name].default
        return value


_note_list_adapter = TypeAdapter(List[Note])


def encode_notes(*notes: Note) -> bytes:
    """
    Encode notes as a compact JSON array.

    Always an array, even for one note; callers never special-case a single
    read.
    """
    return _note_list_adapter.dump_json(list(notes), exclude_defaults=True)
