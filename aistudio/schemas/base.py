"""
Base schema - camelCase on the wire, snake_case in Python.

Fields declare their wire name with Field(alias=...). populate_by_name lets
Python code (and ORM objects via from_attributes) use the snake_case name.
"""

from pydantic import BaseModel


class APIModel(BaseModel):
    class Config:
        populate_by_name = True
        from_attributes = True
