# campus_market/schemas/common.py
from .base import BaseSchema


class DetailOut(BaseSchema):
    message: str


class CountOut(BaseSchema):
    count: int
