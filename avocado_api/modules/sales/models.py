# avocado_api/modules/sales/models.py
from typing import Annotated, Any, Union

from bson import ObjectId
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer, WithJsonSchema


def _validate_object_id(value: Any) -> Any:
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return value


# ObjectId that validates from its hex string and serializes back to it
PyObjectId = Annotated[
    ObjectId,
    BeforeValidator(_validate_object_id),
    PlainSerializer(str, return_type=str),
    WithJsonSchema({"type": "string", "example": "663b8a11f1a4e7d8c9b1a1b1"}),
]

# Ints stay ints in responses; only non-integral values become floats
Number = Union[int, float]

# Every field a create payload must carry, in document order
SALES_RECORD_FIELDS = (
    "id",
    "date",
    "region",
    "averagePrice",
    "totalVolume",
    "smallBags",
    "largeBags",
    "xLargeBags",
)


class SalesRecordCreateInternal(BaseModel):
    """Document written on create and by the seed."""
    id: int
    date: str
    region: str
    averagePrice: Number
    totalVolume: Number
    smallBags: Number
    largeBags: Number
    xLargeBags: Number

    model_config = ConfigDict(extra="ignore")


class SalesRecordInDB(SalesRecordCreateInternal):
    """A stored record, including MongoDB's own _id."""
    mongo_id: PyObjectId = Field(alias="_id")

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        extra="ignore",
        json_schema_extra={
            "example": {
                "_id": "663b8a11f1a4e7d8c9b1a1b1",
                "id": 1,
                "date": "2015-12-27",
                "region": "Albany",
                "averagePrice": 1.33,
                "totalVolume": 64236.62,
                "smallBags": 8603.62,
                "largeBags": 93.25,
                "xLargeBags": 0,
            }
        },
    )
