from pydantic import BaseModel, ConfigDict, Field
from coffee_cart.schemas.common import WireModel

class CoffeeResponseDto(WireModel):
    coffee_id: int = Field(alias="coffeeId")
    name: str
    price: int
    contents: str | None = None
    image_url: str | None = Field(default=None, alias="imageUrl")  # 파일명 또는 절대/상대 경로
    stock: int | None = None

class Product(WireModel):
    id: int
    name: str
    price: int
    image_url: str | None = None
    contents: str | None = None
    stock: int | None = None

class ProductCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    price: int = Field(ge=0)
    contents: str = Field(min_length=1)
    image_url: str = Field(alias="imageUrl")
    stock: int = Field(ge=0)

class ImageUploadOut(WireModel):
    image_url: str = Field(alias="imageUrl")
