from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field


class AddProductRequest(BaseModel):
    """
    Field level checks (name, price, stock, image URL) are enforced by
    AdminProductService so they surface as 400s with a readable message.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    description: str | None = None
    price: Decimal | None = None
    stock: int | None = None
    category_id: int = Field(alias="categoryId")
    image_url: str | None = Field(default=None, alias="imageUrl")


class DeleteProductRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(alias="productId")


class ModifyUserRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(alias="userId")
    username: str | None = None
    email: str | None = None
    role: str | None = None


class GetUserRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(alias="userId")
