# src/schemas/user.py

from pydantic import BaseModel, Field


class UserRegister(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)


class UserView(BaseModel):
    """
    Публичная проекция пользователя: { id, name, email, pairingEnabled, buddyCount }.
    buddyCount - производное значение (размер списка бадди без блокировок).
    """
    id: int
    name: str
    email: str
    pairing_enabled: bool = Field(..., alias="pairingEnabled")
    buddy_count: int = Field(0, alias="buddyCount", ge=0)

    class Config:
        from_attributes = True
        populate_by_name = True
