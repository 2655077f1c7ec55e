from pydantic import BaseModel, ConfigDict


class PickerCreate(BaseModel):
    name: str
    surname: str


class PickerRead(PickerCreate):
    id: int
    full_name: str

    model_config = ConfigDict(from_attributes=True)
