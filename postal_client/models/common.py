import base64

from pydantic import BaseModel, ConfigDict, EmailStr


class Attachment(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    content_type: str
    data: str

    @classmethod
    def from_bytes(cls, name: str, content_type: str, raw: bytes) -> "Attachment":
        return cls(
            name=name,
            content_type=content_type,
            data=base64.b64encode(raw).decode("ascii"),
        )


class EmailAddress(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: EmailStr
    name: str | None = None

    def to_string(self) -> str:
        if self.name:
            return f"{self.name} <{self.email}>"
        return self.email
