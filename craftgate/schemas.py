from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CreateServerRequest(BaseModel):
    type: str = Field(..., min_length=1, examples=["minecraft-java"])
    name: str = Field(..., min_length=1, examples=["mc1"])
    port: int = Field(..., ge=1, le=65535, examples=[25566])

    @field_validator("port", mode="before")
    @classmethod
    def reject_bool_port(cls, value: Any) -> Any:
        # Lax int mode would turn JSON true into port 1; numeric strings stay accepted.
        if isinstance(value, bool):
            raise ValueError("port must be a number, not a boolean")
        return value


class ControlRequest(BaseModel):
    id: str = Field(..., min_length=1, examples=["mc1"])


class ApiResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    command: str = ""
    stdout: str = ""
    stderr: str = ""
    message: Optional[str] = None


class ServerTypeInfo(BaseModel):
    type: str
    image: str
    container_port: int
    protocol: str
    description: str = ""
