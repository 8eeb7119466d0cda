"""Wire payloads of the cloud sensor API.

Only the fields the monitor consumes are declared; everything else the
provider sends is ignored so additive API changes do not break decoding.
"""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class _CloudModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class AuthorizeRequest(_CloudModel):
    email: str
    password: str


class AuthorizeResponse(_CloudModel):
    """Step 1: short-lived authorization code (``authorization`` or ``code``)."""

    authorization: str = Field(min_length=1, validation_alias=AliasChoices("authorization", "code"))


class AccessTokenRequest(_CloudModel):
    authorization: str


class AccessTokenResponse(_CloudModel):
    """Step 2: bearer token used for every authenticated call."""

    accesstoken: str = Field(min_length=1, validation_alias=AliasChoices("accesstoken", "access_token"))
    exp: int | None = None


class ErrorResponse(_CloudModel):
    """Body of a non-200 response."""

    message: str | None = None
    status: str | int | None = None
    type: str | None = None


class CloudSensorDetail(_CloudModel):
    """One entry of the ``/devices/sensors`` map."""

    id: str
    device_id: str | None = Field(default=None, validation_alias=AliasChoices("deviceId", "device_id"))
    name: str | None = None
    active: bool = True
    battery_voltage: float | None = None
    rssi: int | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.device_id or self.id


class SamplesRequest(_CloudModel):
    limit: int = Field(ge=1)
    sensors: list[str] | None = None
    start_time: str | None = Field(default=None, serialization_alias="startTime")


class CloudSample(_CloudModel):
    """One sample; temperature is already Fahrenheit."""

    observed: datetime = Field(validation_alias=AliasChoices("observed", "timestamp", "time"))
    temperature: float
    humidity: float


class SamplesResponse(_CloudModel):
    """``/samples`` response: samples grouped by sensor id."""

    sensors: dict[str, list[CloudSample]] = Field(default_factory=dict)
    last_time: datetime | None = None
    truncated: bool = False
    status: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _null_sensors(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("sensors") is None:
            data = {**data, "sensors": {}}
        return data
