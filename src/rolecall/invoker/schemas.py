"""
Payload schemas of the directory service.

Field names follow the JSON the service serves (camelCase, including its
`dispalyName` spelling). Simulated payloads are built and serialized
through these models so they always carry the live field set.
"""

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class DirectoryUser(_Payload):
    """A user as listed by /User/manage."""

    id: str
    # Spelled as served by the directory service
    display_name: str = Field(alias="dispalyName")
    email: str
    type: str = "User"


class Application(_Payload):
    """An application as listed by /Application."""

    id: str
    name: str
    app_id: str = Field(alias="appId")


class AppRole(_Payload):
    """A role defined on an application."""

    id: str
    name: str
    app_id: str = Field(alias="appId")
    app_name: str = Field(alias="appName")


class UserRoleInfo(_Payload):
    """One role assignment of a user, as listed by /Roles/user-roles."""

    user_id: str = Field(alias="userId")
    user_display_name: str = Field(alias="userDisplayName")
    user_email: str = Field(alias="userEmail")
    application_id: str = Field(alias="applicationId")
    application_name: str = Field(alias="applicationName")
    role_id: str = Field(alias="roleId")
    role_name: str = Field(alias="roleName")
    assigned_date: str = Field(alias="assignedDate")


class WeatherForecast(_Payload):
    """A forecast entry from /WeatherForecast."""

    date: str
    temperature_c: int = Field(alias="temperatureC")
    temperature_f: int = Field(alias="temperatureF")
    summary: str


class MutationAck(_Payload):
    """Acknowledgment returned when a mutation could not be carried out."""

    success: bool = False
    simulated: bool = True
    action: str
    message: str
    username: str | None = None
    app_name: str | None = Field(default=None, alias="appName")
    role_name: str | None = Field(default=None, alias="roleName")


DirectoryUserList = TypeAdapter(list[DirectoryUser])
ApplicationList = TypeAdapter(list[Application])
AppRoleList = TypeAdapter(list[AppRole])
UserRoleInfoList = TypeAdapter(list[UserRoleInfo])
WeatherForecastList = TypeAdapter(list[WeatherForecast])


def dump_payload(adapter: TypeAdapter, items: list) -> str:
    """Serialize a payload list with wire field names."""
    return adapter.dump_json(items, by_alias=True, indent=2).decode("utf-8")
