from pydantic import BaseModel, ConfigDict, Field

from chatrelay.fields.iso_timestamp import IsoTimestamp, IsoTimestampField


class Session(BaseModel):  # type: ignore[misc]
    """
    Joined-chat state owned by exactly one connection.

    Sessions are immutable: the username and join time never change after
    a successful join.

    Attributes:
        username: Display name, unique across all live sessions.
        joined_at: UTC time of the successful join.
    """

    model_config = ConfigDict(frozen=True)

    username: str = Field(min_length=1)
    joined_at: IsoTimestamp = IsoTimestampField()
