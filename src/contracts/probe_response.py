from typing import Optional

from pydantic import Field

from contracts.probe_result import ProbeResult


class ProbeResponse(ProbeResult):
    """
    Data model representing the probe result as returned by the HTTP API,
    annotated with the caller's and this server's IP addresses.
    """

    user_ip: Optional[str] = Field(default=None, alias="userIP")
    server_ip: Optional[str] = Field(default=None, alias="serverIP")

    @classmethod
    def from_result(
        cls, result: ProbeResult, user_ip: Optional[str], server_ip: Optional[str]
    ) -> "ProbeResponse":
        return cls(**result.model_dump(), user_ip=user_ip, server_ip=server_ip)
