from typing import Literal, Optional, Union

from pydantic import BaseModel


class TimeoutFailure(BaseModel):
    """The request deadline elapsed."""

    kind: Literal["timeout"] = "timeout"


class TLSFailure(BaseModel):
    """The TLS handshake failed, either on certificate verification or at the protocol level."""

    kind: Literal["tls"] = "tls"
    certificate_verification: bool = False


class DNSFailure(BaseModel):
    """The target host name could not be resolved."""

    kind: Literal["dns"] = "dns"
    not_found: bool = False
    name: str = ""
    detail: str = ""


class ConnectionFailure(BaseModel):
    """The connection to the target could not be established."""

    kind: Literal["connection"] = "connection"
    detail: Optional[str] = None


class OtherFailure(BaseModel):
    """Any other failure, carrying the raw error message."""

    kind: Literal["other"] = "other"
    message: str = ""


TransportFailure = Union[
    TimeoutFailure, TLSFailure, DNSFailure, ConnectionFailure, OtherFailure
]
