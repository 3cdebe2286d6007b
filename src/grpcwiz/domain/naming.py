"""Naming contract shared by every emitter.

Converters, adapters, and proxies call each other by construction, so every
generated identifier is derived here and nowhere else.
"""

from __future__ import annotations

import re

SERVICE_SUFFIX = "Service"
WIRE_PREFIX = "Grpc_"

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def snake_case(name: str) -> str:
    """``PeopleResponse`` -> ``people_response``; snake names pass through.

    Examples:
        >>> snake_case("GetAllPeopleRequest")
        'get_all_people_request'
        >>> snake_case("HTTPStatus")
        'http_status'
        >>> snake_case("get_by_id")
        'get_by_id'
    """
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def pascal_case(name: str) -> str:
    """``get_by_id`` -> ``GetById``; already-Pascal names keep their casing."""
    if "_" not in name:
        return name[:1].upper() + name[1:]
    return "".join(part[:1].upper() + part[1:] for part in name.split("_") if part)


def short_service_name(service_name: str) -> str | None:
    """Strip the ``Service`` suffix, or return None when it is missing."""
    if not service_name.endswith(SERVICE_SUFFIX):
        return None
    return service_name[: -len(SERVICE_SUFFIX)]


# -- schema ----------------------------------------------------------------


def message_name(model: str) -> str:
    return f"{WIRE_PREFIX}{model}"


def wire_service_name(short: str) -> str:
    return f"{WIRE_PREFIX}{short}"


def rpc_name(method: str) -> str:
    return pascal_case(method)


# -- converters --------------------------------------------------------------


def converter_module(model: str) -> str:
    return f"{snake_case(model)}_converter"


def to_wire_function(model: str) -> str:
    return f"from_{snake_case(model)}"


def from_wire_function(model: str) -> str:
    return f"from_grpc_{snake_case(model)}"


def to_wire_list_function(model: str) -> str:
    return f"from_{snake_case(model)}_list"


def from_wire_list_function(model: str) -> str:
    return f"from_grpc_{snake_case(model)}_list"


# -- services ----------------------------------------------------------------


def servicer_base(short: str) -> str:
    """Base class generated by ``grpc_tools`` for the servicer."""
    return f"{wire_service_name(short)}Servicer"


def stub_class(short: str) -> str:
    return f"{wire_service_name(short)}Stub"


def register_function(short: str) -> str:
    return f"add_{wire_service_name(short)}Servicer_to_server"


def adapter_class(short: str) -> str:
    return f"Grpc{short}Service"


def adapter_module(short: str) -> str:
    return f"grpc_{snake_case(short)}_service"


def proxy_class(short: str) -> str:
    return f"{short}Client"


def proxy_module(short: str) -> str:
    return f"{snake_case(short)}_client"


def proto_module(proto_file: str) -> str:
    """``wire.proto`` -> ``wire_pb2``."""
    stem = proto_file.removesuffix(".proto")
    return f"{stem}_pb2"


def proto_grpc_module(proto_file: str) -> str:
    return f"{proto_module(proto_file)}_grpc"
