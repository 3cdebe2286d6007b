"""grpcwiz: generate a gRPC layer from Python domain models and services."""

__version__ = "0.4.0"
