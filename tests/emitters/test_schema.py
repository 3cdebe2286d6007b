"""Tests for the schema emitter."""

from grpcwiz.domain.descriptors import TypeUniverse
from grpcwiz.emitters.context import EmitContext
from grpcwiz.emitters.schema import SchemaEmitter, render_schema
from grpcwiz.services.discovery import discover
from tests.conftest import method, model, people_models, people_service, service


class TestPeopleSchema:
    def test_header(self, people_universe: TypeUniverse) -> None:
        plan = discover(people_universe)
        text = render_schema(plan.records, plan.messages, EmitContext("acme.rpc"))
        assert text.startswith('syntax = "proto3";\n\npackage acme.rpc.shared;\n')

    def test_service_block(self, people_universe: TypeUniverse) -> None:
        plan = discover(people_universe)
        text = render_schema(plan.records, plan.messages, EmitContext("acme"))
        assert (
            "service Grpc_People {\n"
            "  rpc GetAll (Grpc_EmptyRequest) returns (Grpc_PeopleResponse);\n"
            "  rpc GetById (Grpc_IdRequest) returns (Grpc_PersonResponse);\n"
            "}\n"
        ) in text

    def test_message_blocks_in_reference_order(self, people_universe: TypeUniverse) -> None:
        plan = discover(people_universe)
        text = render_schema(plan.records, plan.messages, EmitContext("acme"))
        positions = [
            text.index(f"message Grpc_{name} {{")
            for name in ("EmptyRequest", "PeopleResponse", "Person", "IdRequest", "PersonResponse")
        ]
        assert positions == sorted(positions)
        assert text.index("service Grpc_People") < positions[0]

    def test_field_lines(self, people_universe: TypeUniverse) -> None:
        plan = discover(people_universe)
        text = render_schema(plan.records, plan.messages, EmitContext("acme"))
        assert "message Grpc_Person {\n  int32 id = 1;\n  string first_name = 2;\n}\n" in text
        assert "  repeated Grpc_Person people = 1;\n" in text
        assert "  Grpc_Person person = 1;\n" in text
        assert "message Grpc_EmptyRequest {\n}\n" in text

    def test_deterministic(self, people_universe: TypeUniverse) -> None:
        plan = discover(people_universe)
        ctx = EmitContext("acme")
        assert render_schema(plan.records, plan.messages, ctx) == render_schema(
            plan.records, plan.messages, ctx
        )


class TestDeduplication:
    def test_shared_message_emitted_once(self) -> None:
        other = service(
            "DirectoryService",
            method("lookup", "IdRequest", returns=("PersonResponse",)),
        )
        plan = discover(TypeUniverse(services=(people_service(), other), models=people_models()))
        emitter = SchemaEmitter(EmitContext("acme"))
        first = emitter.emit_service(plan.records[0], plan.messages)
        second = emitter.emit_service(plan.records[1], plan.messages)
        assert len(first.messages) == 5
        assert second.messages == ()
        assert second.rpcs[0].name == "Lookup"

        text = emitter.render()
        assert text.count("message Grpc_Person {") == 1
        assert "service Grpc_Directory {" in text
        assert emitter.emitted_messages == frozenset(plan.messages)


class TestFieldMapping:
    def test_timestamp_and_decimal(self) -> None:
        event = model("Event", at="timestamp", price="decimal", blob="bytes", tags="string[]")
        svc = service("EventsService", method("get", "Event", returns=("Event",)))
        plan = discover(TypeUniverse(services=(svc,), models=(event,)))
        text = render_schema(plan.records, plan.messages, EmitContext("acme"))
        assert "  int64 dt_at = 1;\n" in text
        assert "  double price = 2;\n" in text
        assert "  bytes blob = 3;\n" in text
        assert "  repeated string tags = 4;\n" in text

    def test_service_without_methods(self) -> None:
        svc = service("IdleService", models=("Person",))
        plan = discover(TypeUniverse(services=(svc,), models=(model("Person", id="int32"),)))
        text = render_schema(plan.records, plan.messages, EmitContext("acme"))
        assert "service Grpc_Idle {\n}\n" in text
        assert "message Grpc_Person {" in text

    def test_nullable_fields_track_presence(self) -> None:
        item = model(
            "Item",
            name="string",
            when="timestamp?",
            price="decimal?",
            count="int64?",
            home="Address?",
            tags="list[string]?",
        )
        address = model("Address", street="string")
        svc = service("ItemsService", method("get", "Item", returns=("Item",)))
        plan = discover(TypeUniverse(services=(svc,), models=(item, address)))
        text = render_schema(plan.records, plan.messages, EmitContext("acme"))
        assert "  string name = 1;\n" in text
        assert "  optional int64 dt_when = 2;\n" in text
        assert "  optional double price = 3;\n" in text
        assert "  optional int64 count = 4;\n" in text
        assert "  Grpc_Address home = 5;\n" in text
        assert "  repeated string tags = 6;\n" in text
