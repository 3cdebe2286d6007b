"""Tests for discovery and the service/model reference graph."""

import pytest

from grpcwiz.domain.descriptors import TypeUniverse
from grpcwiz.domain.errors import ErrorCode, GenerationError
from grpcwiz.services.discovery import discover
from tests.conftest import method, model, people_models, people_service, service

PEOPLE_ORDER = ("EmptyRequest", "PeopleResponse", "Person", "IdRequest", "PersonResponse")


class TestPeople:
    def test_referenced_order(self, people_universe: TypeUniverse) -> None:
        plan = discover(people_universe)
        assert len(plan.records) == 1
        record = plan.records[0]
        assert record.short_name == "People"
        assert record.interface.name == "IPeopleService"
        assert record.referenced_models == PEOPLE_ORDER

    def test_messages_follow_first_reference(self, people_universe: TypeUniverse) -> None:
        plan = discover(people_universe)
        assert list(plan.messages) == list(PEOPLE_ORDER)
        assert plan.message_order() == list(PEOPLE_ORDER)

    def test_graph_edges(self, people_universe: TypeUniverse) -> None:
        g = discover(people_universe).graph
        assert g.has_edge(("service", "PeopleService"), ("model", "IdRequest"))
        assert g.has_edge(("model", "PeopleResponse"), ("model", "Person"))

    def test_unused_models(self) -> None:
        universe = TypeUniverse(
            services=(people_service(),),
            models=(*people_models(), model("Orphan", id="int32")),
        )
        assert discover(universe).unused_models == ("Orphan",)

    def test_explicit_models_come_first(self) -> None:
        svc = service(
            "PeopleService",
            method("get_all", "EmptyRequest", returns=("PeopleResponse",)),
            models=("IdRequest",),
        )
        universe = TypeUniverse(services=(svc,), models=people_models())
        assert discover(universe).records[0].referenced_models == (
            "IdRequest",
            "EmptyRequest",
            "PeopleResponse",
            "Person",
        )

    def test_shared_models_keep_first_service(self) -> None:
        other = service(
            "DirectoryService",
            method("lookup", "IdRequest", returns=("PersonResponse",)),
        )
        universe = TypeUniverse(services=(people_service(), other), models=people_models())
        plan = discover(universe)
        assert plan.records[1].referenced_models == ("IdRequest", "PersonResponse", "Person")
        assert list(plan.messages) == list(PEOPLE_ORDER)


class TestFailures:
    def test_empty_universe(self) -> None:
        with pytest.raises(GenerationError) as excinfo:
            discover(TypeUniverse())
        assert excinfo.value.code is ErrorCode.NO_TYPES
        assert excinfo.value.message == "Type universe has no types"

    def test_models_without_services(self) -> None:
        with pytest.raises(GenerationError) as excinfo:
            discover(TypeUniverse(models=people_models()))
        assert excinfo.value.code is ErrorCode.NO_SERVICES
        assert excinfo.value.message == "Service classes must have the service marker"

    def test_bad_service_name(self) -> None:
        svc = service("WidgetManager", method("get", "IdRequest", returns=("PersonResponse",)))
        with pytest.raises(GenerationError) as excinfo:
            discover(TypeUniverse(services=(svc,), models=people_models()))
        assert excinfo.value.code is ErrorCode.INVALID_SERVICE_NAME

    def test_short_name_collision(self) -> None:
        a = people_service()
        b = people_service().model_copy(update={"module": "other"})
        with pytest.raises(GenerationError) as excinfo:
            discover(TypeUniverse(services=(a, b), models=people_models()))
        assert excinfo.value.code is ErrorCode.NAME_COLLISION

    def test_service_modules_collide_after_snake_case(self) -> None:
        a = service("HTTPStatusService", method("get", "IdRequest", returns=("PersonResponse",)))
        b = service("HttpStatusService", method("get", "IdRequest", returns=("PersonResponse",)))
        with pytest.raises(GenerationError) as excinfo:
            discover(TypeUniverse(services=(a, b), models=people_models()))
        assert excinfo.value.code is ErrorCode.NAME_COLLISION
        assert "grpc_http_status_service" in excinfo.value.message

    def test_service_short_name_matches_model(self) -> None:
        product = model("Product", id="int32")
        svc = service("ProductService", method("get", "Product", returns=("Product",)))
        with pytest.raises(GenerationError) as excinfo:
            discover(TypeUniverse(services=(svc,), models=(product,)))
        assert excinfo.value.code is ErrorCode.NAME_COLLISION
        assert "Grpc_Product" in excinfo.value.message

    def test_unused_model_may_share_short_name(self) -> None:
        svc = service("ProductsService", method("get", "IdRequest", returns=("PersonResponse",)))
        products = model("Products", id="int32")
        plan = discover(TypeUniverse(services=(svc,), models=(*people_models(), products)))
        assert plan.unused_models == ("EmptyRequest", "PeopleResponse", "Products")

    def test_converter_modules_collide_after_snake_case(self) -> None:
        upper = model("HTTPStatus", code="int32")
        mixed = model("HttpStatus", code="int32")
        svc = service("StatusService", method("get", "HTTPStatus", returns=("HttpStatus",)))
        with pytest.raises(GenerationError) as excinfo:
            discover(TypeUniverse(services=(svc,), models=(upper, mixed)))
        assert excinfo.value.code is ErrorCode.NAME_COLLISION
        assert "http_status_converter" in excinfo.value.message

    def test_unknown_method_model(self) -> None:
        svc = service("WidgetService", method("get", "Missing", returns=("PersonResponse",)))
        with pytest.raises(GenerationError) as excinfo:
            discover(TypeUniverse(services=(svc,), models=people_models()))
        assert excinfo.value.code is ErrorCode.UNKNOWN_MODEL
        assert "Missing" in excinfo.value.message

    def test_unknown_nested_model(self) -> None:
        svc = service("WidgetService", method("get", "Box", returns=("Box",)))
        box = model("Box", item="Missing")
        with pytest.raises(GenerationError) as excinfo:
            discover(TypeUniverse(services=(svc,), models=(box,)))
        assert excinfo.value.code is ErrorCode.UNKNOWN_MODEL
        assert "Box.item" in excinfo.value.message

    def test_unsupported_nested_sequence(self) -> None:
        svc = service("WidgetService", method("get", "Grid", returns=("Grid",)))
        grid = model("Grid", rows="list[list[int32]]")
        with pytest.raises(GenerationError) as excinfo:
            discover(TypeUniverse(services=(svc,), models=(grid,)))
        assert excinfo.value.code is ErrorCode.UNSUPPORTED_TYPE

    def test_method_contract_checked(self) -> None:
        svc = service("WidgetService", method("get", "IdRequest", "IdRequest", returns=("X",)))
        with pytest.raises(GenerationError) as excinfo:
            discover(TypeUniverse(services=(svc,), models=people_models()))
        assert excinfo.value.code is ErrorCode.METHOD_ARITY


class TestSelfReference:
    def test_recursive_model(self) -> None:
        node = model("Node", value="int32", children="list[Node]")
        svc = service("TreeService", method("get", "Node", returns=("Node",)))
        plan = discover(TypeUniverse(services=(svc,), models=(node,)))
        assert plan.records[0].referenced_models == ("Node",)
        assert plan.messages["Node"].fields[1].wire_type == "Grpc_Node"
