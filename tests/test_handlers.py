import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from rest_resource.config import ModuleOptions
from rest_resource.exceptions import NotFoundException, UnprocessableEntityException
from rest_resource.handlers import register_exception_handlers, setup
from rest_resource.resource import ReflectionError

from assets import OutOfStock


def make_app(options: ModuleOptions) -> FastAPI:
    app = FastAPI()

    @app.get("/widgets/{widget_id}")
    async def get_widget(widget_id: int):
        raise NotFoundException(f"Widget {widget_id} not found")

    @app.post("/widgets")
    async def create_widget():
        raise UnprocessableEntityException(errors={"label": ["Value is required"]})

    @app.put("/widgets/{widget_id}")
    async def update_widget(widget_id: int):
        return {"method": "PUT", "id": widget_id}

    @app.get("/stock")
    async def stock():
        raise OutOfStock("No widgets left")

    return setup(app, options)


def test_http_exception_is_rendered_as_json():
    client = TestClient(make_app(ModuleOptions()))

    response = client.get("/widgets/4")

    assert response.status_code == 404
    assert response.json() == {"status_code": 404, "message": "Widget 4 not found"}


def test_errors_payload_is_rendered():
    client = TestClient(make_app(ModuleOptions()))

    response = client.post("/widgets")

    assert response.status_code == 422
    body = response.json()
    assert body["message"] == UnprocessableEntityException.DEFAULT_MESSAGE
    assert body["errors"] == {"label": ["Value is required"]}


def test_exception_map_translates_application_errors():
    options = ModuleOptions(exception_map={"assets.OutOfStock": "rest_resource.exceptions.ConflictException"})
    client = TestClient(make_app(options))

    response = client.get("/stock")

    assert response.status_code == 409
    assert response.json() == {"status_code": 409, "message": "No widgets left"}


def test_exception_map_rejects_non_http_targets():
    options = ModuleOptions(exception_map={"assets.OutOfStock": "assets.Widget"})

    with pytest.raises(ValueError):
        register_exception_handlers(FastAPI(), options)


def test_exception_map_rejects_unknown_classes():
    options = ModuleOptions(exception_map={"assets.NoSuchError": "rest_resource.exceptions.ConflictException"})

    with pytest.raises(ReflectionError):
        register_exception_handlers(FastAPI(), options)


def test_method_override_header():
    client = TestClient(make_app(ModuleOptions(register_http_method_override_listener=True)))

    response = client.post("/widgets/7", headers={"X-HTTP-Method-Override": "put"})

    assert response.status_code == 200
    assert response.json() == {"method": "PUT", "id": 7}


def test_method_override_rejects_unknown_method():
    client = TestClient(make_app(ModuleOptions(register_http_method_override_listener=True)))

    response = client.post("/widgets/7", headers={"X-HTTP-Method-Override": "TRACE"})

    assert response.status_code == 400
    assert response.json()["errors"] == {"allowed": ["PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]}


def test_method_override_disabled_by_default():
    client = TestClient(make_app(ModuleOptions()))

    response = client.post("/widgets/7", headers={"X-HTTP-Method-Override": "PUT"})

    assert response.status_code == 405


def test_post_without_override_is_untouched():
    client = TestClient(make_app(ModuleOptions(register_http_method_override_listener=True)))

    response = client.post("/widgets")

    assert response.status_code == 422
