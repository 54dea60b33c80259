"""Unit tests for the service registry.

Tests cover:
- Discovery of dynamic routes and static fixtures
- Route matching
- Service management (create, upload, delete)
- Template isolation between clones
"""

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from mock_service.engine import (
    ConflictError,
    NotFoundError,
    RouteConfig,
    ServiceRegistry,
    TemplateError,
    ValidationError,
    validate_service_name,
)
from mock_service.engine.registry import compile_route_pattern


@pytest.fixture
def registry(services_dir):
    """Registry loaded from the bundled services."""
    registry = ServiceRegistry(str(services_dir))
    registry.discover()
    return registry


class TestDiscovery:
    """Tests for loading services from disk."""

    def test_bundled_services(self, registry):
        assert len(registry) == 3
        assert ("plan_de_ruta", "GET") in registry
        assert ("cliente_historial", "get") in registry
        assert ("catalogo_productos", "GET") in registry

    def test_transform_keys(self, registry):
        assert registry.get_entry("plan_de_ruta", "GET").transform_key == "route_plan"
        assert registry.get_entry("cliente_historial", "GET").transform_key == "client_history"
        assert registry.resolve_transform("catalogo_productos", "GET") is None

    def test_route_params_loaded(self, registry):
        route = registry.get_entry("plan_de_ruta", "GET").route

        assert route.params["fecha"].param_type == "date"
        assert route.params["ruta_id"].pattern is not None

    def test_missing_directory_is_created(self, tmp_path):
        target = tmp_path / "nowhere"
        registry = ServiceRegistry(str(target))

        assert registry.discover() == 0
        assert target.is_dir()

    def test_broken_service_is_skipped(self, services_dir):
        broken = services_dir / "roto"
        broken.mkdir()
        (broken / "roto-GET.json").write_text("{not json", encoding="utf-8")

        registry = ServiceRegistry(str(services_dir))

        assert registry.discover() == 3
        assert ("roto", "GET") not in registry

    def test_unknown_transform_is_skipped(self, services_dir):
        service = services_dir / "raro"
        service.mkdir()
        (service / "routes.json").write_text(
            json.dumps({"pattern": "/raro/{x}", "transform": "no_such_transform"}),
            encoding="utf-8",
        )
        (service / "template.json").write_text("{}", encoding="utf-8")

        registry = ServiceRegistry(str(services_dir))
        registry.discover()

        assert ("raro", "GET") not in registry

    @pytest.mark.parametrize("routes", [
        {"pattern": "/malo/{ruta-id}", "transform": "route_plan"},
        {"pattern": "/malo/{x}/{x}"},
        [{"pattern": "/malo/{x}"}],
        "solo texto",
    ])
    def test_invalid_routes_file_is_skipped(self, services_dir, routes):
        service = services_dir / "zz_malo"
        service.mkdir()
        (service / "routes.json").write_text(json.dumps(routes), encoding="utf-8")
        (service / "template.json").write_text("{}", encoding="utf-8")

        registry = ServiceRegistry(str(services_dir))

        assert registry.discover() == 3
        assert ("zz_malo", "GET") not in registry
        assert registry.match_route("/plan-de-ruta/P-0007/2025-06-02", "GET") is not None

    def test_static_fixture_per_method(self, services_dir):
        (services_dir / "catalogo_productos" / "catalogo_productos-POST.json").write_text(
            json.dumps({"creado": True}), encoding="utf-8"
        )

        registry = ServiceRegistry(str(services_dir))
        registry.discover()

        assert registry.load_template("catalogo_productos", "POST") == {"creado": True}

    def test_list_services_includes_empty_directories(self, services_dir, registry):
        (services_dir / "vacio").mkdir()

        names = [info["name"] for info in registry.list_services()]

        assert names == sorted(names)
        assert "vacio" in names
        assert {"name": "plan_de_ruta", "methods": ["GET"]} in registry.list_services()


class TestRouteMatching:
    """Tests for dynamic route patterns."""

    def test_pattern_compilation(self):
        regex = compile_route_pattern("/plan-de-ruta/{ruta_id}/{fecha}")

        match = regex.match("/plan-de-ruta/P-0007/2025-06-02")

        assert match.groupdict() == {"ruta_id": "P-0007", "fecha": "2025-06-02"}
        assert regex.match("/plan-de-ruta/P-0007") is None
        assert regex.match("/plan-de-ruta/P-0007/2025-06-02/extra") is None

    def test_literal_parts_are_escaped(self):
        regex = compile_route_pattern("/v1.0/{x}")

        assert regex.match("/v1.0/a")
        assert regex.match("/v1x0/a") is None

    def test_match_route(self, registry):
        assert registry.match_route("/historial-cliente/C00042/2025-01-01/2025-01-31", "get") == (
            "cliente_historial",
            {"cliente_id": "C00042", "fecha_desde": "2025-01-01", "fecha_hasta": "2025-01-31"},
        )

    def test_method_must_match(self, registry):
        assert registry.match_route("/plan-de-ruta/P-0007/2025-06-02", "POST") is None


class TestLookup:
    """Tests for template lookup and cloning."""

    def test_unknown_service(self, registry):
        with pytest.raises(NotFoundError) as exc_info:
            registry.load_template("nada", "GET")
        assert exc_info.value.status_code == 404

    def test_unknown_method(self, registry):
        with pytest.raises(NotFoundError):
            registry.get_entry("plan_de_ruta", "DELETE")

    def test_clones_do_not_alias_base(self, registry):
        first = registry.load_template("plan_de_ruta", "GET")
        first["clientes_en_ruta"].clear()
        first["resumen_ruta"]["total_recomendaciones"] = -1

        second = registry.load_template("plan_de_ruta", "GET")

        assert second["clientes_en_ruta"]
        assert second["resumen_ruta"]["total_recomendaciones"] != -1

    def test_register_rejects_non_json(self):
        registry = ServiceRegistry()

        with pytest.raises(TemplateError):
            registry.register("svc", "GET", {"bad": object()})

    def test_register_rejects_unknown_transform(self):
        registry = ServiceRegistry()
        route = RouteConfig(pattern="/svc/{x}", transform="missing")

        with pytest.raises(TemplateError, match="missing"):
            registry.register("svc", "GET", {}, route=route)

    def test_bad_pattern_leaves_no_entry(self):
        registry = ServiceRegistry()
        route = RouteConfig(pattern="/svc/{bad-name}", transform="route_plan")

        with pytest.raises(TemplateError, match="Invalid route pattern"):
            registry.register("svc", "GET", {}, route=route)

        assert len(registry) == 0
        assert registry.match_route("/svc/x", "GET") is None

    def test_bad_pattern_keeps_previous_registration(self, route_plan_template):
        registry = ServiceRegistry()
        good = RouteConfig(pattern="/svc/{ruta_id}/{fecha}", transform="route_plan")
        registry.register("svc", "GET", route_plan_template, route=good)

        with pytest.raises(TemplateError):
            registry.register("svc", "GET", {}, route=RouteConfig(pattern="/svc/{a b}"))

        assert registry.load_template("svc", "GET") == route_plan_template
        assert registry.match_route("/svc/P-1/2025-06-02", "GET") is not None

    def test_register_rejects_bad_method(self):
        with pytest.raises(ValidationError):
            ServiceRegistry().register("svc", "FETCH", {})


class TestServiceNames:
    """Tests for service name validation."""

    @pytest.mark.parametrize("name", ["plan_de_ruta", "svc1", "A", "a" * 50])
    def test_valid(self, name):
        assert validate_service_name(name)

    @pytest.mark.parametrize("name", ["", "_svc", "svc_", "mi-servicio", "a b", "a" * 51, "../etc"])
    def test_invalid(self, name):
        assert not validate_service_name(name)


class TestManagement:
    """Tests for create, upload and delete."""

    def test_create_service(self, services_dir, registry):
        path = registry.create_service("nuevo_servicio")

        assert path == services_dir / "nuevo_servicio"
        assert path.is_dir()

    def test_create_existing_conflicts(self, registry):
        with pytest.raises(ConflictError) as exc_info:
            registry.create_service("plan_de_ruta")
        assert exc_info.value.status_code == 409

    def test_create_invalid_name(self, registry):
        with pytest.raises(ValidationError):
            registry.create_service("_oculto")

    def test_save_static_fixture(self, services_dir, registry):
        registry.create_service("pedidos")

        path = registry.save_mock_file("pedidos", "post", {"ok": True})

        assert path == services_dir / "pedidos" / "pedidos-POST.json"
        assert json.loads(path.read_text(encoding="utf-8")) == {"ok": True}
        assert registry.load_template("pedidos", "POST") == {"ok": True}

    def test_save_over_dynamic_route_keeps_transform(self, services_dir, registry, route_plan_template):
        path = registry.save_mock_file("plan_de_ruta", "GET", route_plan_template)

        assert path == services_dir / "plan_de_ruta" / "template.json"
        assert registry.get_entry("plan_de_ruta", "GET").transform_key == "route_plan"
        assert registry.load_template("plan_de_ruta", "GET") == route_plan_template

    def test_saved_fixture_survives_rediscovery(self, services_dir, registry):
        registry.save_mock_file("catalogo_productos", "PUT", {"actualizado": True})

        reloaded = ServiceRegistry(str(services_dir))
        reloaded.discover()

        assert reloaded.load_template("catalogo_productos", "PUT") == {"actualizado": True}

    def test_save_invalid_method(self, registry):
        with pytest.raises(ValidationError, match="PATCH"):
            registry.save_mock_file("catalogo_productos", "PATCH", {})

    def test_delete_service(self, services_dir, registry):
        registry.delete_service("catalogo_productos")

        assert not (services_dir / "catalogo_productos").exists()
        assert ("catalogo_productos", "GET") not in registry

    def test_delete_dynamic_service_drops_route(self, registry):
        registry.delete_service("plan_de_ruta")

        assert registry.match_route("/plan-de-ruta/P-0007/2025-06-02", "GET") is None

    def test_delete_unknown(self, registry):
        with pytest.raises(NotFoundError):
            registry.delete_service("fantasma")
