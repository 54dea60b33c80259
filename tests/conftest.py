"""Pytest configuration and shared fixtures."""

import shutil
import sys
from pathlib import Path

import pytest

# Add the repository root to path for all tests
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from mock_service.engine import (
    ScriptedRandomSource,
    SeededRandomSource,
    build_context,
    clone_template,
    extract_parameters,
)
from mock_service.engine.transforms import TRANSFORMS


def _recommendation(rec_id, tipo, prioridad, payload=None):
    return {
        "recomendacion_id": rec_id,
        "tipo": tipo,
        "titulo_accion": f"Acción {rec_id}",
        "prioridad": prioridad,
        "payload": payload or {},
        "feedback_config": {"opciones": ["Aceptado", "Rechazado"], "comentario_habilitado": True},
    }


@pytest.fixture
def route_plan_template():
    """Two clients, four recommendations, counters consistent with the list."""
    return {
        "metadata": {"version": "1.0"},
        "resumen_ruta": {
            "total_recomendaciones": 4,
            "prioridad_critica": 0,
            "prioridad_alta": 2,
            "prioridad_media": 2,
            "prioridad_baja": 0,
            "potencial_venta_total": 10000.0,
            "tiempo_estimado_visitas": "2.1 horas",
            "enfoque_especial": None,
        },
        "clientes_en_ruta": [
            {
                "cliente_id": "C001",
                "recomendaciones": [
                    _recommendation("r1", "ALERTA_QUIEBRE_STOCK", "alta", {"sku": "600ML"}),
                    _recommendation("r2", "OFERTA_DINAMICA", "media", {"descuento_porcentaje": 10}),
                ],
            },
            {
                "cliente_id": "C002",
                "recomendaciones": [
                    _recommendation("r3", "SUGERENCIA_PORTAFOLIO", "media", {"sku": "1L"}),
                    _recommendation("r4", "RECUPERACION_VOLUMEN", "alta", {"sku": "2L"}),
                ],
            },
        ],
    }


@pytest.fixture
def client_history_template():
    """Empty client-history skeleton."""
    return {
        "metadata": {"version": "1.0"},
        "informacion_cliente": {"cliente_id": "{{cliente_id}}", "nombre": None, "tipo_cliente": None},
        "periodo": {"fecha_desde": "{{fecha_desde}}", "fecha_hasta": "{{fecha_hasta}}", "dias_consultados": 0},
        "historial_compras": [],
        "resumen_periodo": {
            "total_pedidos": 0,
            "monto_total": 0,
            "promedio_por_pedido": 0,
            "productos_mas_comprados": [],
            "frecuencia_compra_dias": 0,
        },
        "tendencias": {
            "crecimiento_vs_periodo_anterior": None,
            "productos_en_alza": [],
            "productos_en_baja": [],
            "score_fidelidad": 0,
        },
    }


@pytest.fixture
def context():
    """Fixed request context."""
    return build_context("2025-06-02T08:00:00.000Z", "req-0001")


@pytest.fixture
def seeded_rng():
    """Reproducible randomness source."""
    return SeededRandomSource(42)


@pytest.fixture
def half_rng():
    """Scripted source that always draws 0.5."""
    return ScriptedRandomSource([0.5])


@pytest.fixture
def run_transform(context):
    """Run a named transform over a clone of ``template``."""
    def _run(name, template, params, rng=None, ctx=None):
        return TRANSFORMS[name].run(
            clone_template(template),
            extract_parameters(params),
            ctx or context,
            rng or SeededRandomSource(42),
        )
    return _run


@pytest.fixture
def services_dir(tmp_path):
    """Writable copy of the bundled services directory."""
    target = tmp_path / "services"
    shutil.copytree(ROOT / "services", target)
    return target
