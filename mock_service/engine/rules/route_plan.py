"""Route-plan rules.

Enriches a static route plan (an advisor's ordered client visits, each
with its recommendations) according to the route type and the visit date.
"""

from typing import Any, Dict, Iterator

from ...constants import (
    END_OF_MONTH_THRESHOLD,
    FRIDAY,
    FRIDAY_DISCOUNT_MULTIPLIER,
    MONDAY,
    OPTIMIZATION_SCORE_RANGE,
    PREMIUM_ROUTE_CODE,
    PREMIUM_SALES_MULTIPLIER,
    REC_DYNAMIC_OFFER,
    REC_STOCK_ALERT,
    REC_VOLUME_RECOVERY,
    WEEKDAY_NAMES,
)
from ..context import parse_date, require_param
from ..pipeline import Rule, TransformState


def _recommendations(document: Dict[str, Any]) -> Iterator[Dict[str, Any]]:
    for cliente in document["clientes_en_ruta"]:
        yield from cliente["recomendaciones"]


def derive_route_facts(state: TransformState) -> None:
    """Parse ``ruta_id`` and ``fecha`` into the labels the other rules key on."""
    ruta_id = require_param(state.params, "ruta_id")
    fecha = parse_date(state.params, "fecha")
    
    route_code = ruta_id[:1]
    weekday = fecha.isoweekday() % 7  # 0 = Sunday
    
    state.derived.update(
        ruta_id=ruta_id,
        fecha=fecha,
        premium=route_code == PREMIUM_ROUTE_CODE,
        weekday=weekday,
        day_of_month=fecha.day,
        route_label="Premium" if route_code == PREMIUM_ROUTE_CODE else "Estándar",
        weekday_label=WEEKDAY_NAMES[weekday],
    )


def is_premium(state: TransformState) -> bool:
    return state.derived["premium"]


def is_monday(state: TransformState) -> bool:
    return state.derived["weekday"] == MONDAY


def is_friday(state: TransformState) -> bool:
    return state.derived["weekday"] == FRIDAY


def is_end_of_month(state: TransformState) -> bool:
    return state.derived["day_of_month"] > END_OF_MONTH_THRESHOLD


def premium_route_boost(state: TransformState) -> None:
    """Escalate medium priorities and tag ids with the route on premium routes.
    
    The summary counters move by a fixed two regardless of how many
    recommendations were escalated, so ``prioridad_media`` can go negative
    on routes with fewer than two medium recommendations.
    """
    document = state.document
    ruta_id = state.derived["ruta_id"]
    
    for rec in _recommendations(document):
        if rec["prioridad"] == "media":
            rec["prioridad"] = "alta"
        rec["recomendacion_id"] = f"{rec['recomendacion_id']}-{ruta_id}"
    
    resumen = document["resumen_ruta"]
    resumen["prioridad_alta"] += 2
    resumen["prioridad_media"] -= 2
    resumen["potencial_venta_total"] *= PREMIUM_SALES_MULTIPLIER


def monday_stock_priority(state: TransformState) -> None:
    """Stock shortage alerts become critical on Mondays."""
    resumen = state.document["resumen_ruta"]
    for rec in _recommendations(state.document):
        if rec["tipo"] == REC_STOCK_ALERT:
            previous = rec["prioridad"]
            if previous != "critica":
                resumen[f"prioridad_{previous}"] -= 1
                resumen["prioridad_critica"] += 1
            rec["prioridad"] = "critica"
            rec["payload"]["urgencia_dia"] = "lunes_critico"


def friday_offer_boost(state: TransformState) -> None:
    """Dynamic offers get a 50% larger discount on Fridays."""
    for rec in _recommendations(state.document):
        if rec["tipo"] == REC_DYNAMIC_OFFER:
            payload = rec["payload"]
            payload["descuento_porcentaje"] = payload["descuento_porcentaje"] * FRIDAY_DISCOUNT_MULTIPLIER
            payload["urgencia_dia"] = "viernes_especial"


def volume_recovery_recommendation(cliente_id: str, days_left: int) -> Dict[str, Any]:
    return {
        "recomendacion_id": f"rec-vol-{cliente_id}",
        "tipo": REC_VOLUME_RECOVERY,
        "titulo_accion": "Impulso fin de mes",
        "prioridad": "alta",
        "payload": {
            "objetivo_mes": "Alcanzar meta mensual",
            "incentivo_disponible": "Descuento 10% compras mayores a $5000",
            "dias_restantes": days_left,
        },
        "feedback_config": {
            "opciones": ["Interesado", "Pedirá cotización", "No aplicable", "Pospondrá"],
            "comentario_habilitado": True,
        },
    }


def end_of_month_volume(state: TransformState) -> None:
    """Push volume recovery on every client during the last days of the month."""
    document = state.document
    clientes = document["clientes_en_ruta"]
    days_left = 31 - state.derived["day_of_month"]
    
    appended = 0
    for cliente in clientes:
        recomendaciones = cliente["recomendaciones"]
        if not any(rec["tipo"] == REC_VOLUME_RECOVERY for rec in recomendaciones):
            rec = volume_recovery_recommendation(cliente["cliente_id"], days_left)
            recomendaciones.append(rec)
            appended += 1
    
    resumen = document["resumen_ruta"]
    resumen["prioridad_alta"] += appended
    # The total grows by the client count even when a client was skipped
    resumen["total_recomendaciones"] += len(clientes)
    resumen["enfoque_especial"] = "fin_de_mes"


def estimate_visit_time(state: TransformState) -> None:
    resumen = state.document["resumen_ruta"]
    hours = max(2.0, resumen["total_recomendaciones"] * 0.15 + 1.5)
    resumen["tiempo_estimado_visitas"] = f"{hours:.1f} horas"


def annotate_analytics(state: TransformState) -> None:
    low, high = OPTIMIZATION_SCORE_RANGE
    state.document["analytics"] = {
        "tipo_ruta": state.derived["route_label"],
        "dia_semana": state.derived["weekday_label"],
        "factores_aplicados": list(state.applied),
        "score_optimizacion": state.rng.randint(low, high),
    }


def trace_request(state: TransformState) -> None:
    metadata = state.document["metadata"]
    metadata["generado_en"] = state.context.timestamp
    metadata["request_id"] = state.context.request_id
    metadata["parametros_procesados"] = {
        "ruta_id": state.derived["ruta_id"],
        "fecha": state.derived["fecha"].isoformat(),
        "tipo_ruta_detectado": state.derived["route_label"],
        "dia_semana_detectado": state.derived["weekday_label"],
    }


ROUTE_PLAN_RULES = (
    Rule("derive_route_facts", derive_route_facts),
    Rule("premium_route_boost", premium_route_boost, is_premium, factor="premium_route_boost"),
    Rule("monday_stock_priority", monday_stock_priority, is_monday, factor="monday_stock_priority"),
    Rule("friday_offer_boost", friday_offer_boost, is_friday, factor="friday_offer_boost"),
    Rule("end_of_month_volume", end_of_month_volume, is_end_of_month, factor="end_of_month_volume"),
    Rule("estimate_visit_time", estimate_visit_time),
    Rule("annotate_analytics", annotate_analytics),
    Rule("trace_request", trace_request),
)
