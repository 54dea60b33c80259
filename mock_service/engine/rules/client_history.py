"""Client-history rules.

Synthesizes a plausible purchase history for a client over a date range
and derives the period summary, product ranking and trend scores from it.
"""

import math
from datetime import datetime, timedelta
from typing import Any, Dict, List

from ...constants import (
    ADVISOR_BASE,
    CASE_SIZE,
    CLIENT_NAMES,
    CLIENT_TYPES,
    CREDIT_THRESHOLD,
    GROWTH_AMOUNT_THRESHOLD,
    MAX_PURCHASES,
    MIN_UNIT_PRICE,
    PRODUCT_CATALOG,
    UNIT_PRICE_SPREAD,
)
from ..context import parse_client_index, parse_date, require_param
from ..pipeline import Rule, TransformState


def _round2(value: float) -> float:
    return round(value, 2)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_period(state: TransformState) -> None:
    """Day count between ``fecha_desde`` and ``fecha_hasta`` (absolute)."""
    desde = parse_date(state.params, "fecha_desde")
    hasta = parse_date(state.params, "fecha_hasta")
    days = abs((hasta - desde).days)

    state.derived.update(desde=desde, hasta=hasta, period_days=days)
    state.document["periodo"]["dias_consultados"] = days


def synthesize_client_profile(state: TransformState) -> None:
    """Pick a deterministic name and client type from the client index."""
    index = parse_client_index(state.params, "cliente_id")
    client_type = CLIENT_TYPES[index % len(CLIENT_TYPES)]

    info = state.document["informacion_cliente"]
    info["nombre"] = CLIENT_NAMES[index % len(CLIENT_NAMES)]
    info["tipo_cliente"] = client_type

    state.derived.update(client_index=index, client_type=client_type)


def _random_date(state: TransformState) -> str:
    start = datetime.combine(state.derived["desde"], datetime.min.time())
    end = datetime.combine(state.derived["hasta"], datetime.min.time())
    offset = state.rng.random() * (end - start).total_seconds()
    return (start + timedelta(seconds=offset)).date().isoformat()


def _synthesize_items(state: TransformState) -> List[Dict[str, Any]]:
    rng = state.rng
    items = []
    for _ in range(rng.randint(1, 3)):
        sku = rng.choice(PRODUCT_CATALOG)
        quantity = rng.randint(1, 3) * CASE_SIZE
        unit_price = MIN_UNIT_PRICE + rng.random() * UNIT_PRICE_SPREAD
        items.append({
            "sku": sku,
            "cantidad": quantity,
            "precio_unitario": _round2(unit_price),
            "subtotal": _round2(quantity * unit_price),
        })
    return items


def synthesize_purchase_history(state: TransformState) -> None:
    """Generate up to five purchases, never more than the period has days."""
    rng = state.rng
    num_purchases = min(state.derived["period_days"], rng.randint(1, MAX_PURCHASES))
    advisor = f"A-{ADVISOR_BASE + state.derived['client_index'] % 5}"

    history = []
    for i in range(num_purchases):
        fecha = _random_date(state)
        items = _synthesize_items(state)
        history.append({
            "fecha": fecha,
            "pedido_id": f"PED-{i + 1:03d}",
            "items": items,
            "total": _round2(sum(item["subtotal"] for item in items)),
            "forma_pago": "credito" if rng.random() > CREDIT_THRESHOLD else "contado",
            "asesor": advisor,
        })

    state.document["historial_compras"] = history


def aggregate_period(state: TransformState) -> None:
    history = state.document["historial_compras"]
    orders = len(history)
    total_amount = _round2(sum(purchase["total"] for purchase in history))
    days = state.derived["period_days"]

    resumen = state.document["resumen_periodo"]
    resumen["total_pedidos"] = orders
    resumen["monto_total"] = total_amount
    resumen["promedio_por_pedido"] = _round2(total_amount / orders) if orders > 0 else 0
    resumen["frecuencia_compra_dias"] = round(days / orders, 1) if orders > 1 else days

    state.derived.update(orders=orders, total_amount=total_amount)


def rank_products(state: TransformState) -> None:
    """Rank SKUs by purchased quantity; ties keep first-seen order."""
    quantities: Dict[str, int] = {}
    for purchase in state.document["historial_compras"]:
        for item in purchase["items"]:
            quantities[item["sku"]] = quantities.get(item["sku"], 0) + item["cantidad"]

    ranking = [sku for sku, _ in sorted(quantities.items(), key=lambda kv: kv[1], reverse=True)]

    state.document["resumen_periodo"]["productos_mas_comprados"] = ranking[:3]
    state.derived["product_ranking"] = ranking


def score_trends(state: TransformState) -> None:
    """Growth estimate, trending products and the loyalty score."""
    rng = state.rng
    orders = state.derived["orders"]
    total_amount = state.derived["total_amount"]
    days = state.derived["period_days"]
    ranking = state.derived["product_ranking"]

    growth_client = (
        state.derived["client_type"] == "premium"
        or total_amount > GROWTH_AMOUNT_THRESHOLD
    )
    if growth_client:
        growth = f"+{rng.uniform(5, 25):.1f}%"
    else:
        growth = f"{rng.uniform(-15, 15):.1f}%"

    # Zero-day periods have no purchases and no frequency to speak of
    frequency_score = min(100.0, orders / days * 100 * 30) if days > 0 else 0.0
    amount_score = min(100.0, total_amount / 50)

    tendencias = state.document["tendencias"]
    tendencias["crecimiento_vs_periodo_anterior"] = growth
    tendencias["productos_en_alza"] = ranking[:2]
    tendencias["productos_en_baja"] = ranking[-1:] if len(ranking) > 3 else []
    tendencias["score_fidelidad"] = _round_half_up((frequency_score + amount_score) / 2)

    state.derived["growth_client"] = growth_client


def trace_request(state: TransformState) -> None:
    metadata = state.document["metadata"]
    metadata["generado_en"] = state.context.timestamp
    metadata["total_registros"] = state.derived["orders"]
    metadata["request_id"] = state.context.request_id
    metadata["parametros_procesados"] = {
        "cliente_id": require_param(state.params, "cliente_id"),
        "fecha_desde": state.derived["desde"].isoformat(),
        "fecha_hasta": state.derived["hasta"].isoformat(),
        "dias_periodo": state.derived["period_days"],
        "tipo_cliente_detectado": state.derived["client_type"],
    }


CLIENT_HISTORY_RULES = (
    Rule("compute_period", compute_period),
    Rule("synthesize_client_profile", synthesize_client_profile),
    Rule("synthesize_purchase_history", synthesize_purchase_history),
    Rule("aggregate_period", aggregate_period),
    Rule("rank_products", rank_products),
    Rule("score_trends", score_trends),
    Rule("trace_request", trace_request),
)
