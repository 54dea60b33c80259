"""Centralized constants and configuration values.

Values that may differ between environments are read from environment
variables; business lookup tables used by the transforms live here too.
"""

import os


# =============================================================================
# Service Storage & Serving Defaults
# =============================================================================

SERVICES_DIR = os.getenv("MOCK_SERVICES_DIR", "services")
API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("API_PORT", "8080"))

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE")

ROUTES_FILE = "routes.json"
TEMPLATE_FILE = "template.json"

MAX_SERVICE_NAME_LENGTH = 50


# =============================================================================
# Recommendation Domain
# =============================================================================

PRIORITIES = ("baja", "media", "alta", "critica")

REC_STOCK_ALERT = "ALERTA_QUIEBRE_STOCK"
REC_PORTFOLIO = "SUGERENCIA_PORTAFOLIO"
REC_DYNAMIC_OFFER = "OFERTA_DINAMICA"
REC_SALES_ARGUMENT = "ARGUMENTO_VENTA"
REC_NON_REGULAR = "INICIATIVA_NO_REGULAR"
REC_OPTIMAL_ORDER = "PEDIDO_OPTIMO"
REC_GREETING = "SALUDO_CONSULTIVO"
REC_VOLUME_RECOVERY = "RECUPERACION_VOLUMEN"

RECOMMENDATION_TYPES = (
    REC_STOCK_ALERT,
    REC_PORTFOLIO,
    REC_DYNAMIC_OFFER,
    REC_SALES_ARGUMENT,
    REC_NON_REGULAR,
    REC_OPTIMAL_ORDER,
    REC_GREETING,
    REC_VOLUME_RECOVERY,
)

# 0 = Sunday
WEEKDAY_NAMES = ("Domingo", "Lunes", "Martes", "Miércoles", "Jueves", "Viernes", "Sábado")
MONDAY = 1
FRIDAY = 5

END_OF_MONTH_THRESHOLD = 25
PREMIUM_ROUTE_CODE = "P"
PREMIUM_SALES_MULTIPLIER = 1.25
FRIDAY_DISCOUNT_MULTIPLIER = 1.5
OPTIMIZATION_SCORE_RANGE = (80, 99)


# =============================================================================
# Client History Synthesis
# =============================================================================

CLIENT_TYPES = ("regular", "premium", "nuevo", "esporádico")
CLIENT_NAMES = (
    "Tienda La Esquina",
    "Supermercado Don Luis",
    "Abarrotes El Buen Precio",
    "Minisuper Central",
    "Comercial Familiar",
    "Tienda de la Colonia",
)
PRODUCT_CATALOG = ("355ML", "600ML", "1L", "2L", "SNACKS_FAMILIARES", "PREMIUM_500ML")

MAX_PURCHASES = 5
CASE_SIZE = 12
MIN_UNIT_PRICE = 15.50
UNIT_PRICE_SPREAD = 20.0
CREDIT_THRESHOLD = 0.6  # draws above this pay on credit
ADVISOR_BASE = 77
GROWTH_AMOUNT_THRESHOLD = 2000
