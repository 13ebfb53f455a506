from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

VALIDATION_MESSAGE = "出発地と目的地を入力してください"
NO_ROUTE_MESSAGE = "経路が見つかりませんでした"
ROUTE_SERVICE_MESSAGE = "経路検索サービスでエラーが発生しました"

START_MARKER_LABEL = "出発地"
DESTINATION_MARKER_LABEL = "目的地"

SEARCH_BUTTON_LABEL = "経路を検索"
BUSY_BUTTON_LABEL = "検索中..."


def place_not_found_message(query: str) -> str:
    return f"「{query}」が見つかりませんでした"


def geocode_service_message(query: str) -> str:
    return f"「{query}」の検索中にエラーが発生しました"


def meters_to_km(meters: float) -> str:
    """12345 -> '12.3'. One decimal, half-up."""
    km = Decimal(str(meters)) / Decimal(1000)
    return str(km.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def seconds_to_minutes(seconds: float) -> int:
    """125 -> 2. Nearest whole minute, half-up."""
    minutes = Decimal(str(seconds)) / Decimal(60)
    return int(minutes.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def distance_label(distance_km: str) -> str:
    return f"{distance_km} km"


def duration_label(duration_min: int) -> str:
    return f"{duration_min} 分"
