"""
Service de calcul des temps / Time calculation service.
Conversions HH:MM, temps de trajet et arithmétique des dates ISO.
HH:MM conversions, travel time and ISO date arithmetic.
"""

import math
from datetime import date, datetime, timedelta, timezone


class TimeCalculatorService:
    """Calcul des temps de rendez-vous / Appointment time calculation."""

    @staticmethod
    def time_to_minutes(time_str: str) -> int:
        """Convertir HH:MM en minutes depuis minuit / Convert HH:MM to minutes since midnight."""
        hours, mins = map(int, time_str[:5].split(":"))
        return hours * 60 + mins

    @staticmethod
    def minutes_to_time(total_minutes: int) -> str:
        """Convertir des minutes en HH:MM (sans bouclage) / Convert minutes to HH:MM (no wrap-around)."""
        return f"{total_minutes // 60:02d}:{total_minutes % 60:02d}"

    @staticmethod
    def add_minutes_to_time(time_str: str, minutes: int) -> str:
        """
        Ajouter des minutes à un horaire HH:MM / Add minutes to a HH:MM time string.
        Le résultat peut dépasser 23:59 ; la validation du créneau le rejette.
        The result may go past 23:59; slot validation rejects it.
        """
        return TimeCalculatorService.minutes_to_time(TimeCalculatorService.time_to_minutes(time_str) + minutes)

    @staticmethod
    def travel_minutes(distance_km: float, speed_kmh: float) -> float:
        """Temps de route exact en minutes / Exact travel time in minutes."""
        if speed_kmh <= 0:
            return 0.0
        return distance_km / speed_kmh * 60

    @staticmethod
    def required_buffer_minutes(distance_km: float, speed_kmh: float, margin_factor: float = 1.0) -> int:
        """Battement minimal arrondi à la minute supérieure / Minimum gap, rounded up to the minute."""
        return math.ceil(TimeCalculatorService.travel_minutes(distance_km, speed_kmh) * margin_factor)

    @staticmethod
    def parse_date(date_str: str) -> date:
        """Parse YYYY-MM-DD."""
        return date.fromisoformat(date_str)

    @staticmethod
    def add_days(date_str: str, days: int) -> str:
        """Ajouter des jours à une date ISO / Add days to an ISO date."""
        return (date.fromisoformat(date_str) + timedelta(days=days)).isoformat()

    @staticmethod
    def combine(date_str: str, time_str: str) -> datetime:
        """Date ISO + HH:MM -> datetime local (sans fuseau) / Naive local datetime."""
        return datetime.combine(date.fromisoformat(date_str), datetime.strptime(time_str[:5], "%H:%M").time())

    @staticmethod
    def format_local(dt: datetime) -> str:
        """Format datetime-local YYYY-MM-DDTHH:MM."""
        return dt.strftime("%Y-%m-%dT%H:%M")

    @staticmethod
    def now_iso() -> str:
        """Horodatage UTC ISO 8601 / UTC ISO 8601 timestamp."""
        return datetime.now(timezone.utc).isoformat(timespec="seconds")
